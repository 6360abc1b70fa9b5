"""
Unit tests for CSV/Excel export and the estimate draft.
"""

import io

import openpyxl
import pytest

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.audit_engine import audit
from blueprint_takeoff.services.pricing import compute_totals
from blueprint_takeoff.services.takeoff_export import (
    CSV_HEADER,
    build_estimate_draft,
    export_takeoff_to_csv,
    export_takeoff_to_excel,
)
from blueprint_takeoff.services.takeoff_models import BlueprintParams


@pytest.fixture
def named_params():
    return BlueprintParams(project_name="Oak Lane Residence")


class TestCsvExport:
    """Tests for the CSV download."""

    def test_layout(self, default_takeoff, default_params):
        result = export_takeoff_to_csv(default_takeoff, default_params)
        lines = result.file_bytes.decode("utf-8").split("\n")

        assert result.success
        assert result.filename == "takeoff.csv"
        assert result.row_count == len(default_takeoff)
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1].startswith("1,Foundation,")
        assert lines[-3] == ""
        material_total = compute_totals(default_takeoff, default_params.sqft).material_total
        assert lines[-2] == f"TOTAL,,,,,,,${material_total:.2f}"

    def test_confidence_and_money_columns(self, default_takeoff, default_params):
        text = export_takeoff_to_csv(default_takeoff, default_params).file_bytes.decode("utf-8")
        shingles = [line for line in text.split("\n") if "Arch. Shingles" in line][0]
        assert shingles.endswith(",32,SQ,$115.00,$3680.00,94%")

    def test_filename_from_project(self, default_takeoff, named_params):
        assert export_takeoff_to_csv(default_takeoff, named_params).filename == "Oak_Lane_Residence.csv"


class TestExcelExport:
    """Tests for the workbook export."""

    def test_sheets(self, default_takeoff, default_params):
        result = export_takeoff_to_excel(default_takeoff, default_params, audit_result=audit(default_takeoff, default_params))
        assert result.success
        assert result.filename == "takeoff.xlsx"

        wb = openpyxl.load_workbook(io.BytesIO(result.file_bytes))
        assert wb.sheetnames == ["Takeoff", "Summary", "Audit"]
        assert wb["Takeoff"]["A1"].value == "Line"
        assert wb["Takeoff"]["A2"].value == "Foundation"
        assert wb["Audit"]["A1"].value.startswith("Score 92")

    def test_without_audit(self, default_takeoff, default_params):
        result = export_takeoff_to_excel(default_takeoff, default_params)
        wb = openpyxl.load_workbook(io.BytesIO(result.file_bytes))
        assert wb.sheetnames == ["Takeoff", "Summary"]

    def test_summary_totals(self, default_takeoff, default_params):
        result = export_takeoff_to_excel(default_takeoff, default_params)
        ws = openpyxl.load_workbook(io.BytesIO(result.file_bytes))["Summary"]
        labels = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value for r in range(1, ws.max_row + 1)}
        totals = compute_totals(default_takeoff, default_params.sqft)
        assert labels["Grand Total"] == round(totals.grand_total, 2)
        assert labels["Materials"] == round(totals.material_total, 2)


class TestEstimateDraft:
    """Tests for the estimate payload."""

    def test_default_title(self, default_takeoff, default_params):
        draft = build_estimate_draft(default_takeoff, default_params)
        assert draft["title"] == "2,400 SF Residential — Material Takeoff"
        assert draft["description"].startswith("Blueprint takeoff for a 2400 SF, 1-story, 3BR/2BA residence")

    def test_project_title(self, default_takeoff, named_params):
        assert build_estimate_draft(default_takeoff, named_params)["title"] == "Oak Lane Residence — Material Takeoff"

    def test_money(self, default_takeoff, default_params):
        draft = build_estimate_draft(default_takeoff, default_params)
        assert draft["markup_percent"] == 18
        assert draft["total_amount"] == pytest.approx(draft["subtotal"] + draft["markup_amount"])
        assert draft["confidence_score"] == 0.88
        assert len(draft["assumptions"]) == 5

    def test_text_follows_configured_rates(self, default_takeoff, default_params, monkeypatch):
        monkeypatch.setattr(settings, "labor_multiplier", 1.5)
        monkeypatch.setattr(settings, "overhead_rate", 0.2)
        draft = build_estimate_draft(default_takeoff, default_params)
        assert "Labor estimated at 1.5× material cost" in draft["assumptions"]
        assert "20% overhead & profit applied on subtotal" in draft["assumptions"]
        assert draft["line_items"][-1]["description"].endswith("(1.5× materials)")
        assert draft["markup_percent"] == 20

    def test_default_assumption_text(self, default_takeoff, default_params):
        draft = build_estimate_draft(default_takeoff, default_params)
        assert "Labor estimated at 1.35× material cost" in draft["assumptions"]
        assert "18% overhead & profit applied on subtotal" in draft["assumptions"]

    def test_line_items(self, default_takeoff, default_params):
        draft = build_estimate_draft(default_takeoff, default_params)
        lines = draft["line_items"]
        assert len(lines) == len(default_takeoff) + 1
        assert lines[-1]["category"] == "Labor & Installation"
        assert lines[-1]["unit"] == "LS"
        assert "incl. 12% waste" in [l for l in lines if l["unit"] == "SQ"][0]["description"]

    def test_empty_rejected(self, default_params):
        with pytest.raises(ValueError):
            build_estimate_draft([], default_params)
