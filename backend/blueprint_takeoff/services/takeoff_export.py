"""
Takeoff Export Service

CSV and Excel downloads of a takeoff, plus the estimate draft payload handed
to estimate creation.
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.pricing import category_totals, compute_totals
from blueprint_takeoff.services.takeoff_models import (
    AuditResult,
    BlueprintParams,
    LayerStatus,
    TakeoffItem,
    round_half_up,
)

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Result of a takeoff export."""
    success: bool
    filename: str
    file_bytes: Optional[bytes] = None
    error: Optional[str] = None
    row_count: int = 0


COLORS = {
    "header_bg": "1F4E79",  # Dark blue
    "header_fg": "FFFFFF",  # White
    "category_bg": "D9E2F3",  # Light blue
    "total_bg": "FFC000",  # Gold
    "pass_bg": "E2EFDA",
    "warn_bg": "FFF2CC",
    "fail_bg": "F8CBAD",
}

CSV_HEADER = ["Line", "Category", "Material", "Qty", "Unit", "Unit Cost", "Total", "Confidence"]


def export_filename(params: BlueprintParams, extension: str) -> str:
    base = "_".join((params.project_name or "takeoff").split())
    return f"{base}.{extension}"


# ==================
# CSV
# ==================

def export_takeoff_to_csv(items: List[TakeoffItem], params: BlueprintParams) -> ExportResult:
    """One row per line, a blank row, then the material total."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for index, item in enumerate(items, start=1):
        writer.writerow([
            index,
            item.category,
            item.name,
            item.quantity,
            item.unit,
            f"${item.cost:.2f}",
            f"${item.total_cost:.2f}",
            f"{item.confidence * 100:.0f}%",
        ])
    writer.writerow([])
    material_total = compute_totals(items, params.sqft).material_total
    writer.writerow(["TOTAL", "", "", "", "", "", "", f"${material_total:.2f}"])

    return ExportResult(
        success=True,
        filename=export_filename(params, "csv"),
        file_bytes=buffer.getvalue().encode("utf-8"),
        row_count=len(items),
    )


# ==================
# EXCEL
# ==================

def export_takeoff_to_excel(
    items: List[TakeoffItem],
    params: BlueprintParams,
    audit_result: Optional[AuditResult] = None,
) -> ExportResult:
    """
    Export a takeoff to an Excel workbook.

    Sheets: Takeoff (lines grouped by trade), Summary (pricing roll-up) and,
    when an audit is given, Audit (layers and findings).

    Returns:
        ExportResult with file bytes
    """
    try:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        _create_takeoff_sheet(wb, items)
        _create_summary_sheet(wb, items, params)
        if audit_result is not None:
            _create_audit_sheet(wb, audit_result)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return ExportResult(
            success=True,
            filename=export_filename(params, "xlsx"),
            file_bytes=buffer.getvalue(),
            row_count=len(items),
        )

    except Exception as e:
        logger.error(f"Excel export error: {e}")
        return ExportResult(success=False, filename="", error=str(e))


def _header_row(ws, row: int, labels: List[str]) -> None:
    header_font = Font(bold=True, color=COLORS["header_fg"])
    header_fill = PatternFill(start_color=COLORS["header_bg"], end_color=COLORS["header_bg"], fill_type="solid")
    for col, label in enumerate(labels, start=1):
        cell = ws.cell(row=row, column=col, value=label)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def _autofit(ws, widths: List[int]) -> None:
    for col, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width


def _create_takeoff_sheet(wb, items: List[TakeoffItem]) -> None:
    ws = wb.create_sheet("Takeoff")
    _header_row(ws, 1, CSV_HEADER + ["Net Qty", "Waste"])
    category_fill = PatternFill(start_color=COLORS["category_bg"], end_color=COLORS["category_bg"], fill_type="solid")

    row = 2
    current_category = None
    for index, item in enumerate(items, start=1):
        if item.category != current_category:
            current_category = item.category
            ws.cell(row=row, column=1, value=current_category).font = Font(bold=True)
            for col in range(1, len(CSV_HEADER) + 3):
                ws.cell(row=row, column=col).fill = category_fill
            row += 1

        ws.cell(row=row, column=1, value=index)
        ws.cell(row=row, column=2, value=item.category)
        ws.cell(row=row, column=3, value=item.name)
        ws.cell(row=row, column=4, value=item.quantity)
        ws.cell(row=row, column=5, value=item.unit)
        ws.cell(row=row, column=6, value=item.cost).number_format = "$#,##0.00"
        ws.cell(row=row, column=7, value=item.total_cost).number_format = "$#,##0.00"
        ws.cell(row=row, column=8, value=item.confidence).number_format = "0%"
        ws.cell(row=row, column=9, value=item.raw_qty)
        ws.cell(row=row, column=10, value=item.waste).number_format = "0.00"
        row += 1

    total_fill = PatternFill(start_color=COLORS["total_bg"], end_color=COLORS["total_bg"], fill_type="solid")
    ws.cell(row=row, column=1, value="TOTAL").font = Font(bold=True)
    total_cell = ws.cell(row=row, column=7, value=round(sum(i.total_cost for i in items), 2))
    total_cell.number_format = "$#,##0.00"
    total_cell.font = Font(bold=True)
    for col in range(1, len(CSV_HEADER) + 3):
        ws.cell(row=row, column=col).fill = total_fill

    ws.freeze_panes = "A2"
    _autofit(ws, [6, 16, 30, 8, 6, 12, 14, 12, 9, 8])


def _create_summary_sheet(wb, items: List[TakeoffItem], params: BlueprintParams) -> None:
    ws = wb.create_sheet("Summary")
    totals = compute_totals(items, params.sqft)

    ws["A1"] = params.project_name or "Material Takeoff"
    ws["A1"].font = Font(bold=True, size=16)
    ws.merge_cells("A1:C1")
    ws["A2"] = "Generated:"
    ws["B2"] = datetime.now().strftime("%Y-%m-%d %H:%M")
    ws["A3"] = "Building:"
    ws["B3"] = (
        f"{params.sqft:,.0f} SF, {params.stories}-story, {params.bedrooms}BR/{params.bathrooms:g}BA, "
        f"{params.foundation_type.value} foundation, {params.roof_type.value} roof"
    )

    row = 5
    _header_row(ws, row, ["Trade", "Materials", "$/SF"])
    for category, amount in category_totals(items).items():
        row += 1
        ws.cell(row=row, column=1, value=category)
        ws.cell(row=row, column=2, value=round(amount, 2)).number_format = "$#,##0.00"
        ws.cell(row=row, column=3, value=round(amount / max(params.sqft, 1), 2)).number_format = "$#,##0.00"

    row += 2
    for label, value in (
        ("Materials", totals.material_total),
        ("Labor", totals.labor_total),
        ("Overhead & Profit", totals.overhead),
        ("Grand Total", totals.grand_total),
        ("Cost per SF", totals.cost_per_sf),
        ("Waste Cost", totals.waste_cost),
    ):
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=round(value, 2)).number_format = "$#,##0.00"
        row += 1

    _autofit(ws, [20, 16, 12])


def _create_audit_sheet(wb, audit_result: AuditResult) -> None:
    ws = wb.create_sheet("Audit")
    ws["A1"] = f"Score {audit_result.score} / Grade {audit_result.grade}"
    ws["A1"].font = Font(bold=True, size=14)
    ws["A2"] = f"{audit_result.errors} errors, {audit_result.warnings} warnings"

    status_fills = {
        LayerStatus.PASS: COLORS["pass_bg"],
        LayerStatus.WARN: COLORS["warn_bg"],
        LayerStatus.FAIL: COLORS["fail_bg"],
    }

    row = 4
    _header_row(ws, row, ["Layer", "Name", "Status", "Detail"])
    for number, layer in enumerate(audit_result.layers, start=1):
        row += 1
        color = status_fills[layer.status]
        ws.cell(row=row, column=1, value=number)
        ws.cell(row=row, column=2, value=layer.name)
        status = ws.cell(row=row, column=3, value=layer.status.value.upper())
        status.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        ws.cell(row=row, column=4, value=layer.detail)

    row += 2
    _header_row(ws, row, ["Layer", "Level", "Line", "Message"])
    for flag in audit_result.flags:
        row += 1
        ws.cell(row=row, column=1, value=flag.layer)
        ws.cell(row=row, column=2, value=flag.level.value)
        ws.cell(row=row, column=3, value=flag.lid)
        ws.cell(row=row, column=4, value=flag.message)

    _autofit(ws, [8, 28, 10, 80])


# ==================
# ESTIMATE DRAFT
# ==================

def estimate_assumptions(labor_multiplier: float, overhead_rate: float) -> List[str]:
    return [
        "Material costs from RSMeans-aligned takeoff database",
        f"Labor estimated at {labor_multiplier:g}× material cost",
        f"{round(overhead_rate * 100):g}% overhead & profit applied on subtotal",
        "Waste factors included in all quantities",
        "Verify all quantities against actual blueprints before bidding",
    ]


def build_estimate_draft(items: List[TakeoffItem], params: BlueprintParams) -> Dict[str, Any]:
    """
    Estimate payload built from a takeoff: header, money roll-up, material
    lines and one lump-sum labor line.

    Raises:
        ValueError: items is empty
    """
    if not items:
        raise ValueError("No takeoff items provided")

    totals = compute_totals(items, params.sqft)
    material_total = round(totals.material_total, 2)
    labor_total = round_half_up(totals.labor_total)
    subtotal = round(material_total + labor_total, 2)
    markup_percent = round(settings.overhead_rate * 100)
    markup_amount = round_half_up(subtotal * markup_percent / 100)

    if params.project_name:
        title = f"{params.project_name} — Material Takeoff"
    else:
        title = f"{params.sqft:,.0f} SF Residential — Material Takeoff"

    description = (
        f"Blueprint takeoff for a {params.sqft:g} SF, {params.stories}-story, "
        f"{params.bedrooms}BR/{params.bathrooms:g}BA residence with {params.foundation_type.value} "
        f"foundation and {params.roof_type.value} roof. Generated from blueprint analysis with "
        f"7-layer validation."
    )

    line_items = [
        {
            "category": item.category,
            "description": f"{item.name} ({item.quantity} {item.unit} incl. {round((item.waste - 1) * 100)}% waste)",
            "quantity": item.quantity,
            "unit": item.unit,
            "unit_cost": item.cost,
            "total_cost": item.total_cost,
            "material_cost": item.total_cost,
            "sort_order": index,
        }
        for index, item in enumerate(items)
    ]
    line_items.append({
        "category": "Labor & Installation",
        "description": f"Labor, installation, and subcontractor costs ({settings.labor_multiplier:g}× materials)",
        "quantity": 1,
        "unit": "LS",
        "unit_cost": labor_total,
        "total_cost": labor_total,
        "material_cost": 0,
        "sort_order": len(items),
    })

    return {
        "title": title,
        "description": description,
        "project_type": "New Construction",
        "subtotal": subtotal,
        "markup_percent": markup_percent,
        "markup_amount": markup_amount,
        "tax_amount": 0,
        "total_amount": round(subtotal + markup_amount, 2),
        "ai_generated": True,
        "ai_model": "blueprint-takeoff-engine",
        "assumptions": estimate_assumptions(settings.labor_multiplier, settings.overhead_rate),
        "confidence_score": 0.88,
        "line_items": line_items,
    }
