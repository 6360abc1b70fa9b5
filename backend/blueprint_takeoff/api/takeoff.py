"""
Blueprint Takeoff API Endpoints

Endpoints for deriving, auditing, editing and exporting residential
material takeoffs. Every edit returns a freshly re-run audit; the client
holds the takeoff between calls.
"""

import io
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.audit_engine import audit
from blueprint_takeoff.services.material_catalog import DEFAULT_CATALOG
from blueprint_takeoff.services.parameter_intake import merge_analysis, normalize_params
from blueprint_takeoff.services.pricing import category_totals
from blueprint_takeoff.services.takeoff_calculation import remove_item, update_item_quantity
from blueprint_takeoff.services.takeoff_engine import derive_takeoff_report
from blueprint_takeoff.services.takeoff_export import (
    build_estimate_draft,
    export_takeoff_to_csv,
    export_takeoff_to_excel,
)
from blueprint_takeoff.services.takeoff_models import (
    BlueprintParams,
    InvalidBlueprintParams,
    TakeoffItem,
    UnknownLineItem,
)
from blueprint_takeoff.services.takeoff_review import build_review_summary, request_ai_review

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/takeoff", tags=["takeoff"])


# ==================
# REQUEST/RESPONSE MODELS
# ==================

class BlueprintParamsRequest(BaseModel):
    """Raw building parameters; clamped and defaulted server-side."""
    model_config = ConfigDict(populate_by_name=True)

    sqft: Optional[Any] = Field(None, description="Conditioned square footage")
    stories: Optional[Any] = Field(None, description="Number of stories (>= 1)")
    bedrooms: Optional[Any] = None
    bathrooms: Optional[Any] = Field(None, description="Bathrooms, halves allowed (2.5)")
    garage_size: Optional[Any] = Field(None, alias="garageSize", description="Garage stalls (0-3)")
    roof_type: Optional[str] = Field(None, alias="roofType", description="gable, hip, flat")
    foundation_type: Optional[str] = Field(None, alias="foundationType", description="slab, crawl, basement")
    project_name: Optional[str] = Field(None, alias="projectName")
    zip_code: Optional[str] = Field(None, alias="zipCode")


class TakeoffItemModel(BaseModel):
    """One takeoff line as held by the client."""
    model_config = ConfigDict(populate_by_name=True)

    lid: int
    id: str
    name: str
    unit: str
    cost: float = Field(..., ge=0)
    category: str = Field(..., alias="cat")
    waste: float = Field(..., ge=1.0)
    raw_qty: int = Field(..., alias="rawQty", ge=0)
    quantity: int = Field(..., ge=0)
    total_cost: float = Field(..., alias="totalCost")
    confidence: float = Field(..., ge=0, le=1)


class CalculateRequest(BaseModel):
    """Request for a fresh takeoff."""
    params: BlueprintParamsRequest = Field(default_factory=BlueprintParamsRequest)
    analysis: Optional[Dict[str, Any]] = Field(None, description="Drawing analysis from the vision step")
    seed: Optional[int] = Field(None, description="Seed for reproducible confidence jitter")


class TakeoffRequest(BaseModel):
    """A client-held takeoff plus the parameters it was derived from."""
    items: List[TakeoffItemModel]
    params: BlueprintParamsRequest = Field(default_factory=BlueprintParamsRequest)


class EditRequest(TakeoffRequest):
    """Change one line's quantity or remove it."""
    lid: int
    quantity: Optional[int] = None
    remove: bool = False


class CalculateResponse(BaseModel):
    params: Dict[str, Any]
    manual_fallback: bool
    ai_fields: List[str]
    geometry: Dict[str, Any]
    items: List[Dict[str, Any]]
    skipped: List[Dict[str, Any]]
    category_totals: Dict[str, float]
    totals: Dict[str, Any]
    audit: Dict[str, Any]


class EditResponse(BaseModel):
    items: List[Dict[str, Any]]
    audit: Dict[str, Any]


class ReviewSummaryResponse(BaseModel):
    summary: str


class ReviewResponse(BaseModel):
    content: str
    model: str
    tokens_used: int


# ==================
# HELPER FUNCTIONS
# ==================

def _params(request: BlueprintParamsRequest) -> BlueprintParams:
    try:
        return normalize_params(request.model_dump(exclude_none=True))
    except InvalidBlueprintParams as e:
        raise HTTPException(status_code=400, detail=str(e))


def _items(models: List[TakeoffItemModel]) -> List[TakeoffItem]:
    return [TakeoffItem.from_dict(m.model_dump()) for m in models]


def _category_totals(items: List[TakeoffItem]) -> Dict[str, float]:
    return {category: round(amount, 2) for category, amount in category_totals(items).items()}


# ==================
# ENDPOINTS
# ==================

@router.get("/materials")
async def list_materials():
    """Material catalog grouped by trade section."""
    return DEFAULT_CATALOG.to_dict()


@router.post("/calculate", response_model=CalculateResponse)
async def calculate_takeoff(request: CalculateRequest):
    """
    Derive a takeoff and audit it.

    Parameters are clamped first (sqft defaults to 2400 when missing or
    invalid). A drawing analysis, when supplied, overrides manual values
    field by field.
    """
    try:
        merge = merge_analysis(request.params.model_dump(exclude_none=True), request.analysis)
    except InvalidBlueprintParams as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        report = derive_takeoff_report(merge.params, catalog=DEFAULT_CATALOG, seed=request.seed)
        result = audit(report.items, report.params, catalog=DEFAULT_CATALOG)
    except InvalidBlueprintParams as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Takeoff calculation error: {e}")
        raise HTTPException(status_code=500, detail="Takeoff calculation failed")

    return CalculateResponse(
        params=report.params.to_dict(),
        manual_fallback=merge.manual_fallback,
        ai_fields=merge.ai_fields,
        geometry=report.geometry.to_dict(),
        items=[item.to_dict() for item in report.items],
        skipped=[e.to_dict() for e in report.skipped],
        category_totals=_category_totals(report.items),
        totals=result.totals.to_dict(),
        audit=result.to_dict(),
    )


@router.post("/audit")
async def audit_takeoff(request: TakeoffRequest):
    """Re-run all seven audit layers over a client-held takeoff."""
    params = _params(request.params)
    return audit(_items(request.items), params).to_dict()


@router.post("/edit", response_model=EditResponse)
async def edit_takeoff(request: EditRequest):
    """Apply one quantity edit or removal and re-audit from scratch."""
    params = _params(request.params)
    items = _items(request.items)

    try:
        if request.remove:
            items = remove_item(items, request.lid)
        elif request.quantity is not None:
            items = update_item_quantity(items, request.lid, request.quantity)
        else:
            raise HTTPException(status_code=400, detail="Provide either quantity or remove=true")
    except UnknownLineItem:
        raise HTTPException(status_code=404, detail=f"Line item not found: {request.lid}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return EditResponse(
        items=[item.to_dict() for item in items],
        audit=audit(items, params).to_dict(),
    )


@router.post("/review/summary", response_model=ReviewSummaryResponse)
async def review_summary(request: TakeoffRequest):
    """Plain-text takeoff summary, as sent to the AI reviewer."""
    return ReviewSummaryResponse(summary=build_review_summary(_items(request.items), _params(request.params)))


@router.post("/review", response_model=ReviewResponse)
async def review_takeoff(request: TakeoffRequest):
    """Advisory AI review of the takeoff (requires an Anthropic API key)."""
    if not settings.anthropic_enabled:
        raise HTTPException(status_code=503, detail="AI review is not configured")
    if not request.items:
        raise HTTPException(status_code=400, detail="No takeoff items provided")

    result = request_ai_review(_items(request.items), _params(request.params))
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error or "AI review failed")
    return ReviewResponse(content=result.content, model=result.model, tokens_used=result.tokens_used)


@router.post("/export/csv")
async def export_csv(request: TakeoffRequest):
    """Download the takeoff as CSV."""
    result = export_takeoff_to_csv(_items(request.items), _params(request.params))
    return StreamingResponse(
        io.BytesIO(result.file_bytes),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={result.filename}"}
    )


@router.post("/export/excel")
async def export_excel(request: TakeoffRequest, include_audit: bool = True):
    """Download the takeoff as an Excel workbook (Takeoff, Summary, Audit sheets)."""
    params = _params(request.params)
    items = _items(request.items)
    audit_result = audit(items, params) if include_audit else None

    result = export_takeoff_to_excel(items, params, audit_result=audit_result)
    if not result.success:
        raise HTTPException(status_code=500, detail=f"Excel export failed: {result.error}")

    return StreamingResponse(
        io.BytesIO(result.file_bytes),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={result.filename}"}
    )


@router.post("/estimate-draft")
async def estimate_draft(request: TakeoffRequest):
    """Estimate payload (header, totals, line items) built from the takeoff."""
    try:
        return build_estimate_draft(_items(request.items), _params(request.params))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
