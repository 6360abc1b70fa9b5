"""
Parameter intake: clamp and default raw building parameters before they reach
the takeoff engine, and merge an optional drawing analysis over manual input.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.takeoff_models import (
    BlueprintParams,
    FoundationType,
    InvalidBlueprintParams,
    RoofType,
    WIRE_ALIASES,
)

logger = logging.getLogger(__name__)

MAX_GARAGE_SIZE = 3

# Drawing analysis field -> BlueprintParams field
ANALYSIS_FIELDS = {
    "totalSqft": "sqft",
    "stories": "stories",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "garageSize": "garage_size",
    "roofType": "roof_type",
    "foundationType": "foundation_type",
}


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clamp_sqft(value: Any) -> float:
    """
    Clamp square footage to the accepted range.

    Non-numeric, non-finite or non-positive input falls back to the default.
    """
    sqft = _as_float(value)
    if sqft is None or sqft <= 0:
        logger.warning(f"Invalid sqft {value!r}, using default {settings.default_sqft}")
        return settings.default_sqft
    return max(settings.min_sqft, min(settings.max_sqft, sqft))


def _as_count(value: Any, default: int, minimum: int = 0, maximum: Optional[int] = None) -> int:
    number = _as_float(value)
    if number is None:
        return default
    count = max(minimum, int(number))
    if maximum is not None:
        count = min(maximum, count)
    return count


def _as_choice(value: Any, enum_cls, default):
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = [e.value for e in enum_cls]
        raise InvalidBlueprintParams(f"Unknown {enum_cls.__name__}: {value!r}. Valid: {valid}")


def normalize_params(raw: Union[BlueprintParams, Dict[str, Any]]) -> BlueprintParams:
    """
    Turn raw user/collaborator input into engine-ready BlueprintParams.

    Args:
        raw: Dict with snake_case or camelCase keys, or existing params

    Returns:
        BlueprintParams with sqft clamped, counts floored at their minimums,
        and roof/foundation validated

    Raises:
        InvalidBlueprintParams: roof or foundation type outside its vocabulary
    """
    if isinstance(raw, BlueprintParams):
        data = raw.to_dict()
    elif isinstance(raw, dict):
        data = {}
        for key, value in raw.items():
            data[WIRE_ALIASES.get(key, key)] = value
    else:
        raise InvalidBlueprintParams(f"Expected dict or BlueprintParams, got {type(raw).__name__}")

    defaults = BlueprintParams()
    bathrooms = _as_float(data.get("bathrooms"))

    return BlueprintParams(
        sqft=clamp_sqft(data.get("sqft", defaults.sqft)),
        stories=_as_count(data.get("stories"), defaults.stories, minimum=1),
        bedrooms=_as_count(data.get("bedrooms"), defaults.bedrooms),
        bathrooms=max(0.0, bathrooms) if bathrooms is not None else defaults.bathrooms,
        garage_size=_as_count(data.get("garage_size"), defaults.garage_size, maximum=MAX_GARAGE_SIZE),
        roof_type=_as_choice(data.get("roof_type"), RoofType, defaults.roof_type),
        foundation_type=_as_choice(data.get("foundation_type"), FoundationType, defaults.foundation_type),
        project_name=str(data.get("project_name") or ""),
        zip_code=str(data.get("zip_code") or ""),
    )


@dataclass
class ParameterMerge:
    """Parameters after applying a drawing analysis, with provenance."""
    params: BlueprintParams
    manual_fallback: bool
    ai_fields: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "params": self.params.to_dict(),
            "manual_fallback": self.manual_fallback,
            "ai_fields": self.ai_fields,
            "reason": self.reason,
        }


def merge_analysis(
    params: Union[BlueprintParams, Dict[str, Any]],
    analysis: Optional[Dict[str, Any]],
) -> ParameterMerge:
    """
    Overlay a drawing analysis on manual parameters.

    Missing or None analysis fields keep the manual value. An absent analysis,
    or one that yields unusable values, falls back to the manual parameters.
    """
    manual = normalize_params(params)
    if not analysis:
        return ParameterMerge(params=manual, manual_fallback=True, reason="No drawing analysis available")

    merged = manual.to_dict()
    ai_fields = []
    for source, target in ANALYSIS_FIELDS.items():
        value = analysis.get(source)
        if value is not None:
            merged[target] = value
            ai_fields.append(target)

    if not ai_fields:
        return ParameterMerge(params=manual, manual_fallback=True, reason="Drawing analysis returned no usable fields")

    try:
        result = normalize_params(merged)
    except InvalidBlueprintParams as e:
        logger.warning(f"Discarding drawing analysis: {e}")
        return ParameterMerge(params=manual, manual_fallback=True, reason=str(e))

    return ParameterMerge(params=result, manual_fallback=False, ai_fields=ai_fields)
