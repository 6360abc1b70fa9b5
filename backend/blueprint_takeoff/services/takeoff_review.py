"""
AI Takeoff Review Service

Optional second pass: sends a plain-text summary of the takeoff to Anthropic
Claude and returns the reviewer's free-text notes. Advisory only; nothing in
the takeoff or audit depends on it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import anthropic

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.pricing import compute_totals
from blueprint_takeoff.services.takeoff_models import BlueprintParams, TakeoffItem

logger = logging.getLogger(__name__)


REVIEW_SYSTEM_PROMPT = (
    "You are an expert residential construction estimator reviewing a material takeoff. "
    "Be direct, specific, and actionable. Focus on: missing materials, quantity errors, "
    "code compliance issues, duplicates, and anything an experienced builder would catch. "
    "Keep your response concise: 3-5 short paragraphs max."
)

REVIEW_INSTRUCTIONS = "Review for: missing items, wrong quantities, code issues, duplicates. Be specific and concise."


@dataclass
class ReviewResult:
    """Result of an AI review request."""
    success: bool
    content: str = ""
    model: str = ""
    error: Optional[str] = None
    tokens_used: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "content": self.content,
            "model": self.model,
            "error": self.error,
            "tokens_used": self.tokens_used,
        }


def _item_line(item: TakeoffItem) -> str:
    return (
        f"{item.category}: {item.name} = {item.quantity} {item.unit} "
        f"(${item.total_cost:.2f}, conf {item.confidence * 100:.0f}%)"
    )


def build_review_summary(items: List[TakeoffItem], params: BlueprintParams) -> str:
    """Plain-text takeoff summary sent to the reviewer."""
    totals = compute_totals(items, params.sqft)
    header = (
        f"Review this {params.sqft:g}SF residential takeoff "
        f"({params.bedrooms}BR/{params.bathrooms:g}BA, "
        f"{params.foundation_type.value} foundation, {params.roof_type.value} roof):"
    )
    body = "\n".join(_item_line(item) for item in items)
    return (
        f"{header}\n\n{body}\n\n"
        f"Total materials: ${totals.material_total:.2f}\n\n"
        f"{REVIEW_INSTRUCTIONS}"
    )


def get_anthropic_client() -> anthropic.Anthropic:
    """Get Anthropic client with API key from settings."""
    if not settings.anthropic_api_key:
        raise ValueError("TAKEOFF_ANTHROPIC_API_KEY not set in environment")
    return anthropic.Anthropic(api_key=settings.anthropic_api_key, timeout=settings.review_timeout_s)


def request_ai_review(
    items: List[TakeoffItem],
    params: BlueprintParams,
    client: Optional[anthropic.Anthropic] = None,
) -> ReviewResult:
    """
    Ask Claude to review a takeoff.

    Args:
        items: Takeoff lines as currently edited
        params: Parameters the takeoff was derived from
        client: Pre-built client (tests inject a fake one)

    Returns:
        ReviewResult; failures are logged and returned, never raised
    """
    if not items:
        return ReviewResult(success=False, error="No items in takeoff")

    if client is None:
        try:
            client = get_anthropic_client()
        except Exception as e:
            logger.error(f"Failed to initialize Anthropic client: {e}")
            return ReviewResult(success=False, error=str(e))

    summary = build_review_summary(items, params)
    try:
        response = client.messages.create(
            model=settings.anthropic_model,
            max_tokens=settings.review_max_tokens,
            system=REVIEW_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": summary}],
        )
    except anthropic.APIError as e:
        logger.error(f"AI review request failed: {e}")
        return ReviewResult(success=False, model=settings.anthropic_model, error="AI review failed. Please try again.")

    text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
    usage = getattr(response, "usage", None)
    tokens = (usage.input_tokens + usage.output_tokens) if usage else 0
    logger.info(f"AI review completed ({tokens} tokens)")
    return ReviewResult(success=True, content=text, model=settings.anthropic_model, tokens_used=tokens)
