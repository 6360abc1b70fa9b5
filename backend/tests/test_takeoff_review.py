"""
Unit tests for the AI takeoff review.

No network: the Anthropic client is replaced by a fake.
"""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.takeoff_review import (
    REVIEW_SYSTEM_PROMPT,
    build_review_summary,
    request_ai_review,
)
from blueprint_takeoff.services.takeoff_models import BlueprintParams


class FakeMessages:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text="Add hurricane ties.")],
            usage=SimpleNamespace(input_tokens=900, output_tokens=100),
        )


class FakeClient:
    def __init__(self, error=None):
        self.messages = FakeMessages(error)


class TestReviewSummary:
    """Tests for the summary text."""

    def test_header(self, default_takeoff, default_params):
        summary = build_review_summary(default_takeoff, default_params)
        assert summary.startswith(
            "Review this 2400SF residential takeoff (3BR/2BA, slab foundation, gable roof):\n\n"
        )

    def test_one_line_per_item(self, default_takeoff, default_params):
        summary = build_review_summary(default_takeoff, default_params)
        assert "Roofing: Arch. Shingles 30yr = 32 SQ ($3680.00, conf 94%)" in summary
        item_lines = [line for line in summary.split("\n") if " = " in line]
        assert len(item_lines) == len(default_takeoff)

    def test_footer(self, default_takeoff, default_params):
        summary = build_review_summary(default_takeoff, default_params)
        assert "\n\nTotal materials: $" in summary
        assert summary.endswith("Be specific and concise.")

    def test_half_bath_formatting(self, default_takeoff):
        summary = build_review_summary(default_takeoff, BlueprintParams(bathrooms=2.5, roof_type="hip"))
        assert "(3BR/2.5BA, slab foundation, hip roof)" in summary


class TestRequestAiReview:
    """Tests for the Anthropic call."""

    def test_success(self, default_takeoff, default_params):
        client = FakeClient()
        result = request_ai_review(default_takeoff, default_params, client=client)

        assert result.success
        assert result.content == "Add hurricane ties."
        assert result.tokens_used == 1000
        call = client.messages.calls[0]
        assert call["system"] == REVIEW_SYSTEM_PROMPT
        assert call["max_tokens"] == settings.review_max_tokens
        assert call["messages"][0]["content"].startswith("Review this 2400SF")

    def test_missing_key(self, default_takeoff, default_params, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", None)
        result = request_ai_review(default_takeoff, default_params)
        assert not result.success
        assert "ANTHROPIC_API_KEY" in result.error

    def test_api_error_returned(self, default_takeoff, default_params):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
        result = request_ai_review(default_takeoff, default_params, client=FakeClient(error))
        assert not result.success
        assert result.error == "AI review failed. Please try again."

    def test_empty_takeoff(self, default_params):
        result = request_ai_review([], default_params, client=FakeClient())
        assert not result.success
        assert result.to_dict()["error"] == "No items in takeoff"
