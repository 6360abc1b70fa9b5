"""
Blueprint Takeoff configuration settings.

Manages application settings via environment variables with sensible defaults.
Every pricing constant and audit threshold lives here, including the layer-2
trade benchmark table, the layer-4 ratio bands and the layer-5 trade lists,
so that alternate benchmark tables can be swapped in without touching engine
code. Table-valued settings are read from the environment as JSON, e.g.
TAKEOFF_STUDS_PER_NAIL_BOX='[25, 200]'.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Audit layer 2: material $/SF per trade (low, high)
DEFAULT_TRADE_RANGES: Dict[str, Tuple[float, float]] = {
    "Foundation": (3.0, 14.0),
    "Framing": (5.0, 25.0),
    "Exterior": (2.0, 10.0),
    "Roofing": (1.5, 8.0),
    "Drywall": (1.5, 6.0),
    "Insulation": (1.0, 4.0),
    "Doors/Windows": (2.0, 10.0),
    "Electrical": (1.5, 6.0),
    "Plumbing": (1.0, 6.0),
    "HVAC": (2.0, 10.0),
    "Finishes": (4.0, 18.0),
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TAKEOFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Blueprint Takeoff"
    app_version: str = "0.1.0"
    debug: bool = False

    # Parameter intake (caller-side clamp)
    default_sqft: float = 2400.0
    min_sqft: float = 100.0
    max_sqft: float = 50000.0

    # Pricing model
    labor_multiplier: float = 1.35   # labor ≈ materials × 1.35
    overhead_rate: float = 0.18      # overhead & profit on (materials + labor)

    # Audit layer 1: grand total $/SF
    psf_fail_min: float = 80.0
    psf_warn_min: float = 100.0
    psf_warn_max: float = 350.0
    psf_fail_max: float = 500.0

    # Audit layer 2: trade $/SF benchmarks
    trade_ranges: Dict[str, Tuple[float, float]] = Field(default_factory=lambda: dict(DEFAULT_TRADE_RANGES))

    # Audit layer 4: dependent quantity per driver quantity
    sheets_per_compound_pail: Tuple[float, float] = (4.0, 25.0)
    studs_per_nail_box: Tuple[float, float] = (25.0, 200.0)
    primer_to_paint: Tuple[float, float] = (0.6, 1.0)

    # Audit layer 5: None means every catalog trade is required
    required_trades: Optional[List[str]] = None
    optional_trades: List[str] = Field(default_factory=list)

    # Audit layer 6 and line confidence bands (UI colours at 0.88 / 0.93)
    confidence_high: float = 0.93
    confidence_warn: float = 0.88
    confidence_error: float = 0.80
    high_value_item_cost: float = 5000.0
    category_outlier_share: float = 0.75
    category_outlier_min_lines: int = 3

    # Audit layer 7: waste
    high_waste_factor: float = 1.15
    max_item_waste_share: float = 0.02

    # Score and grade
    error_penalty: int = 12
    warning_penalty: int = 4
    grade_a_min: int = 90
    grade_b_min: int = 75
    grade_c_min: int = 60

    # Anthropic Configuration (AI second-pass review)
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    review_max_tokens: int = 1024
    review_timeout_s: float = 30.0

    @property
    def anthropic_enabled(self) -> bool:
        """Check if Anthropic API is configured for the AI review."""
        return bool(self.anthropic_api_key)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
