"""Data quality scoring configuration.

Weights, grade bands, tolerances and staleness thresholds for the
passport quality scorer. Defaults follow the DPP wizard's published
scoring rules and can be overridden per tenant.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from pydantic import Field

from greenpass.models.common import GreenPassBase


class DataQualityConfig(GreenPassBase):
    """Configuration for the passport data quality scorer."""

    dimension_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "completeness": 0.40,
            "accuracy": 0.30,
            "consistency": 0.20,
            "recency": 0.10,
        },
    )

    # (min score, grade, label, colour), highest first.
    grade_bands: list[tuple[float, str, str, str]] = Field(
        default_factory=lambda: [
            (90.0, "A", "Excellent", "emerald"),
            (80.0, "B", "Good", "green"),
            (70.0, "C", "Fair", "yellow"),
            (60.0, "D", "Poor", "orange"),
        ],
    )
    fallback_grade: tuple[str, str, str] = ("F", "Insufficient", "red")

    percentage_tolerance: float = 0.1
    eol_min_length: int = 50

    max_carbon_footprint_kg: float = 100_000.0
    max_lifetime_years: float = 100.0
    recyclability_consistency_tolerance: float = 3.0
    high_impact_materials: list[str] = Field(
        default_factory=lambda: ["plastic", "aluminum", "aluminium"],
    )
    high_impact_min_footprint_kg: float = 1.0

    # (days older than, score, severity)
    recency_thresholds: list[tuple[float, float, str]] = Field(
        default_factory=lambda: [
            (365.0, 50.0, "warning"),
            (180.0, 75.0, "info"),
        ],
    )

    accuracy_action_below: float = 80.0
    completeness_action_below: float = 70.0
    consistency_action_below: float = 80.0
