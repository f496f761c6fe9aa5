"""Circularity index - weighted linear score on a 0-100 scale.

    material_circularity = Σ(pct × recycled_fraction × recyclable_factor) / Σ(pct)
    lifetime_factor      = min(lifetime_years / 10, 1)
    repairability_factor = repairability / 10
    recyclability_factor = recyclability / 10

    index = (0.40 × material + 0.20 × lifetime
             + 0.20 × repairability + 0.20 × recyclability) × 100

Every factor is clamped to [0, 1]. Weights are configurable; a set that
does not total 1.0 is reported in ``weight_warnings`` and used as given.

Deterministic - no LLM calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import Field

from greenpass.models.common import GreenPassBase, round_half_up
from greenpass.models.dpp import MaterialComposition

logger = logging.getLogger(__name__)

RECYCLABLE_FACTOR = 1.0
NON_RECYCLABLE_FACTOR = 0.3
LIFETIME_REFERENCE_YEARS = 10.0
_WEIGHT_TOLERANCE = 1e-6


class CircularityWeights(GreenPassBase):
    """Relative weight of each circularity factor (fractions of 1.0)."""

    material: float = Field(default=0.40, ge=0.0)
    lifetime: float = Field(default=0.20, ge=0.0)
    repairability: float = Field(default=0.20, ge=0.0)
    recyclability: float = Field(default=0.20, ge=0.0)

    @property
    def total(self) -> float:
        return self.material + self.lifetime + self.repairability + self.recyclability


class CircularitySubscores(GreenPassBase):
    material_circularity: float
    lifetime_factor: float
    repairability_factor: float
    recyclability_factor: float


class CircularityResult(GreenPassBase):
    circularity_index: float = Field(ge=0.0)
    subscores: CircularitySubscores
    weights: CircularityWeights
    weights_total: float
    weight_warnings: list[str] = Field(default_factory=list)
    calculation_method: str = "Weighted material circularity + durability"


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def recyclability_from_materials(materials: Sequence[MaterialComposition]) -> float:
    """Share of recyclable material lines on a 0-10 scale (0 when empty)."""
    if not materials:
        return 0.0
    recyclable = sum(1 for m in materials if m.recyclable)
    return round_half_up(recyclable / len(materials) * 10, 2)


def material_health_score(materials: Sequence[MaterialComposition]) -> float:
    """10 minus the hazardous share of material lines × 10, floored at 0."""
    if not materials:
        return 10.0
    hazardous = sum(1 for m in materials if m.hazardous)
    return max(0.0, 10.0 - hazardous / len(materials) * 10)


class CircularityScorer:
    """Computes the circularity index for a passport's inputs."""

    def __init__(self, weights: CircularityWeights | None = None) -> None:
        self._weights = weights or CircularityWeights()

    @property
    def weights(self) -> CircularityWeights:
        return self._weights

    def material_circularity(
        self,
        materials: Sequence[MaterialComposition],
        recycled_content_fraction: float | None = None,
    ) -> float:
        """Percentage-weighted recycled content, discounted for non-recyclables.

        A material's own ``recycled_content_pct`` wins over the record-level
        fraction. Returns 0 when the percentages total zero.
        """
        fallback = recycled_content_fraction or 0.0
        weighted = 0.0
        total_pct = 0.0
        for material in materials:
            pct = material.percentage or 0.0
            if material.recycled_content_pct is not None:
                fraction = material.recycled_content_pct / 100.0
            else:
                fraction = fallback
            factor = RECYCLABLE_FACTOR if material.recyclable else NON_RECYCLABLE_FACTOR
            weighted += pct * _clamp(fraction) * factor
            total_pct += pct
        if total_pct <= 0:
            return 0.0
        return _clamp(weighted / total_pct)

    def compute(
        self,
        materials: Sequence[MaterialComposition],
        repairability: float | None,
        lifetime_years: float | None,
        recyclability: float | None,
        *,
        recycled_content_fraction: float | None = None,
    ) -> CircularityResult:
        """Compute the 0-100 circularity index, rounded to one decimal."""
        w = self._weights
        subscores = CircularitySubscores(
            material_circularity=self.material_circularity(
                materials, recycled_content_fraction,
            ),
            lifetime_factor=_clamp((lifetime_years or 0.0) / LIFETIME_REFERENCE_YEARS),
            repairability_factor=_clamp((repairability or 0.0) / 10.0),
            recyclability_factor=_clamp((recyclability or 0.0) / 10.0),
        )

        warnings: list[str] = []
        if abs(w.total - 1.0) > _WEIGHT_TOLERANCE:
            warnings.append(
                f"Circularity weights total {w.total * 100:.0f}% (should total 100%)"
            )
            logger.warning("Circularity weights do not total 100%%: %s", w.total)

        index = (
            w.material * subscores.material_circularity
            + w.lifetime * subscores.lifetime_factor
            + w.repairability * subscores.repairability_factor
            + w.recyclability * subscores.recyclability_factor
        ) * 100

        return CircularityResult(
            circularity_index=round_half_up(index, 1),
            subscores=subscores,
            weights=w,
            weights_total=w.total,
            weight_warnings=warnings,
        )
