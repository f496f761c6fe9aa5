"""Double materiality classification (EFRAG / ESRS 1).

A topic is material when EITHER the impact OR the financial score reaches
the threshold. The scores themselves come from outside (an analyst or an
assessment provider); this module only validates and classifies them.

Deterministic - no LLM calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from greenpass.models.materiality import (
    ESRSPillar,
    MaterialityScores,
    MaterialityTopic,
    pillar_for,
)

MATERIALITY_THRESHOLD = 5.0


def is_material(
    impact_score: float,
    financial_score: float,
    threshold: float = MATERIALITY_THRESHOLD,
) -> bool:
    """OR-threshold: impact >= threshold or financial >= threshold."""
    return impact_score >= threshold or financial_score >= threshold


@dataclass(frozen=True)
class PillarSummary:
    """Per-pillar counts and averages for the materiality matrix."""

    pillar: ESRSPillar
    total: int
    material: int
    avg_impact: float
    avg_financial: float


class MaterialityScorer:
    """Classifies materiality topics against a configurable threshold."""

    def __init__(self, threshold: float = MATERIALITY_THRESHOLD) -> None:
        self._threshold = threshold

    def classify(self, impact_score: float, financial_score: float) -> bool:
        return is_material(impact_score, financial_score, self._threshold)

    def assess(
        self,
        *,
        tenant_id: UUID,
        esrs_standard: str,
        topic_name: str,
        scores: MaterialityScores,
    ) -> MaterialityTopic:
        """Build a topic from validated scores and set ``is_material``."""
        return MaterialityTopic(
            tenant_id=tenant_id,
            esrs_standard=esrs_standard,
            topic_name=topic_name,
            impact_materiality_score=scores.impact_materiality_score,
            financial_materiality_score=scores.financial_materiality_score,
            is_material=self.classify(
                scores.impact_materiality_score,
                scores.financial_materiality_score,
            ),
            rationale=scores.rationale,
        )

    def summarize(self, topics: Sequence[MaterialityTopic]) -> list[PillarSummary]:
        """Group topics by E/S/G pillar. Topics with unknown codes are skipped."""
        summaries: list[PillarSummary] = []
        for pillar in ESRSPillar:
            items = [t for t in topics if pillar_for(t.esrs_standard) == pillar]
            count = len(items)
            summaries.append(PillarSummary(
                pillar=pillar,
                total=count,
                material=sum(1 for t in items if t.is_material),
                avg_impact=(
                    sum(t.impact_materiality_score for t in items) / count if count else 0.0
                ),
                avg_financial=(
                    sum(t.financial_materiality_score for t in items) / count if count else 0.0
                ),
            ))
        return summaries
