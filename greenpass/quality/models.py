"""Quality module enums and Pydantic models.

Defines issue severities, the four quality dimensions, grade bands and
the result models produced by the passport data quality scorer.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from greenpass.models.common import GreenPassBase


# ---------------------------------------------------------------------------
# Enums (all StrEnum)
# ---------------------------------------------------------------------------


class IssueSeverity(StrEnum):
    """Severity levels for quality issues."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ActionPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class QualityDimension(StrEnum):
    """The 4 quality dimensions assessed for each passport."""

    COMPLETENESS = "completeness"
    ACCURACY = "accuracy"
    CONSISTENCY = "consistency"
    RECENCY = "recency"


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class QualityIssue(GreenPassBase):
    """A single issue raised while scoring a passport."""

    severity: IssueSeverity
    field: str
    message: str
    suggestion: str


class DimensionScore(GreenPassBase):
    """Score for one dimension plus the counts it was derived from.

    ``passed``/``total`` mean filled/required fields for completeness and
    passed/applicable checks for accuracy and consistency. Recency carries
    ``days_since_update`` instead.
    """

    dimension: QualityDimension
    score: float = Field(ge=0.0, le=100.0)
    passed: int = 0
    total: int = 0
    days_since_update: int | None = None
    issues: list[QualityIssue] = Field(default_factory=list)


class QualityScores(GreenPassBase):
    completeness: DimensionScore
    accuracy: DimensionScore
    consistency: DimensionScore
    recency: DimensionScore

    def all_issues(self) -> list[QualityIssue]:
        return [
            *self.completeness.issues,
            *self.accuracy.issues,
            *self.consistency.issues,
            *self.recency.issues,
        ]


class QualityGrade(GreenPassBase, frozen=True):
    """Letter grade with its display label and colour."""

    grade: str
    label: str
    color: str


class ActionItem(GreenPassBase):
    priority: ActionPriority
    category: str
    message: str
    action: str


class Recommendations(GreenPassBase):
    critical_issues: list[QualityIssue] = Field(default_factory=list)
    warning_issues: list[QualityIssue] = Field(default_factory=list)
    info_issues: list[QualityIssue] = Field(default_factory=list)
    action_items: list[ActionItem] = Field(default_factory=list)


class DataQualityResult(GreenPassBase):
    """Composite quality assessment for one passport."""

    overall_score: int = Field(ge=0, le=100)
    scores: QualityScores
    grade: QualityGrade
    recommendations: Recommendations

    @property
    def critical_count(self) -> int:
        return len(self.recommendations.critical_issues)
