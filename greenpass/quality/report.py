"""Exportable data quality report for a scored passport."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from pydantic import Field

from greenpass.models.common import GreenPassBase, utc_now
from greenpass.models.dpp import DPPData
from greenpass.quality.models import (
    ActionItem,
    DataQualityResult,
    QualityGrade,
    QualityScores,
)

NEXT_REVIEW_DAYS = 90


class DataQualityReport(GreenPassBase):
    report_date: datetime
    product: str
    overall_score: int
    grade: QualityGrade
    breakdown: QualityScores
    critical_issues: int
    warning_issues: int
    recommendations: list[ActionItem] = Field(default_factory=list)
    next_review_date: date


def generate_data_quality_report(
    result: DataQualityResult,
    data: DPPData,
    *,
    now: datetime | None = None,
) -> DataQualityReport:
    """Summarise a quality result; next review is scheduled 90 days out."""
    current = now or utc_now()
    return DataQualityReport(
        report_date=current,
        product=data.general_info.product_name or "Unknown",
        overall_score=result.overall_score,
        grade=result.grade,
        breakdown=result.scores,
        critical_issues=len(result.recommendations.critical_issues),
        warning_issues=len(result.recommendations.warning_issues),
        recommendations=result.recommendations.action_items,
        next_review_date=(current + timedelta(days=NEXT_REVIEW_DAYS)).date(),
    )
