"""Publication readiness gate for Digital Product Passports.

A passport may publish only when every required check passes:
category, materials summing to 100%, GTIN, manufacturer, zero critical
quality issues and a quality score of at least GOOD (85). On top of the
pass/fail decision the score picks a status band: ``excellent`` from 90,
``ready`` from 85, otherwise ``not_ready``.

Deterministic - no LLM calls.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

from greenpass.models.common import ensure_utc, utc_now
from greenpass.models.dpp import DPPData
from greenpass.quality.models import DataQualityResult
from greenpass.quality.scorer import materials_sum_ok


class ReadinessStatus(StrEnum):
    EXCELLENT = "excellent"
    READY = "ready"
    NOT_READY = "not_ready"


@dataclass(frozen=True)
class ReadinessThresholds:
    """Quality score thresholds for publication."""

    excellent: float = 90.0
    good: float = 85.0
    material_tolerance: float = 0.1


AUTO_PUBLISH_THRESHOLDS = ReadinessThresholds()

MAX_SCHEDULE_AHEAD = timedelta(days=365)


@dataclass(frozen=True)
class ReadinessCheck:
    """One required condition and whether it holds."""

    name: str
    passed: bool
    message: str


@dataclass
class ReadinessResult:
    """Result of the publication readiness check."""

    can_publish: bool
    status: ReadinessStatus
    message: str
    quality_score: int
    checks: list[ReadinessCheck] = field(default_factory=list)

    @property
    def failed_checks(self) -> list[ReadinessCheck]:
        return [c for c in self.checks if not c.passed]


@dataclass(frozen=True)
class ScheduleValidation:
    valid: bool
    reason: str | None = None


class PublicationReadinessGate:
    """Decide whether a scored passport may publish now.

    A passport missing any required field is never publishable, whatever
    its quality score.
    """

    def __init__(self, thresholds: ReadinessThresholds | None = None) -> None:
        self._thresholds = thresholds or AUTO_PUBLISH_THRESHOLDS

    def evaluate(self, data: DPPData, quality: DataQualityResult) -> ReadinessResult:
        t = self._thresholds
        score = quality.overall_score
        critical = quality.critical_count

        checks = [
            ReadinessCheck(
                name="category",
                passed=bool(data.category),
                message="Product category selected" if data.category
                else "Product category is required",
            ),
            ReadinessCheck(
                name="materials",
                passed=materials_sum_ok(data, t.material_tolerance),
                message="Material composition totals 100%"
                if materials_sum_ok(data, t.material_tolerance)
                else f"Material composition must total 100% "
                     f"(currently {data.material_percentage_total:.1f}%)",
            ),
            ReadinessCheck(
                name="gtin",
                passed=bool(data.general_info.gtin),
                message="GTIN provided" if data.general_info.gtin else "GTIN is required",
            ),
            ReadinessCheck(
                name="manufacturer",
                passed=bool(data.general_info.manufacturer),
                message="Manufacturer provided" if data.general_info.manufacturer
                else "Manufacturer is required",
            ),
            ReadinessCheck(
                name="critical_issues",
                passed=critical == 0,
                message="No critical data quality issues" if critical == 0
                else f"{critical} critical data quality issue(s) must be resolved",
            ),
            ReadinessCheck(
                name="quality_score",
                passed=score >= t.good,
                message=f"Quality score {score} meets the {t.good:.0f} threshold"
                if score >= t.good
                else f"Quality score {score} is below the {t.good:.0f} threshold",
            ),
        ]

        can_publish = all(c.passed for c in checks)
        if can_publish and score >= t.excellent:
            status = ReadinessStatus.EXCELLENT
            message = "Excellent data quality. Ready to publish immediately."
        elif can_publish:
            status = ReadinessStatus.READY
            message = "Data quality meets the publication standard."
        else:
            status = ReadinessStatus.NOT_READY
            failed = [c.message for c in checks if not c.passed]
            message = "Not ready to publish: " + "; ".join(failed)

        return ReadinessResult(
            can_publish=can_publish,
            status=status,
            message=message,
            quality_score=score,
            checks=checks,
        )


def validate_schedule_date(
    requested: datetime,
    *,
    now: datetime | None = None,
) -> ScheduleValidation:
    """Reject publish dates in the past or more than one year ahead."""
    current = ensure_utc(now or utc_now())
    when = ensure_utc(requested)
    if when < current:
        return ScheduleValidation(valid=False, reason="Scheduled date cannot be in the past")
    if when > current + MAX_SCHEDULE_AHEAD:
        return ScheduleValidation(
            valid=False,
            reason="Scheduled date cannot be more than one year in the future",
        )
    return ScheduleValidation(valid=True)
