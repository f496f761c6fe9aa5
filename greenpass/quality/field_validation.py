"""Single-field validation for live form feedback.

Runs on each edit, before a full quality score is computed. Returns the
issues for that one field; it never blocks saving.
"""

from __future__ import annotations

from greenpass.models.dpp import DPPData
from greenpass.quality.models import IssueSeverity, QualityIssue

_FOOTPRINT_FIELD = "sustainability_info.carbon_footprint_kg"
_RECYCLABILITY_FIELD = "circularity_metrics.recyclability_score"
_GTIN_FIELD = "general_info.gtin"

UNUSUAL_FOOTPRINT_KG = 50_000.0


def _as_number(value: object) -> float | None:
    """Read a form value as a number; numeric strings count, booleans do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def validate_field(
    field_path: str,
    value: object,
    data: DPPData,
    *,
    tolerance: float = 0.1,
) -> list[QualityIssue]:
    """Validate one edited value in the context of the current passport."""
    issues: list[QualityIssue] = []
    number = _as_number(value)

    if "material_composition" in field_path and "percentage" in field_path:
        if number is not None and not 0 <= number <= 100:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field=field_path,
                message="Percentage must be between 0 and 100",
                suggestion="Enter a valid percentage",
            ))
        total = data.material_percentage_total
        if data.material_composition and abs(total - 100.0) > tolerance:
            issues.append(QualityIssue(
                severity=IssueSeverity.WARNING,
                field="material_composition",
                message=f"Total materials: {total:.1f}% (should be 100%)",
                suggestion="Adjust percentages to sum to 100%",
            ))

    elif field_path == _FOOTPRINT_FIELD and number is not None:
        if number < 0:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field=field_path,
                message="Carbon footprint cannot be negative",
                suggestion="Enter a positive value",
            ))
        elif number > UNUSUAL_FOOTPRINT_KG:
            issues.append(QualityIssue(
                severity=IssueSeverity.WARNING,
                field=field_path,
                message="Unusually high carbon footprint",
                suggestion="Verify calculation is correct",
            ))

    elif field_path == _RECYCLABILITY_FIELD and number is not None:
        if not 0 <= number <= 10:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field=field_path,
                message="Recyclability score must be between 0 and 10",
                suggestion="Use the 0-10 scale",
            ))

    elif field_path == _GTIN_FIELD and value:
        if len(str(value)) not in (13, 14):
            issues.append(QualityIssue(
                severity=IssueSeverity.WARNING,
                field=field_path,
                message="GTIN should be 13 or 14 digits",
                suggestion="Standard GTIN format: 13 or 14 numeric digits",
            ))

    return issues
