"""Passport data quality scorer - completeness, accuracy, consistency, recency.

Each dimension returns a DimensionScore with the counts it was derived
from and the issues it raised. The composite is a fixed weighted sum:

    overall = 0.40 * completeness + 0.30 * accuracy
            + 0.20 * consistency + 0.10 * recency

Validation problems are collected as issues, never raised, so a draft
can always be saved. Only publication is gated on them.

Deterministic - no LLM calls.
"""

from __future__ import annotations

import logging
from datetime import datetime

from greenpass.models.common import ensure_utc, round_half_up, utc_now
from greenpass.models.dpp import CategoryTemplate, DPPData
from greenpass.quality.config import DataQualityConfig
from greenpass.quality.models import (
    ActionItem,
    ActionPriority,
    DataQualityResult,
    DimensionScore,
    IssueSeverity,
    QualityDimension,
    QualityGrade,
    QualityIssue,
    QualityScores,
    Recommendations,
)

logger = logging.getLogger(__name__)

_GENERAL_FIELDS = ("product_name", "manufacturer", "gtin")
_SUSTAINABILITY_FIELDS = (
    "carbon_footprint_kg",
    "water_usage_liters",
    "energy_consumption_kwh",
)
_CIRCULARITY_FIELDS = (
    "recyclability_score",
    "recycled_content_percentage",
    "repairability_index",
    "expected_lifetime_years",
)


def _pct(passed: int, total: int) -> float:
    if total == 0:
        return 100.0
    return round_half_up(passed / total * 100)


def grade_for_score(
    score: float,
    config: DataQualityConfig | None = None,
) -> QualityGrade:
    """Map an (unrounded) overall score onto the A-F grade bands."""
    cfg = config or DataQualityConfig()
    for threshold, grade, label, color in cfg.grade_bands:
        if score >= threshold:
            return QualityGrade(grade=grade, label=label, color=color)
    grade, label, color = cfg.fallback_grade
    return QualityGrade(grade=grade, label=label, color=color)


def materials_sum_ok(data: DPPData, tolerance: float = 0.1) -> bool:
    """True when materials are present and their percentages total 100 ± tolerance."""
    if not data.material_composition:
        return False
    return abs(data.material_percentage_total - 100.0) <= tolerance


class DataQualityScorer:
    """Scores a passport on 4 dimensions and grades the weighted result."""

    def __init__(self, config: DataQualityConfig | None = None) -> None:
        self._config = config or DataQualityConfig()

    def score(
        self,
        data: DPPData,
        template: CategoryTemplate | None = None,
        *,
        now: datetime | None = None,
    ) -> DataQualityResult:
        """Score all dimensions and assemble grade + recommendations."""
        scores = QualityScores(
            completeness=self.score_completeness(data, template),
            accuracy=self.score_accuracy(data),
            consistency=self.score_consistency(data),
            recency=self.score_recency(data, now=now),
        )

        weights = self._config.dimension_weights
        raw = (
            scores.completeness.score * weights["completeness"]
            + scores.accuracy.score * weights["accuracy"]
            + scores.consistency.score * weights["consistency"]
            + scores.recency.score * weights["recency"]
        )
        raw = max(0.0, min(100.0, raw))

        result = DataQualityResult(
            overall_score=int(round_half_up(raw)),
            scores=scores,
            grade=grade_for_score(raw, self._config),
            recommendations=self.build_recommendations(scores, data, template),
        )
        logger.debug(
            "Scored passport %s: overall=%s grade=%s",
            data.general_info.product_name,
            result.overall_score,
            result.grade.grade,
        )
        return result

    # ---------------------------------------------------------------
    # Dimension 1: Completeness
    # ---------------------------------------------------------------

    def score_completeness(
        self,
        data: DPPData,
        template: CategoryTemplate | None = None,
    ) -> DimensionScore:
        """Count required fields present; score = filled / total × 100.

        The total is incremented alongside every filled slot, so it is
        never zero.
        """
        issues: list[QualityIssue] = []
        filled = 0
        total = 0

        for name in _GENERAL_FIELDS:
            total += 1
            if getattr(data.general_info, name):
                filled += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.CRITICAL,
                    field=f"general_info.{name}",
                    message=f"Missing {name}",
                    suggestion=f"Provide {name} for product identification",
                ))

        total += 1
        if data.category:
            filled += 1
        else:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field="category",
                message="Product category not selected",
                suggestion="Select a product category to apply correct templates",
            ))

        # Two slots: materials present, and materials summing to 100%.
        total += 2
        if data.material_composition:
            filled += 1
            if materials_sum_ok(data, self._config.percentage_tolerance):
                filled += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.CRITICAL,
                    field="material_composition",
                    message=(
                        f"Materials sum to {data.material_percentage_total:.1f}% "
                        "(should be 100%)"
                    ),
                    suggestion="Adjust material percentages to equal 100%",
                ))
        else:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field="material_composition",
                message="No materials defined",
                suggestion="Add material composition data",
            ))

        if template is not None and template.required_materials:
            provided = [
                (m.material_name or "").lower() for m in data.material_composition
            ]
            for required in template.required_materials:
                total += 1
                key = required.lower().split(" ")[0]
                if any(key in name for name in provided):
                    filled += 1
                else:
                    issues.append(QualityIssue(
                        severity=IssueSeverity.WARNING,
                        field="material_composition",
                        message=f"Missing typical {template.label} material: {required}",
                        suggestion=f"Consider adding {required} if applicable",
                    ))

        for name in _SUSTAINABILITY_FIELDS:
            total += 1
            value = getattr(data.sustainability_info, name)
            if value is not None and value > 0:
                filled += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field=f"sustainability_info.{name}",
                    message=f"Missing {name}",
                    suggestion=f"Provide {name} for environmental impact assessment",
                ))

        for name in _CIRCULARITY_FIELDS:
            total += 1
            if getattr(data.circularity_metrics, name) is not None:
                filled += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field=f"circularity_metrics.{name}",
                    message=f"Missing {name}",
                    suggestion=f"Provide {name} for circularity assessment",
                ))

        total += 1
        if data.compliance_declarations:
            filled += 1
        else:
            issues.append(QualityIssue(
                severity=IssueSeverity.CRITICAL,
                field="compliance_declarations",
                message="No compliance declarations",
                suggestion="Add compliance status for relevant regulations (REACH, RoHS, etc.)",
            ))

        total += 1
        if data.eol_instructions and len(data.eol_instructions) > self._config.eol_min_length:
            filled += 1
        else:
            issues.append(QualityIssue(
                severity=IssueSeverity.WARNING,
                field="eol_instructions",
                message="End-of-life instructions missing or incomplete",
                suggestion="Provide detailed recycling and disposal instructions",
            ))

        return DimensionScore(
            dimension=QualityDimension.COMPLETENESS,
            score=_pct(filled, total),
            passed=filled,
            total=total,
            issues=issues,
        )

    # ---------------------------------------------------------------
    # Dimension 2: Accuracy
    # ---------------------------------------------------------------

    def score_accuracy(self, data: DPPData) -> DimensionScore:
        """Range-check every metric that is present. No checks -> 100."""
        issues: list[QualityIssue] = []
        passed = 0
        total = 0

        if data.material_composition:
            total += 1
            if materials_sum_ok(data, self._config.percentage_tolerance):
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.CRITICAL,
                    field="material_composition",
                    message=(
                        "Material percentages are inaccurate "
                        f"({data.material_percentage_total:.1f}%)"
                    ),
                    suggestion="Ensure all material percentages sum to exactly 100%",
                ))

            for idx, material in enumerate(data.material_composition):
                total += 1
                if material.percentage is None:
                    issues.append(QualityIssue(
                        severity=IssueSeverity.CRITICAL,
                        field=f"material_composition[{idx}].percentage",
                        message="Missing percentage",
                        suggestion="Enter the material's share of the product weight",
                    ))
                elif 0.0 <= material.percentage <= 100.0:
                    passed += 1
                else:
                    issues.append(QualityIssue(
                        severity=IssueSeverity.CRITICAL,
                        field=f"material_composition[{idx}].percentage",
                        message=f"Invalid percentage: {material.percentage}%",
                        suggestion="Percentage must be between 0 and 100",
                    ))

        footprint = data.sustainability_info.carbon_footprint_kg
        if footprint is not None:
            total += 1
            if 0.0 <= footprint < self._config.max_carbon_footprint_kg:
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field="sustainability_info.carbon_footprint_kg",
                    message="Carbon footprint value seems unrealistic",
                    suggestion="Verify carbon footprint calculation",
                ))

        metrics = data.circularity_metrics
        range_checks = (
            ("recyclability_score", metrics.recyclability_score, 10.0,
             "Recyclability score must be between 0 and 10",
             "Correct recyclability score to valid range"),
            ("repairability_index", metrics.repairability_index, 10.0,
             "Repairability index must be between 0 and 10",
             "Correct repairability index to valid range"),
            ("recycled_content_percentage", metrics.recycled_content_percentage, 100.0,
             "Recycled content must be between 0 and 100%",
             "Correct recycled content percentage"),
        )
        for name, value, upper, message, suggestion in range_checks:
            if value is None:
                continue
            total += 1
            if 0.0 <= value <= upper:
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.CRITICAL,
                    field=f"circularity_metrics.{name}",
                    message=message,
                    suggestion=suggestion,
                ))

        lifetime = metrics.expected_lifetime_years
        if lifetime is not None:
            total += 1
            if 0.0 < lifetime <= self._config.max_lifetime_years:
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field="circularity_metrics.expected_lifetime_years",
                    message="Expected lifetime seems unrealistic",
                    suggestion="Verify expected product lifetime",
                ))

        return DimensionScore(
            dimension=QualityDimension.ACCURACY,
            score=_pct(passed, total),
            passed=passed,
            total=total,
            issues=issues,
        )

    # ---------------------------------------------------------------
    # Dimension 3: Consistency
    # ---------------------------------------------------------------

    def score_consistency(self, data: DPPData) -> DimensionScore:
        """Cross-field heuristics. No applicable checks -> 100."""
        issues: list[QualityIssue] = []
        passed = 0
        total = 0
        materials = data.material_composition
        recyclability = data.circularity_metrics.recyclability_score

        if materials and recyclability is not None:
            total += 1
            recyclable = sum(1 for m in materials if m.recyclable)
            expected = recyclable / len(materials) * 10
            if abs(recyclability - expected) < self._config.recyclability_consistency_tolerance:
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field="circularity_metrics.recyclability_score",
                    message="Recyclability score inconsistent with materials",
                    suggestion=f"Based on materials, expected score around {expected:.1f}/10",
                ))

        for idx, material in enumerate(materials):
            if not material.hazardous:
                continue
            total += 1
            if material.cas_number:
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.WARNING,
                    field=f"material_composition[{idx}].cas_number",
                    message="Hazardous material missing CAS number",
                    suggestion="Provide CAS number for regulatory compliance",
                ))

        footprint = data.sustainability_info.carbon_footprint_kg
        if footprint and materials:
            total += 1
            high_impact = any(
                keyword in (m.material_name or "").lower()
                for m in materials
                for keyword in self._config.high_impact_materials
            )
            if (
                (high_impact and footprint > self._config.high_impact_min_footprint_kg)
                or (not high_impact and footprint >= 0)
            ):
                passed += 1
            else:
                issues.append(QualityIssue(
                    severity=IssueSeverity.INFO,
                    field="sustainability_info.carbon_footprint_kg",
                    message="Carbon footprint may not align with materials",
                    suggestion="Verify PCF calculation methodology",
                ))

        return DimensionScore(
            dimension=QualityDimension.CONSISTENCY,
            score=_pct(passed, total),
            passed=passed,
            total=total,
            issues=issues,
        )

    # ---------------------------------------------------------------
    # Dimension 4: Recency
    # ---------------------------------------------------------------

    def score_recency(
        self,
        data: DPPData,
        *,
        now: datetime | None = None,
    ) -> DimensionScore:
        """Age-based decay. A passport with no last_updated is new data."""
        if data.last_updated is None:
            return DimensionScore(dimension=QualityDimension.RECENCY, score=100.0)

        current = ensure_utc(now or utc_now())
        days = (current - ensure_utc(data.last_updated)).total_seconds() / 86_400

        score = 100.0
        issues: list[QualityIssue] = []
        for older_than, bracket_score, severity in self._config.recency_thresholds:
            if days > older_than:
                score = bracket_score
                suggestion = (
                    "Consider updating DPP data annually"
                    if severity == IssueSeverity.WARNING
                    else "DPP data should be reviewed periodically"
                )
                issues.append(QualityIssue(
                    severity=IssueSeverity(severity),
                    field="last_updated",
                    message=f"Data is {int(round_half_up(days))} days old",
                    suggestion=suggestion,
                ))
                break

        return DimensionScore(
            dimension=QualityDimension.RECENCY,
            score=score,
            days_since_update=int(round_half_up(days)),
            issues=issues,
        )

    # ---------------------------------------------------------------
    # Recommendations
    # ---------------------------------------------------------------

    def build_recommendations(
        self,
        scores: QualityScores,
        data: DPPData,
        template: CategoryTemplate | None = None,
    ) -> Recommendations:
        """Bucket issues by severity and derive prioritised action items."""
        all_issues = scores.all_issues()
        actions: list[ActionItem] = []

        if template is not None:
            if template.critical_substances and not data.material_composition:
                actions.append(ActionItem(
                    priority=ActionPriority.HIGH,
                    category="Regulatory Compliance",
                    message=f"For {template.label} products, you must declare critical substances",
                    action=f"Check for: {', '.join(template.critical_substances)}",
                ))
            for name in template.mandatory_fields:
                if not getattr(data.general_info, name, None) and not getattr(
                    data.sustainability_info, name, None
                ):
                    actions.append(ActionItem(
                        priority=ActionPriority.HIGH,
                        category="Mandatory Field",
                        message=f"Missing mandatory field for {template.label}: {name}",
                        action=f"Provide {name} data",
                    ))

        if scores.accuracy.score < self._config.accuracy_action_below:
            actions.append(ActionItem(
                priority=ActionPriority.HIGH,
                category="Data Accuracy",
                message="Critical accuracy issues detected",
                action="Review and correct values that are out of valid ranges",
            ))
        if scores.completeness.score < self._config.completeness_action_below:
            actions.append(ActionItem(
                priority=ActionPriority.MEDIUM,
                category="Data Completeness",
                message="Several required fields are missing",
                action="Fill in missing product information and sustainability data",
            ))
        if scores.consistency.score < self._config.consistency_action_below:
            actions.append(ActionItem(
                priority=ActionPriority.LOW,
                category="Data Consistency",
                message="Some data inconsistencies detected",
                action="Verify that related fields align correctly",
            ))

        return Recommendations(
            critical_issues=[i for i in all_issues if i.severity == IssueSeverity.CRITICAL],
            warning_issues=[i for i in all_issues if i.severity == IssueSeverity.WARNING],
            info_issues=[i for i in all_issues if i.severity == IssueSeverity.INFO],
            action_items=actions,
        )
