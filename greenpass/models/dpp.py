"""Digital Product Passport record models.

Numeric ranges are intentionally not enforced here: an out-of-range value
is a data-quality issue to report, not a reason to refuse a draft.
"""

from datetime import datetime

from pydantic import Field

from greenpass.models.common import (
    GreenPassBase,
    RecordStatus,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)


class MaterialComposition(GreenPassBase):
    """One material line of a product's bill of materials."""

    material_name: str | None = Field(default=None, alias="material")
    percentage: float | None = None
    recyclable: bool = False
    hazardous: bool = False
    cas_number: str | None = None
    recycled_content_pct: float | None = None


class GeneralInfo(GreenPassBase):
    product_name: str | None = None
    manufacturer: str | None = None
    gtin: str | None = None
    model_number: str | None = None
    country_of_origin: str | None = None


class SustainabilityInfo(GreenPassBase):
    carbon_footprint_kg: float | None = None
    water_usage_liters: float | None = None
    energy_consumption_kwh: float | None = None


class CircularityMetrics(GreenPassBase):
    recyclability_score: float | None = None
    recycled_content_percentage: float | None = None
    repairability_index: float | None = None
    expected_lifetime_years: float | None = None
    circularity_index: float | None = None
    calculation_method: str | None = None


class ComplianceDeclaration(GreenPassBase):
    """Conformity statement against one regulation (REACH, RoHS, ...)."""

    regulation: str
    status: str = "compliant"
    evidence_url: str | None = None


class DPPData(GreenPassBase):
    """The editable content of a passport, as assembled by the wizard."""

    general_info: GeneralInfo = Field(default_factory=GeneralInfo)
    category: str | None = None
    material_composition: list[MaterialComposition] = Field(default_factory=list)
    supply_chain_info: dict[str, object] = Field(default_factory=dict)
    sustainability_info: SustainabilityInfo = Field(default_factory=SustainabilityInfo)
    circularity_metrics: CircularityMetrics = Field(default_factory=CircularityMetrics)
    compliance_declarations: list[ComplianceDeclaration] = Field(default_factory=list)
    eol_instructions: str = ""
    last_updated: datetime | None = None

    @property
    def material_percentage_total(self) -> float:
        return sum(m.percentage or 0.0 for m in self.material_composition)


class DigitalProductPassport(GreenPassBase):
    """A persisted passport with its lifecycle state."""

    dpp_id: UUIDv7 = Field(default_factory=new_uuid7)
    tenant_id: UUIDv7
    status: RecordStatus = RecordStatus.DRAFT
    data: DPPData = Field(default_factory=DPPData)
    quality_score: int | None = None
    scheduled_for: datetime | None = None
    published_at: datetime | None = None
    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)


class CategoryTemplate(GreenPassBase):
    """Per-category expectations applied when scoring a passport."""

    category: str
    label: str
    required_materials: list[str] = Field(default_factory=list)
    critical_substances: list[str] = Field(default_factory=list)
    mandatory_fields: list[str] = Field(default_factory=list)
    typical_lifetime_years: float | None = None
    recyclability_weight: float | None = None
    repairability_weight: float | None = None
    eol_instructions_template: str = ""
