"""CSRD double-materiality topic models.

Impact and financial scores are usually suggested by an external
assessment call. The [0, 10] bounds below are the trust boundary for that
output: anything outside is rejected before it can be stored.
"""

from enum import StrEnum

from pydantic import Field

from greenpass.models.common import (
    GreenPassBase,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)


class ESRSPillar(StrEnum):
    """ESRS topical grouping, derived from the standard code prefix."""

    ENVIRONMENTAL = "Environmental"
    SOCIAL = "Social"
    GOVERNANCE = "Governance"


ESRS_STANDARDS: tuple[str, ...] = (
    "ESRS E1", "ESRS E2", "ESRS E3", "ESRS E4", "ESRS E5",
    "ESRS S1", "ESRS S2", "ESRS S3", "ESRS S4",
    "ESRS G1",
)


def pillar_for(esrs_standard: str) -> ESRSPillar | None:
    """Map 'ESRS E1' -> ENVIRONMENTAL etc. Unknown codes map to None."""
    code = esrs_standard.strip().upper()
    if code.startswith("ESRS E"):
        return ESRSPillar.ENVIRONMENTAL
    if code.startswith("ESRS S"):
        return ESRSPillar.SOCIAL
    if code.startswith("ESRS G"):
        return ESRSPillar.GOVERNANCE
    return None


class MaterialityScores(GreenPassBase):
    """Impact / financial materiality pair, each on a 0-10 scale."""

    impact_materiality_score: float = Field(ge=0.0, le=10.0)
    financial_materiality_score: float = Field(ge=0.0, le=10.0)
    rationale: str | None = None


class MaterialityTopic(GreenPassBase):
    topic_id: UUIDv7 = Field(default_factory=new_uuid7)
    tenant_id: UUIDv7
    esrs_standard: str
    topic_name: str
    impact_materiality_score: float = Field(ge=0.0, le=10.0)
    financial_materiality_score: float = Field(ge=0.0, le=10.0)
    is_material: bool = False
    rationale: str | None = None
    created_at: UTCTimestamp = Field(default_factory=utc_now)
