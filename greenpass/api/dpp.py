"""FastAPI Digital Product Passport endpoints.

POST /v1/dpps                              - create draft passport
GET  /v1/dpps                              - list tenant passports
GET  /v1/dpps/{dpp_id}                     - get passport
PUT  /v1/dpps/{dpp_id}                     - replace content (back to DRAFT)
POST /v1/dpps/{dpp_id}/quality             - quality score + publication readiness
POST /v1/dpps/{dpp_id}/circularity         - compute circularity index
POST /v1/dpps/{dpp_id}/circularity/suggest - provider-suggested durability inputs
POST /v1/dpps/{dpp_id}/publish             - publish if the readiness gate passes
POST /v1/dpps/{dpp_id}/schedule            - schedule publication
GET  /v1/dpps/{dpp_id}/audit               - audit chain entries
POST /v1/dpps/{dpp_id}/audit/verify        - verify audit chain
GET  /v1/public/dpps/{dpp_id}              - public view of a published passport

Every mutating endpoint appends to the passport's audit chain.
"""

import logging
from dataclasses import asdict
from datetime import datetime
from uuid import UUID

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from greenpass.agents.assessment_provider import (
    AssessmentProvider,
    AssessmentRequest,
    CircularitySuggestion,
    circularity_prompt,
)
from greenpass.api.dependencies import (
    get_assessment_provider,
    get_audit_log,
    get_dpp_repo,
    require_user,
)
from greenpass.db.tables import DPPRecordRow, UserRow
from greenpass.engine.circularity import (
    CircularityResult,
    CircularityScorer,
    CircularityWeights,
    recyclability_from_materials,
)
from greenpass.governance.audit_chain import HashChainAuditLog
from greenpass.governance.publication_gate import (
    PublicationReadinessGate,
    ReadinessResult,
    validate_schedule_date,
)
from greenpass.models.audit import AuditLogEntry, ChainVerification
from greenpass.models.common import AuditAction, RecordStatus, ensure_utc, new_uuid7
from greenpass.models.dpp import DPPData
from greenpass.quality.field_validation import validate_field
from greenpass.quality.models import DataQualityResult, QualityIssue
from greenpass.quality.report import DataQualityReport, generate_data_quality_report
from greenpass.quality.scorer import DataQualityScorer
from greenpass.quality.templates import get_category_template
from greenpass.repositories.dpp import DPPRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/dpps", tags=["dpp"])
public_router = APIRouter(prefix="/v1/public/dpps", tags=["public"])

_scorer = DataQualityScorer()
_gate = PublicationReadinessGate()


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class DPPResponse(BaseModel):
    dpp_id: str
    tenant_id: str
    status: RecordStatus
    data: DPPData
    quality_score: int | None = None
    circularity_index: float | None = None
    scheduled_for: datetime | None = None
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReadinessCheckResponse(BaseModel):
    name: str
    passed: bool
    message: str


class ReadinessResponse(BaseModel):
    can_publish: bool
    status: str
    message: str
    quality_score: int
    checks: list[ReadinessCheckResponse]


class QualityResponse(BaseModel):
    dpp_id: str
    quality: DataQualityResult
    readiness: ReadinessResponse
    report: DataQualityReport


class FieldValidationRequest(BaseModel):
    field_path: str
    value: float | str | None = None


class FieldValidationResponse(BaseModel):
    field_path: str
    issues: list[QualityIssue]


class CircularityRequest(BaseModel):
    weights: CircularityWeights | None = None


class PublishResponse(BaseModel):
    dpp: DPPResponse
    readiness: ReadinessResponse


class ScheduleRequest(BaseModel):
    scheduled_for: datetime


class AuditEntriesResponse(BaseModel):
    record_id: str
    entries: list[AuditLogEntry] = Field(default_factory=list)


class PublicDPPResponse(BaseModel):
    dpp_id: str
    product_name: str | None
    manufacturer: str | None
    gtin: str | None
    category: str | None
    data: DPPData
    circularity_index: float | None = None
    published_at: datetime | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_response(row: DPPRecordRow) -> DPPResponse:
    return DPPResponse(
        dpp_id=str(row.dpp_id),
        tenant_id=str(row.tenant_id),
        status=RecordStatus(row.status),
        data=DPPData.model_validate(row.data),
        quality_score=row.quality_score,
        circularity_index=row.circularity_index,
        scheduled_for=ensure_utc(row.scheduled_for) if row.scheduled_for else None,
        published_at=ensure_utc(row.published_at) if row.published_at else None,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _readiness_response(result: ReadinessResult) -> ReadinessResponse:
    return ReadinessResponse(
        can_publish=result.can_publish,
        status=result.status.value,
        message=result.message,
        quality_score=result.quality_score,
        checks=[ReadinessCheckResponse(**asdict(c)) for c in result.checks],
    )


async def _get_owned(dpp_id: UUID, user: UserRow, repo: DPPRepository) -> DPPRecordRow:
    row = await repo.get_for_tenant(dpp_id, user.tenant_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"DPP {dpp_id} not found.")
    return row


def _evaluate(data: DPPData) -> tuple[DataQualityResult, ReadinessResult]:
    quality = _scorer.score(data, get_category_template(data.category))
    return quality, _gate.evaluate(data, quality)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post("", status_code=201, response_model=DPPResponse)
async def create_dpp(
    body: DPPData,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> DPPResponse:
    """Create a draft passport. Drafts are saved whatever their quality."""
    row = await repo.create(
        dpp_id=new_uuid7(),
        tenant_id=user.tenant_id,
        data=body.model_dump(mode="json"),
    )
    await audit.append(
        row.dpp_id, AuditAction.CREATE, user.email,
        {"status": row.status, "product_name": body.general_info.product_name},
    )
    return _to_response(row)


@router.get("", response_model=list[DPPResponse])
async def list_dpps(
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
) -> list[DPPResponse]:
    rows = await repo.list_by_tenant(user.tenant_id)
    return [_to_response(r) for r in rows]


@router.get("/{dpp_id}", response_model=DPPResponse)
async def get_dpp(
    dpp_id: UUID,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
) -> DPPResponse:
    return _to_response(await _get_owned(dpp_id, user, repo))


@router.put("/{dpp_id}", response_model=DPPResponse)
async def update_dpp(
    dpp_id: UUID,
    body: DPPData,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> DPPResponse:
    """Replace passport content. Any edit returns the passport to DRAFT."""
    await _get_owned(dpp_id, user, repo)
    row = await repo.update_data(dpp_id, body.model_dump(mode="json"))
    await audit.append(
        dpp_id, AuditAction.UPDATE, user.email,
        {"status": row.status, "product_name": body.general_info.product_name},
    )
    return _to_response(row)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@router.post("/{dpp_id}/quality", response_model=QualityResponse)
async def score_quality(
    dpp_id: UUID,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> QualityResponse:
    """Score data quality, store the score and report publication readiness."""
    row = await _get_owned(dpp_id, user, repo)
    data = DPPData.model_validate(row.data)
    quality, readiness = _evaluate(data)
    await repo.set_scores(dpp_id, quality_score=quality.overall_score)
    await audit.append(
        dpp_id, AuditAction.RECALCULATE, user.email,
        {"quality_score": quality.overall_score, "grade": quality.grade.grade},
    )
    return QualityResponse(
        dpp_id=str(dpp_id),
        quality=quality,
        readiness=_readiness_response(readiness),
        report=generate_data_quality_report(quality, data),
    )


@router.post("/{dpp_id}/validate-field", response_model=FieldValidationResponse)
async def validate_dpp_field(
    dpp_id: UUID,
    body: FieldValidationRequest,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
) -> FieldValidationResponse:
    row = await _get_owned(dpp_id, user, repo)
    data = DPPData.model_validate(row.data)
    return FieldValidationResponse(
        field_path=body.field_path,
        issues=validate_field(body.field_path, body.value, data),
    )


@router.post("/{dpp_id}/circularity", response_model=CircularityResult)
async def compute_circularity(
    dpp_id: UUID,
    body: CircularityRequest | None = None,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> CircularityResult:
    """Compute and store the circularity index from the passport's metrics."""
    row = await _get_owned(dpp_id, user, repo)
    data = DPPData.model_validate(row.data)
    metrics = data.circularity_metrics

    recyclability = metrics.recyclability_score
    if recyclability is None:
        recyclability = recyclability_from_materials(data.material_composition)
    recycled_fraction = (
        metrics.recycled_content_percentage / 100.0
        if metrics.recycled_content_percentage is not None
        else None
    )

    scorer = CircularityScorer(body.weights if body else None)
    result = scorer.compute(
        data.material_composition,
        metrics.repairability_index,
        metrics.expected_lifetime_years,
        recyclability,
        recycled_content_fraction=recycled_fraction,
    )
    await repo.set_scores(dpp_id, circularity_index=result.circularity_index)
    await audit.append(
        dpp_id, AuditAction.RECALCULATE, user.email,
        {
            "circularity_index": result.circularity_index,
            "weights_total": result.weights_total,
        },
    )
    return result


@router.post("/{dpp_id}/circularity/suggest", response_model=CircularitySuggestion)
async def suggest_circularity(
    dpp_id: UUID,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    provider: AssessmentProvider = Depends(get_assessment_provider),
) -> CircularitySuggestion:
    """Ask the assessment provider for repairability and lifetime estimates.

    Nothing is stored; the user reviews the suggestion and saves it via PUT.
    """
    row = await _get_owned(dpp_id, user, repo)
    data = DPPData.model_validate(row.data)
    if not data.material_composition:
        raise HTTPException(status_code=422, detail="Add materials first.")

    materials = [
        {"name": m.material_name, "percentage": m.percentage, "recyclable": m.recyclable}
        for m in data.material_composition
    ]
    try:
        suggestion = await provider.suggest(AssessmentRequest(
            prompt=circularity_prompt(materials),
            output_schema=CircularitySuggestion,
        ))
    except (ValueError, httpx.HTTPError) as exc:
        logger.warning("Circularity suggestion failed for %s: %s", dpp_id, exc)
        raise HTTPException(status_code=502, detail=f"Assessment provider error: {exc}")
    return CircularitySuggestion.model_validate(suggestion.model_dump())


# ---------------------------------------------------------------------------
# Publication
# ---------------------------------------------------------------------------


@router.post("/{dpp_id}/publish", response_model=PublishResponse)
async def publish_dpp(
    dpp_id: UUID,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> PublishResponse:
    """Publish if the readiness gate passes; 409 with the failed checks otherwise."""
    row = await _get_owned(dpp_id, user, repo)
    data = DPPData.model_validate(row.data)
    quality, readiness = _evaluate(data)
    if not readiness.can_publish:
        raise HTTPException(
            status_code=409,
            detail=_readiness_response(readiness).model_dump(),
        )

    await repo.set_scores(dpp_id, quality_score=quality.overall_score)
    row = await repo.publish(dpp_id)
    await audit.append(
        dpp_id, AuditAction.PUBLISH, user.email,
        {"quality_score": quality.overall_score, "readiness": readiness.status.value},
    )
    logger.info("Published DPP %s (score %s)", dpp_id, quality.overall_score)
    return PublishResponse(dpp=_to_response(row), readiness=_readiness_response(readiness))


@router.post("/{dpp_id}/schedule", response_model=DPPResponse)
async def schedule_dpp(
    dpp_id: UUID,
    body: ScheduleRequest,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> DPPResponse:
    """Store a future publication date for a passport that passes the gate."""
    row = await _get_owned(dpp_id, user, repo)
    check = validate_schedule_date(body.scheduled_for)
    if not check.valid:
        raise HTTPException(status_code=422, detail=check.reason)

    data = DPPData.model_validate(row.data)
    quality, readiness = _evaluate(data)
    if not readiness.can_publish:
        raise HTTPException(
            status_code=409,
            detail=_readiness_response(readiness).model_dump(),
        )

    await repo.set_scores(dpp_id, quality_score=quality.overall_score)
    row = await repo.schedule(dpp_id, ensure_utc(body.scheduled_for))
    await audit.append(
        dpp_id, AuditAction.SCHEDULE, user.email,
        {
            "scheduled_for": ensure_utc(body.scheduled_for).isoformat(),
            "quality_score": quality.overall_score,
        },
    )
    return _to_response(row)


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


@router.get("/{dpp_id}/audit", response_model=AuditEntriesResponse)
async def list_audit_entries(
    dpp_id: UUID,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> AuditEntriesResponse:
    await _get_owned(dpp_id, user, repo)
    return AuditEntriesResponse(record_id=str(dpp_id), entries=await audit.entries(dpp_id))


@router.post("/{dpp_id}/audit/verify", response_model=ChainVerification)
async def verify_audit_chain(
    dpp_id: UUID,
    recompute_hashes: bool = False,
    user: UserRow = Depends(require_user),
    repo: DPPRepository = Depends(get_dpp_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> ChainVerification:
    await _get_owned(dpp_id, user, repo)
    return await audit.verify(dpp_id, recompute_hashes=recompute_hashes)


# ---------------------------------------------------------------------------
# Public view
# ---------------------------------------------------------------------------


@public_router.get("/{dpp_id}", response_model=PublicDPPResponse)
async def get_public_dpp(
    dpp_id: UUID,
    repo: DPPRepository = Depends(get_dpp_repo),
) -> PublicDPPResponse:
    """Unauthenticated view; only published passports are visible."""
    row = await repo.get(dpp_id)
    if row is None or row.status != RecordStatus.PUBLISHED:
        raise HTTPException(status_code=404, detail="DPP not found or not published.")
    data = DPPData.model_validate(row.data)
    return PublicDPPResponse(
        dpp_id=str(row.dpp_id),
        product_name=data.general_info.product_name,
        manufacturer=data.general_info.manufacturer,
        gtin=data.general_info.gtin,
        category=data.category,
        data=data,
        circularity_index=row.circularity_index,
        published_at=ensure_utc(row.published_at) if row.published_at else None,
    )
