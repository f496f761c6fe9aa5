"""FastAPI double-materiality endpoints.

POST /v1/materiality/topics         - record a topic with analyst scores
POST /v1/materiality/topics/assess  - record a topic with provider-suggested scores
GET  /v1/materiality/topics         - list tenant topics
GET  /v1/materiality/summary        - E/S/G pillar summary
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from greenpass.agents.assessment_provider import (
    AssessmentProvider,
    AssessmentRequest,
    materiality_prompt,
)
from greenpass.api.dependencies import (
    get_assessment_provider,
    get_audit_log,
    get_materiality_repo,
    require_user,
)
from greenpass.db.tables import MaterialityTopicRow, UserRow
from greenpass.engine.materiality import MaterialityScorer
from greenpass.governance.audit_chain import HashChainAuditLog
from greenpass.models.common import AuditAction, ensure_utc
from greenpass.models.materiality import MaterialityScores, MaterialityTopic
from greenpass.repositories.materiality import MaterialityTopicRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/materiality", tags=["materiality"])

_scorer = MaterialityScorer()


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateTopicRequest(BaseModel):
    esrs_standard: str
    topic_name: str
    impact_materiality_score: float = Field(ge=0.0, le=10.0)
    financial_materiality_score: float = Field(ge=0.0, le=10.0)
    rationale: str | None = None


class AssessTopicRequest(BaseModel):
    esrs_standard: str
    topic_name: str
    context: str = ""


class PillarSummaryResponse(BaseModel):
    pillar: str
    total: int
    material: int
    avg_impact: float
    avg_financial: float


class MaterialitySummaryResponse(BaseModel):
    total_topics: int
    material_topics: int
    pillars: list[PillarSummaryResponse]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _row_to_topic(row: MaterialityTopicRow) -> MaterialityTopic:
    return MaterialityTopic(
        topic_id=row.topic_id,
        tenant_id=row.tenant_id,
        esrs_standard=row.esrs_standard,
        topic_name=row.topic_name,
        impact_materiality_score=row.impact_materiality_score,
        financial_materiality_score=row.financial_materiality_score,
        is_material=row.is_material,
        rationale=row.rationale,
        created_at=ensure_utc(row.created_at),
    )


async def _store(
    topic: MaterialityTopic,
    action: AuditAction,
    user: UserRow,
    repo: MaterialityTopicRepository,
    audit: HashChainAuditLog,
    source: str,
) -> MaterialityTopic:
    await repo.create(topic)
    await audit.append(
        topic.topic_id, action, user.email,
        {
            "esrs_standard": topic.esrs_standard,
            "impact_materiality_score": topic.impact_materiality_score,
            "financial_materiality_score": topic.financial_materiality_score,
            "is_material": topic.is_material,
            "source": source,
        },
    )
    return topic


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/topics", status_code=201, response_model=MaterialityTopic)
async def create_topic(
    body: CreateTopicRequest,
    user: UserRow = Depends(require_user),
    repo: MaterialityTopicRepository = Depends(get_materiality_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
) -> MaterialityTopic:
    topic = _scorer.assess(
        tenant_id=user.tenant_id,
        esrs_standard=body.esrs_standard,
        topic_name=body.topic_name,
        scores=MaterialityScores(
            impact_materiality_score=body.impact_materiality_score,
            financial_materiality_score=body.financial_materiality_score,
            rationale=body.rationale,
        ),
    )
    return await _store(topic, AuditAction.CREATE, user, repo, audit, source="analyst")


@router.post("/topics/assess", status_code=201, response_model=MaterialityTopic)
async def assess_topic(
    body: AssessTopicRequest,
    user: UserRow = Depends(require_user),
    repo: MaterialityTopicRepository = Depends(get_materiality_repo),
    audit: HashChainAuditLog = Depends(get_audit_log),
    provider: AssessmentProvider = Depends(get_assessment_provider),
) -> MaterialityTopic:
    """Score a topic with the assessment provider, then classify it locally."""
    try:
        suggestion = await provider.suggest(AssessmentRequest(
            prompt=materiality_prompt(
                esrs_standard=body.esrs_standard,
                topic_name=body.topic_name,
                context=body.context,
            ),
            output_schema=MaterialityScores,
        ))
        scores = MaterialityScores.model_validate(suggestion.model_dump())
    except (ValueError, httpx.HTTPError) as exc:
        logger.warning("Materiality assessment failed for %s: %s", body.topic_name, exc)
        raise HTTPException(status_code=502, detail=f"Assessment provider error: {exc}")

    topic = _scorer.assess(
        tenant_id=user.tenant_id,
        esrs_standard=body.esrs_standard,
        topic_name=body.topic_name,
        scores=scores,
    )
    return await _store(
        topic, AuditAction.ASSESS, user, repo, audit, source="assessment_provider",
    )


@router.get("/topics", response_model=list[MaterialityTopic])
async def list_topics(
    user: UserRow = Depends(require_user),
    repo: MaterialityTopicRepository = Depends(get_materiality_repo),
) -> list[MaterialityTopic]:
    rows = await repo.list_by_tenant(user.tenant_id)
    return [_row_to_topic(r) for r in rows]


@router.get("/summary", response_model=MaterialitySummaryResponse)
async def materiality_summary(
    user: UserRow = Depends(require_user),
    repo: MaterialityTopicRepository = Depends(get_materiality_repo),
) -> MaterialitySummaryResponse:
    topics = [_row_to_topic(r) for r in await repo.list_by_tenant(user.tenant_id)]
    pillars = _scorer.summarize(topics)
    return MaterialitySummaryResponse(
        total_topics=len(topics),
        material_topics=sum(1 for t in topics if t.is_material),
        pillars=[
            PillarSummaryResponse(
                pillar=p.pillar.value,
                total=p.total,
                material=p.material,
                avg_impact=p.avg_impact,
                avg_financial=p.avg_financial,
            )
            for p in pillars
        ],
    )
