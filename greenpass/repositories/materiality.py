"""Materiality topic repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenpass.db.tables import MaterialityTopicRow
from greenpass.models.materiality import MaterialityTopic


class MaterialityTopicRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, topic: MaterialityTopic) -> MaterialityTopicRow:
        row = MaterialityTopicRow(
            topic_id=topic.topic_id,
            tenant_id=topic.tenant_id,
            esrs_standard=topic.esrs_standard,
            topic_name=topic.topic_name,
            impact_materiality_score=topic.impact_materiality_score,
            financial_materiality_score=topic.financial_materiality_score,
            is_material=topic.is_material,
            rationale=topic.rationale,
            created_at=topic.created_at,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, topic_id: UUID) -> MaterialityTopicRow | None:
        return await self._session.get(MaterialityTopicRow, topic_id)

    async def list_by_tenant(self, tenant_id: UUID) -> list[MaterialityTopicRow]:
        result = await self._session.execute(
            select(MaterialityTopicRow)
            .where(MaterialityTopicRow.tenant_id == tenant_id)
            .order_by(MaterialityTopicRow.esrs_standard, MaterialityTopicRow.created_at)
        )
        return list(result.scalars().all())
