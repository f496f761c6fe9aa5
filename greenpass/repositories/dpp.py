"""Digital Product Passport repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenpass.db.tables import DPPRecordRow
from greenpass.models.common import utc_now


class DPPRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, dpp_id: UUID, tenant_id: UUID, data: dict,
                     status: str = "DRAFT") -> DPPRecordRow:
        now = utc_now()
        row = DPPRecordRow(
            dpp_id=dpp_id, tenant_id=tenant_id, status=status, data=data,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, dpp_id: UUID) -> DPPRecordRow | None:
        return await self._session.get(DPPRecordRow, dpp_id)

    async def get_for_tenant(self, dpp_id: UUID, tenant_id: UUID) -> DPPRecordRow | None:
        row = await self.get(dpp_id)
        if row is None or row.tenant_id != tenant_id:
            return None
        return row

    async def list_by_tenant(self, tenant_id: UUID) -> list[DPPRecordRow]:
        result = await self._session.execute(
            select(DPPRecordRow)
            .where(DPPRecordRow.tenant_id == tenant_id)
            .order_by(DPPRecordRow.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_data(self, dpp_id: UUID, data: dict) -> DPPRecordRow | None:
        """Replace passport content. Edits always return the record to DRAFT."""
        row = await self.get(dpp_id)
        if row is not None:
            row.data = data
            row.status = "DRAFT"
            row.scheduled_for = None
            row.updated_at = utc_now()
            await self._session.flush()
        return row

    async def set_scores(self, dpp_id: UUID, *, quality_score: int | None = None,
                         circularity_index: float | None = None) -> DPPRecordRow | None:
        row = await self.get(dpp_id)
        if row is not None:
            if quality_score is not None:
                row.quality_score = quality_score
            if circularity_index is not None:
                row.circularity_index = circularity_index
            row.updated_at = utc_now()
            await self._session.flush()
        return row

    async def schedule(self, dpp_id: UUID, scheduled_for: datetime) -> DPPRecordRow | None:
        row = await self.get(dpp_id)
        if row is not None:
            row.status = "SCHEDULED"
            row.scheduled_for = scheduled_for
            row.updated_at = utc_now()
            await self._session.flush()
        return row

    async def publish(self, dpp_id: UUID) -> DPPRecordRow | None:
        row = await self.get(dpp_id)
        if row is not None:
            now = utc_now()
            row.status = "PUBLISHED"
            row.published_at = now
            row.scheduled_for = None
            row.updated_at = now
            await self._session.flush()
        return row
