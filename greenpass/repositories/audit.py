"""Audit log repository - append-only hash-chain storage.

Repos take AsyncSession, call add()/flush() only - never commit().
The session dependency handles commit/rollback (Unit-of-Work).
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from greenpass.db.tables import AuditLogEntryRow
from greenpass.models.common import utc_now


class AuditLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def savepoint(self) -> AsyncSessionTransaction:
        """SAVEPOINT scope for a read-then-append; a failure inside it leaves
        the caller's transaction usable."""
        return self._session.begin_nested()

    async def append(self, *, entry_id: UUID, record_id: UUID, action_type: str,
                     actor: str, timestamp: str, hash: str, previous_hash: str,
                     payload: dict) -> AuditLogEntryRow:
        row = AuditLogEntryRow(
            entry_id=entry_id, record_id=record_id, action_type=action_type,
            actor=actor, timestamp=timestamp, hash=hash,
            previous_hash=previous_hash, payload=payload,
            verification_status="VERIFIED", created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, entry_id: UUID) -> AuditLogEntryRow | None:
        return await self._session.get(AuditLogEntryRow, entry_id)

    async def list_for_record(self, record_id: UUID, *,
                              newest_first: bool = False) -> list[AuditLogEntryRow]:
        order = (
            (AuditLogEntryRow.created_at.desc(), AuditLogEntryRow.entry_id.desc())
            if newest_first
            else (AuditLogEntryRow.created_at.asc(), AuditLogEntryRow.entry_id.asc())
        )
        result = await self._session.execute(
            select(AuditLogEntryRow)
            .where(AuditLogEntryRow.record_id == record_id)
            .order_by(*order)
        )
        return list(result.scalars().all())

    async def latest_for_record(self, record_id: UUID) -> AuditLogEntryRow | None:
        entries = await self.list_for_record(record_id, newest_first=True)
        return entries[0] if entries else None

    async def mark_tampered(self, entry_id: UUID) -> AuditLogEntryRow | None:
        row = await self.get(entry_id)
        if row is not None:
            row.verification_status = "TAMPERED"
            await self._session.flush()
        return row
