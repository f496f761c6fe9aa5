"""Hash-chained audit log for passports and materiality topics.

Every mutating action appends an entry whose ``previous_hash`` is the
hash of the record's newest entry (64 zeros for the first one):

    hash = SHA256(json.dumps({record_id, action_type, actor, timestamp,
                              previous_hash, payload}, sort_keys=True))

Appending never raises. A failed append is logged and returns None so
the business mutation it documents still goes through.

Verification walks entries oldest first and checks each link. The first
broken link is marked TAMPERED; nothing is repaired.
"""

import hashlib
import json
import logging
from datetime import datetime
from uuid import UUID

from greenpass.db.tables import AuditLogEntryRow
from greenpass.models.audit import GENESIS_HASH, AuditLogEntry, ChainVerification
from greenpass.models.common import (
    AuditAction,
    VerificationStatus,
    ensure_utc,
    new_uuid7,
    utc_now,
)
from greenpass.repositories.audit import AuditLogRepository

logger = logging.getLogger(__name__)


def compute_entry_hash(
    *,
    record_id: UUID,
    action_type: str,
    actor: str,
    timestamp: str,
    previous_hash: str,
    payload: dict,
) -> str:
    """SHA-256 over the canonical JSON of an entry's content."""
    content = {
        "record_id": str(record_id),
        "action_type": str(action_type),
        "actor": actor,
        "timestamp": timestamp,
        "previous_hash": previous_hash,
        "payload": payload,
    }
    serialized = json.dumps(content, sort_keys=True, default=str)
    return hashlib.sha256(serialized.encode()).hexdigest()


def row_to_entry(row: AuditLogEntryRow) -> AuditLogEntry:
    return AuditLogEntry(
        entry_id=row.entry_id,
        record_id=row.record_id,
        action_type=AuditAction(row.action_type),
        actor=row.actor,
        timestamp=row.timestamp,
        hash=row.hash,
        previous_hash=row.previous_hash,
        payload=row.payload or {},
        verification_status=VerificationStatus(row.verification_status),
        created_at=ensure_utc(row.created_at),
    )


class HashChainAuditLog:
    """Append and verify per-record hash chains."""

    def __init__(self, repo: AuditLogRepository) -> None:
        self._repo = repo

    async def append(
        self,
        record_id: UUID,
        action_type: AuditAction,
        actor: str,
        payload: dict | None = None,
        *,
        now: datetime | None = None,
    ) -> AuditLogEntry | None:
        """Append an entry linked to the record's newest entry.

        Returns None when the entry could not be stored, including when a
        concurrent append already claimed the same predecessor.
        """
        body = payload or {}
        timestamp = ensure_utc(now or utc_now()).isoformat()
        try:
            async with self._repo.savepoint():
                latest = await self._repo.latest_for_record(record_id)
                previous_hash = latest.hash if latest is not None else GENESIS_HASH
                entry_hash = compute_entry_hash(
                    record_id=record_id,
                    action_type=action_type,
                    actor=actor,
                    timestamp=timestamp,
                    previous_hash=previous_hash,
                    payload=body,
                )
                row = await self._repo.append(
                    entry_id=new_uuid7(),
                    record_id=record_id,
                    action_type=action_type.value,
                    actor=actor,
                    timestamp=timestamp,
                    hash=entry_hash,
                    previous_hash=previous_hash,
                    payload=body,
                )
        except Exception:
            logger.exception(
                "Audit append failed for record %s (%s by %s)",
                record_id, action_type, actor,
            )
            return None
        return row_to_entry(row)

    async def entries(self, record_id: UUID) -> list[AuditLogEntry]:
        rows = await self._repo.list_for_record(record_id)
        return [row_to_entry(r) for r in rows]

    async def verify(
        self,
        record_id: UUID,
        *,
        recompute_hashes: bool = False,
    ) -> ChainVerification:
        """Walk the chain oldest first and stop at the first broken link.

        With ``recompute_hashes`` each entry's stored hash is also checked
        against its content, which catches edited payloads.
        """
        rows = await self._repo.list_for_record(record_id)
        prior: AuditLogEntryRow | None = None
        for checked, row in enumerate(rows, start=1):
            reason: str | None = None
            if prior is not None and row.previous_hash != prior.hash:
                reason = "previous_hash does not match the prior entry's hash"
            elif recompute_hashes and row.hash != compute_entry_hash(
                record_id=row.record_id,
                action_type=row.action_type,
                actor=row.actor,
                timestamp=row.timestamp,
                previous_hash=row.previous_hash,
                payload=row.payload or {},
            ):
                reason = "stored hash does not match entry content"

            if reason is not None:
                await self._repo.mark_tampered(row.entry_id)
                logger.warning(
                    "Audit chain broken for record %s at entry %s: %s",
                    record_id, row.entry_id, reason,
                )
                return ChainVerification(
                    record_id=record_id,
                    valid=False,
                    entries_checked=checked,
                    tampered_entry_id=row.entry_id,
                    reason=reason,
                )
            prior = row

        return ChainVerification(
            record_id=record_id,
            valid=True,
            entries_checked=len(rows),
        )
