"""Audit chain models."""

from uuid import UUID

from pydantic import Field

from greenpass.models.common import (
    AuditAction,
    GreenPassBase,
    UTCTimestamp,
    UUIDv7,
    VerificationStatus,
)

GENESIS_HASH = "0" * 64


class AuditLogEntry(GreenPassBase, frozen=True):
    """One link in a record's tamper-evident history."""

    entry_id: UUIDv7
    record_id: UUID
    action_type: AuditAction
    actor: str
    timestamp: str
    hash: str
    previous_hash: str
    payload: dict = Field(default_factory=dict)
    verification_status: VerificationStatus = VerificationStatus.VERIFIED
    created_at: UTCTimestamp


class ChainVerification(GreenPassBase):
    """Outcome of walking a record's audit chain."""

    record_id: UUID
    valid: bool
    entries_checked: int
    tampered_entry_id: UUID | None = None
    reason: str | None = None
