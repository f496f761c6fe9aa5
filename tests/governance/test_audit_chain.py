"""Tests for the hash-chained audit log.

Covers: genesis linkage, hash determinism, verification of intact and
broken chains, content recomputation, failure isolation of append and
the unique (record_id, previous_hash) guard against forks.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from greenpass.governance.audit_chain import HashChainAuditLog, compute_entry_hash
from greenpass.models.audit import GENESIS_HASH
from greenpass.models.common import AuditAction, VerificationStatus
from greenpass.repositories.audit import AuditLogRepository

NOW = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


def _hash_kwargs(**overrides) -> dict:
    kwargs = {
        "record_id": uuid7(),
        "action_type": "CREATE",
        "actor": "analyst@example.com",
        "timestamp": NOW.isoformat(),
        "previous_hash": GENESIS_HASH,
        "payload": {"status": "DRAFT", "score": 91},
    }
    kwargs.update(overrides)
    return kwargs


# ===================================================================
# Hashing
# ===================================================================


class TestComputeEntryHash:
    def test_sha256_hex(self) -> None:
        digest = compute_entry_hash(**_hash_kwargs())
        assert len(digest) == 64
        int(digest, 16)

    def test_deterministic_regardless_of_payload_key_order(self) -> None:
        record = uuid7()
        a = compute_entry_hash(**_hash_kwargs(record_id=record, payload={"a": 1, "b": 2}))
        b = compute_entry_hash(**_hash_kwargs(record_id=record, payload={"b": 2, "a": 1}))
        assert a == b

    @pytest.mark.parametrize(
        "override",
        [
            {"actor": "someone@else.com"},
            {"action_type": "PUBLISH"},
            {"timestamp": "2026-06-01T08:00:01+00:00"},
            {"previous_hash": "f" * 64},
            {"payload": {"status": "PUBLISHED", "score": 91}},
        ],
    )
    def test_any_field_changes_hash(self, override: dict) -> None:
        record = uuid7()
        base = compute_entry_hash(**_hash_kwargs(record_id=record))
        changed = compute_entry_hash(**_hash_kwargs(record_id=record, **override))
        assert base != changed


# ===================================================================
# Append
# ===================================================================


class TestAppend:
    @pytest.mark.anyio
    async def test_first_entry_links_to_genesis(self, db_session: AsyncSession) -> None:
        log = HashChainAuditLog(AuditLogRepository(db_session))
        record = uuid7()
        entry = await log.append(record, AuditAction.CREATE, "a@example.com", {"x": 1}, now=NOW)
        assert entry is not None
        assert entry.previous_hash == GENESIS_HASH
        assert entry.timestamp == NOW.isoformat()
        assert entry.hash == compute_entry_hash(
            record_id=record, action_type="CREATE", actor="a@example.com",
            timestamp=NOW.isoformat(), previous_hash=GENESIS_HASH, payload={"x": 1},
        )

    @pytest.mark.anyio
    async def test_entries_chain_in_order(self, db_session: AsyncSession) -> None:
        log = HashChainAuditLog(AuditLogRepository(db_session))
        record = uuid7()
        e1 = await log.append(record, AuditAction.CREATE, "a@example.com")
        e2 = await log.append(record, AuditAction.UPDATE, "a@example.com")
        e3 = await log.append(record, AuditAction.PUBLISH, "b@example.com")
        assert e2.previous_hash == e1.hash
        assert e3.previous_hash == e2.hash

        entries = await log.entries(record)
        assert [e.entry_id for e in entries] == [e1.entry_id, e2.entry_id, e3.entry_id]

    @pytest.mark.anyio
    async def test_chains_are_per_record(self, db_session: AsyncSession) -> None:
        log = HashChainAuditLog(AuditLogRepository(db_session))
        a = await log.append(uuid7(), AuditAction.CREATE, "a@example.com")
        b = await log.append(uuid7(), AuditAction.CREATE, "a@example.com")
        assert a.previous_hash == GENESIS_HASH
        assert b.previous_hash == GENESIS_HASH

    @pytest.mark.anyio
    async def test_storage_failure_returns_none(self, db_session: AsyncSession) -> None:
        class BrokenRepo(AuditLogRepository):
            async def latest_for_record(self, record_id):
                raise RuntimeError("database unavailable")

        log = HashChainAuditLog(BrokenRepo(db_session))
        assert await log.append(uuid7(), AuditAction.UPDATE, "a@example.com") is None

    @pytest.mark.anyio
    async def test_failed_predecessor_read_leaves_transaction_usable(
        self, db_session: AsyncSession
    ) -> None:
        """A failing SELECT for the predecessor is rolled back with the append."""

        class FailingReadRepo(AuditLogRepository):
            async def latest_for_record(self, record_id):
                await self._session.execute(text("SELECT hash FROM no_such_table"))

        record = uuid7()
        failing = HashChainAuditLog(FailingReadRepo(db_session))
        assert await failing.append(record, AuditAction.CREATE, "a@example.com") is None

        intact = HashChainAuditLog(AuditLogRepository(db_session))
        entry = await intact.append(record, AuditAction.CREATE, "a@example.com")
        assert entry is not None
        assert entry.previous_hash == GENESIS_HASH
        assert [e.entry_id for e in await intact.entries(record)] == [entry.entry_id]

    @pytest.mark.anyio
    async def test_stale_predecessor_is_rejected(self, db_session: AsyncSession) -> None:
        """Two appends that read the same predecessor: only the first lands."""

        class StaleRepo(AuditLogRepository):
            async def latest_for_record(self, record_id):
                return None

        record = uuid7()
        log = HashChainAuditLog(StaleRepo(db_session))
        first = await log.append(record, AuditAction.CREATE, "a@example.com")
        second = await log.append(record, AuditAction.UPDATE, "b@example.com")
        assert first is not None
        assert second is None

        # the caller's transaction is still usable after the failed append
        intact = HashChainAuditLog(AuditLogRepository(db_session))
        entries = await intact.entries(record)
        assert [e.entry_id for e in entries] == [first.entry_id]
        third = await intact.append(record, AuditAction.UPDATE, "b@example.com")
        assert third.previous_hash == first.hash

    @pytest.mark.anyio
    async def test_unique_predecessor_constraint(self, db_session: AsyncSession) -> None:
        repo = AuditLogRepository(db_session)
        record = uuid7()
        common = {
            "record_id": record, "action_type": "UPDATE", "actor": "a@example.com",
            "timestamp": NOW.isoformat(), "previous_hash": GENESIS_HASH, "payload": {},
        }
        await repo.append(entry_id=uuid7(), hash="1" * 64, **common)
        with pytest.raises(IntegrityError):
            async with repo.savepoint():
                await repo.append(entry_id=uuid7(), hash="2" * 64, **common)


# ===================================================================
# Verify
# ===================================================================


class TestVerify:
    @pytest.mark.anyio
    async def test_empty_chain_is_valid(self, db_session: AsyncSession) -> None:
        log = HashChainAuditLog(AuditLogRepository(db_session))
        result = await log.verify(uuid7())
        assert result.valid is True
        assert result.entries_checked == 0

    @pytest.mark.anyio
    async def test_intact_chain(self, db_session: AsyncSession) -> None:
        log = HashChainAuditLog(AuditLogRepository(db_session))
        record = uuid7()
        for action in (AuditAction.CREATE, AuditAction.UPDATE, AuditAction.PUBLISH):
            await log.append(record, action, "a@example.com", {"action": action.value})
        result = await log.verify(record, recompute_hashes=True)
        assert result.valid is True
        assert result.entries_checked == 3
        assert result.tampered_entry_id is None

    @pytest.mark.anyio
    async def test_broken_link_marks_entry_tampered(self, db_session: AsyncSession) -> None:
        repo = AuditLogRepository(db_session)
        log = HashChainAuditLog(repo)
        record = uuid7()
        await log.append(record, AuditAction.CREATE, "a@example.com")
        e2 = await log.append(record, AuditAction.UPDATE, "a@example.com")
        await log.append(record, AuditAction.PUBLISH, "a@example.com")

        row = await repo.get(e2.entry_id)
        row.previous_hash = "tampered"
        await db_session.flush()

        result = await log.verify(record)
        assert result.valid is False
        assert result.tampered_entry_id == e2.entry_id
        assert result.entries_checked == 2

        entries = {e.entry_id: e for e in await log.entries(record)}
        assert entries[e2.entry_id].verification_status == VerificationStatus.TAMPERED

    @pytest.mark.anyio
    async def test_edited_payload_needs_recompute(self, db_session: AsyncSession) -> None:
        repo = AuditLogRepository(db_session)
        log = HashChainAuditLog(repo)
        record = uuid7()
        e1 = await log.append(record, AuditAction.CREATE, "a@example.com", {"score": 70})
        await log.append(record, AuditAction.UPDATE, "a@example.com", {"score": 80})

        row = await repo.get(e1.entry_id)
        row.payload = {"score": 99}
        await db_session.flush()

        # links are still consistent
        assert (await log.verify(record)).valid is True

        result = await log.verify(record, recompute_hashes=True)
        assert result.valid is False
        assert result.tampered_entry_id == e1.entry_id
        assert result.reason == "stored hash does not match entry content"
