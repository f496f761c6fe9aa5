"""SQLAlchemy ORM table models for GreenPass.

Uses FlexJSON (JSONB on Postgres, JSON on SQLite) for passport content
and audit payloads.

Categories:
- APPEND-ONLY: AuditLogEntry (only verification_status may change)
- OPERATIONAL: DPPRecord, MaterialityTopic, TenantSettings, User
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from greenpass.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


# ---------------------------------------------------------------------------
# Foundation
# ---------------------------------------------------------------------------


class TenantSettingsRow(Base):
    __tablename__ = "tenant_settings"

    tenant_id: Mapped[UUID] = mapped_column(primary_key=True)
    data_mode: Mapped[str] = mapped_column(String(20), nullable=False, default="LIVE")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class UserRow(Base):
    """API user. Only the SHA-256 of the bearer token is stored."""

    __tablename__ = "users"

    user_id: Mapped[UUID] = mapped_column(primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Records - OPERATIONAL
# ---------------------------------------------------------------------------


class DPPRecordRow(Base):
    """Digital Product Passport. Last write wins on ``data``."""

    __tablename__ = "dpp_records"

    dpp_id: Mapped[UUID] = mapped_column(primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    data = mapped_column(FlexJSON, nullable=False)
    quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    circularity_index: Mapped[float | None] = mapped_column(Float, nullable=True)
    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class MaterialityTopicRow(Base):
    __tablename__ = "materiality_topics"

    topic_id: Mapped[UUID] = mapped_column(primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    esrs_standard: Mapped[str] = mapped_column(String(20), nullable=False)
    topic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    impact_materiality_score: Mapped[float] = mapped_column(Float, nullable=False)
    financial_materiality_score: Mapped[float] = mapped_column(Float, nullable=False)
    is_material: Mapped[bool] = mapped_column(Boolean, nullable=False)
    rationale: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Audit - APPEND-ONLY
# ---------------------------------------------------------------------------


class AuditLogEntryRow(Base):
    """Hash-chained audit entry.

    (record_id, previous_hash) is unique: two appends that read the same
    predecessor cannot both land, so the chain never forks.
    """

    __tablename__ = "audit_log_entries"
    __table_args__ = (
        UniqueConstraint("record_id", "previous_hash", name="uq_audit_record_previous_hash"),
    )

    entry_id: Mapped[UUID] = mapped_column(primary_key=True)
    record_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    actor: Mapped[str] = mapped_column(String(320), nullable=False)
    timestamp: Mapped[str] = mapped_column(String(40), nullable=False)
    hash: Mapped[str] = mapped_column(String(64), nullable=False)
    previous_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    payload = mapped_column(FlexJSON, nullable=False)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="VERIFIED",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
