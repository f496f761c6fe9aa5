"""GreenPass schema - tenants, users, passports, materiality topics, audit chain.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Foundation --
    op.create_table(
        "tenant_settings",
        sa.Column("tenant_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("data_mode", sa.String(20), nullable=False, server_default="LIVE"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])

    # -- Records --
    op.create_table(
        "dpp_records",
        sa.Column("dpp_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("data", JSONB, nullable=False),
        sa.Column("quality_score", sa.Integer, nullable=True),
        sa.Column("circularity_index", sa.Float, nullable=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_dpp_records_tenant_id", "dpp_records", ["tenant_id"])

    op.create_table(
        "materiality_topics",
        sa.Column("topic_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", UUID(as_uuid=True), nullable=False),
        sa.Column("esrs_standard", sa.String(20), nullable=False),
        sa.Column("topic_name", sa.String(255), nullable=False),
        sa.Column("impact_materiality_score", sa.Float, nullable=False),
        sa.Column("financial_materiality_score", sa.Float, nullable=False),
        sa.Column("is_material", sa.Boolean, nullable=False),
        sa.Column("rationale", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_materiality_topics_tenant_id", "materiality_topics", ["tenant_id"])

    # -- Audit (APPEND-ONLY) --
    op.create_table(
        "audit_log_entries",
        sa.Column("entry_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("record_id", UUID(as_uuid=True), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("actor", sa.String(320), nullable=False),
        sa.Column("timestamp", sa.String(40), nullable=False),
        sa.Column("hash", sa.String(64), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False),
        sa.Column("payload", JSONB, nullable=False),
        sa.Column("verification_status", sa.String(20), nullable=False,
                  server_default="VERIFIED"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("record_id", "previous_hash",
                            name="uq_audit_record_previous_hash"),
    )
    op.create_index("ix_audit_log_entries_record_id", "audit_log_entries", ["record_id"])


def downgrade() -> None:
    op.drop_table("audit_log_entries")
    op.drop_table("materiality_topics")
    op.drop_table("dpp_records")
    op.drop_table("users")
    op.drop_table("tenant_settings")
