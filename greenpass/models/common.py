"""Shared types, enums, and base models used across GreenPass domain models."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties away from zero for positives (2.5 -> 3, not 2)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo on round-trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class RecordStatus(StrEnum):
    """Publication lifecycle of a Digital Product Passport."""

    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"


class DataMode(StrEnum):
    """Tenant-wide data mode. LIVE tenants reject test fixtures."""

    LIVE = "LIVE"
    DEMO = "DEMO"


class Provenance(StrEnum):
    """Origin of a submitted record."""

    USER_PROVIDED = "USER_PROVIDED"
    TEST_FIXTURE = "TEST_FIXTURE"
    DEMO_SEED = "DEMO_SEED"


class AuditAction(StrEnum):
    """Mutating actions recorded in the audit chain."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    RECALCULATE = "RECALCULATE"
    SCHEDULE = "SCHEDULE"
    PUBLISH = "PUBLISH"
    ASSESS = "ASSESS"


class VerificationStatus(StrEnum):
    """Chain verification state of an audit entry."""

    VERIFIED = "VERIFIED"
    TAMPERED = "TAMPERED"


# --- Base model ---


class GreenPassBase(BaseModel):
    """Base model with common configuration for all GreenPass Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "ser_json_timedelta": "iso8601",
        "protected_namespaces": (),
    }
