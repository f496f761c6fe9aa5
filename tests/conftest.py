"""Shared pytest fixtures for the GreenPass test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- client: AsyncClient with dependency overrides for DB-backed testing
- user / auth_headers: an API user of a fresh tenant and its bearer header
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from uuid_extensions import uuid7

from greenpass.db.session import Base, get_async_session
import greenpass.db.tables  # noqa: F401 - register ORM models on Base.metadata
from greenpass.repositories.tenants import UserRepository

TEST_TOKEN = "test-token-0001"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables.

    pysqlite defers BEGIN and mishandles SAVEPOINT; the two listeners
    hand transaction control back to SQLAlchemy.
    """
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _disable_pysqlite_txn(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed - it rolls back at teardown.
    session.commit() only releases a SAVEPOINT, and session.begin_nested()
    inside application code nests further SAVEPOINTs.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from greenpass.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(db_session):
    return await UserRepository(db_session).create(
        user_id=uuid7(),
        tenant_id=uuid7(),
        email="analyst@example.com",
        token=TEST_TOKEN,
    )


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


ELECTRONICS_EOL = (
    "Return to an authorised WEEE collection point. Do not dispose of with "
    "household waste. Remove batteries before recycling."
)


def complete_passport_payload() -> dict:
    """A passport that passes every quality check and the readiness gate."""
    return {
        "general_info": {
            "product_name": "EcoPhone 3",
            "manufacturer": "Acme Devices GmbH",
            "gtin": "4006381333931",
            "model_number": "EP3-2026",
            "country_of_origin": "DE",
        },
        "category": "electronics",
        "material_composition": [
            {"material": "Copper wiring", "percentage": 30, "recyclable": True},
            {"material": "Plastic housing", "percentage": 50, "recyclable": True,
             "recycled_content_pct": 40},
            {"material": "Printed circuit board", "percentage": 20, "recyclable": True},
        ],
        "sustainability_info": {
            "carbon_footprint_kg": 45.0,
            "water_usage_liters": 120.0,
            "energy_consumption_kwh": 30.0,
        },
        "circularity_metrics": {
            "recyclability_score": 9,
            "recycled_content_percentage": 25,
            "repairability_index": 7,
            "expected_lifetime_years": 6,
        },
        "compliance_declarations": [{"regulation": "RoHS", "status": "compliant"}],
        "eol_instructions": ELECTRONICS_EOL,
    }


@pytest.fixture
def complete_data():
    from greenpass.models.dpp import DPPData

    return DPPData.model_validate(complete_passport_payload())


@pytest.fixture
def complete_payload() -> dict:
    return complete_passport_payload()
