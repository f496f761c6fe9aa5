"""Database engine and request-scoped sessions for the GreenPass store.

Passports, materiality topics, tenants and the audit chain all live in
one database. ``Base`` carries their ORM metadata (see ``db.tables``);
``get_async_session`` hands each API request a single session so a
passport change and its audit entry land in the same transaction.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from greenpass.config.settings import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by every GreenPass table."""


_settings = get_settings()

# SQL echo only in dev; pre-ping drops connections the server has closed.
engine = create_async_engine(
    _settings.DATABASE_URL,
    echo=(_settings.ENVIRONMENT == "dev"),
    pool_pre_ping=True,
)

# Rows stay readable after commit; handlers serialize them after the commit.
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit when the handler returns, roll back
    when it raises.

    Repositories never commit themselves, so a rejected publish or a
    failed validation leaves neither the passport nor its audit chain
    half-written. Audit appends use their own SAVEPOINT inside this
    transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
