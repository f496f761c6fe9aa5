"""FastAPI dependency injection factories for repositories, auth and providers.

Each repository factory takes AsyncSession via Depends(get_async_session)
and returns a repository instance. API endpoints use these via Depends().
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from greenpass.agents.assessment_provider import AssessmentProvider, HttpAssessmentProvider
from greenpass.config.settings import Settings, get_settings
from greenpass.db.session import get_async_session
from greenpass.db.tables import UserRow
from greenpass.governance.audit_chain import HashChainAuditLog
from greenpass.repositories.audit import AuditLogRepository
from greenpass.repositories.dpp import DPPRepository
from greenpass.repositories.materiality import MaterialityTopicRepository
from greenpass.repositories.tenants import TenantSettingsRepository, UserRepository

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


async def get_dpp_repo(
    session: AsyncSession = Depends(get_async_session),
) -> DPPRepository:
    return DPPRepository(session)


async def get_materiality_repo(
    session: AsyncSession = Depends(get_async_session),
) -> MaterialityTopicRepository:
    return MaterialityTopicRepository(session)


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


async def get_audit_log(
    session: AsyncSession = Depends(get_async_session),
) -> HashChainAuditLog:
    return HashChainAuditLog(AuditLogRepository(session))


# ---------------------------------------------------------------------------
# Tenants / auth
# ---------------------------------------------------------------------------


async def get_tenant_settings_repo(
    session: AsyncSession = Depends(get_async_session),
) -> TenantSettingsRepository:
    return TenantSettingsRepository(session)


async def get_user_repo(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    return UserRepository(session)


async def get_current_user(
    authorization: str | None = Header(default=None),
    user_repo: UserRepository = Depends(get_user_repo),
) -> UserRow | None:
    """Resolve ``Authorization: Bearer <token>``; None when absent or unknown."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return await user_repo.get_by_token(token.strip())


async def require_user(
    user: UserRow | None = Depends(get_current_user),
) -> UserRow:
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


# ---------------------------------------------------------------------------
# Assessment provider
# ---------------------------------------------------------------------------


def get_assessment_provider(
    settings: Settings = Depends(get_settings),
) -> AssessmentProvider:
    if not settings.ASSESSMENT_API_URL:
        raise HTTPException(
            status_code=503,
            detail="Assessment provider is not configured (ASSESSMENT_API_URL).",
        )
    return HttpAssessmentProvider(
        base_url=settings.ASSESSMENT_API_URL,
        api_key=settings.ASSESSMENT_API_KEY,
        timeout=settings.ASSESSMENT_TIMEOUT_SECONDS,
    )
