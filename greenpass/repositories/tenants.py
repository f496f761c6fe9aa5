"""Tenant settings and user repositories."""

import hashlib
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenpass.db.tables import TenantSettingsRow, UserRow
from greenpass.models.common import DataMode, utc_now


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class TenantSettingsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, tenant_id: UUID) -> TenantSettingsRow | None:
        return await self._session.get(TenantSettingsRow, tenant_id)

    async def get_data_mode(self, tenant_id: UUID) -> DataMode:
        """Tenants without settings are treated as LIVE."""
        row = await self.get(tenant_id)
        if row is None:
            return DataMode.LIVE
        return DataMode(row.data_mode)

    async def set_data_mode(self, tenant_id: UUID, data_mode: DataMode) -> TenantSettingsRow:
        row = await self.get(tenant_id)
        if row is None:
            row = TenantSettingsRow(
                tenant_id=tenant_id, data_mode=data_mode.value, updated_at=utc_now(),
            )
            self._session.add(row)
        else:
            row.data_mode = data_mode.value
            row.updated_at = utc_now()
        await self._session.flush()
        return row


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, user_id: UUID, tenant_id: UUID, email: str,
                     token: str) -> UserRow:
        row = UserRow(
            user_id=user_id, tenant_id=tenant_id, email=email,
            token_hash=hash_token(token), is_active=True, created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get_by_token(self, token: str) -> UserRow | None:
        result = await self._session.execute(
            select(UserRow).where(
                UserRow.token_hash == hash_token(token),
                UserRow.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()
