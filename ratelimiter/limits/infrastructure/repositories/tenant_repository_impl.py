from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ratelimiter.limits.domain.entities import Tenant
from ratelimiter.limits.domain.repositories.tenant_repository import TenantRepository
from ratelimiter.limits.infrastructure.mappers import tenant_to_domain
from ratelimiter.limits.infrastructure.models import TenantORM


class TenantRepositoryImpl(TenantRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, name: str) -> Tenant:
        row = TenantORM(name=name)
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return tenant_to_domain(row)

    async def get(self, tenant_id: UUID) -> Optional[Tenant]:
        row = await self._session.get(TenantORM, tenant_id)
        return tenant_to_domain(row) if row else None

    async def get_by_name(self, name: str) -> Optional[Tenant]:
        stmt = select(TenantORM).where(TenantORM.name == name).limit(1)
        row = (await self._session.execute(stmt)).scalars().first()
        return tenant_to_domain(row) if row else None

    async def list_all(self) -> list[Tenant]:
        stmt = select(TenantORM).order_by(TenantORM.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [tenant_to_domain(r) for r in rows]
