from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ratelimiter.limits.domain.entities import Tenant


class TenantRepository(ABC):

    @abstractmethod
    async def create(self, name: str) -> Tenant:
        """Insert a tenant with a unique name."""

    @abstractmethod
    async def get(self, tenant_id: UUID) -> Optional[Tenant]:
        ...

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Tenant]:
        ...

    @abstractmethod
    async def list_all(self) -> list[Tenant]:
        """All tenants, newest first."""
