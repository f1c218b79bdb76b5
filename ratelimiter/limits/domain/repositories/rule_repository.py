from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Protocol, Sequence
from uuid import UUID

from ratelimiter.limits.domain.entities import RateLimitRule, RuleType


class RuleStore(Protocol):
    """Read side consumed by the rule cache."""

    async def fetch_rules(self, tenant_id: str) -> Sequence[RateLimitRule]:
        """Rules configured for the tenant, in stable order; empty when none."""
        ...


class RuleRepository(ABC):
    """Persistence for rate limit rules (admin surface)."""

    @abstractmethod
    async def create(
        self,
        tenant_id: UUID,
        rule_type: RuleType,
        limit: int,
        window_seconds: int,
        api_pattern: Optional[str],
    ) -> RateLimitRule:
        """Insert a validated rule and return it."""

    @abstractmethod
    async def list_for_tenant(self, tenant_id: UUID) -> list[RateLimitRule]:
        """Rules for one tenant, newest first."""

    @abstractmethod
    async def list_all(self) -> list[RateLimitRule]:
        """All rules, newest first."""
