from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from ratelimiter.limits.domain.entities.rate_limit_rule import RateLimitRule


@dataclass(frozen=True, slots=True)
class Tenant:
    """Domain entity for a tenant. Mirrors `tenants`."""
    id: UUID
    name: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class TenantWithRules:
    tenant: Tenant
    rules: tuple[RateLimitRule, ...] = field(default_factory=tuple)
