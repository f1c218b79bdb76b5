from __future__ import annotations

from ratelimiter.limits.domain.entities import RateLimitRule, RuleType, Tenant
from ratelimiter.limits.infrastructure.models import RateLimitRuleORM, TenantORM


def tenant_to_domain(row: TenantORM) -> Tenant:
    return Tenant(id=row.id, name=row.name, created_at=row.created_at)


def rule_to_domain(row: RateLimitRuleORM) -> RateLimitRule:
    return RateLimitRule(
        id=row.id,
        tenant_id=row.tenant_id,
        rule_type=RuleType(row.rule_type),
        limit=row.limit,
        window_seconds=row.window_seconds,
        api_pattern=row.api_pattern,
        created_at=row.created_at,
    )
