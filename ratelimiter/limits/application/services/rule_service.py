from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ratelimiter.limits.application.services.rule_cache import RuleCache
from ratelimiter.limits.domain.entities import RateLimitRule
from ratelimiter.limits.domain.repositories.rule_repository import RuleRepository
from ratelimiter.limits.domain.repositories.tenant_repository import TenantRepository
from ratelimiter.limits.domain.services.rule_validation import validate_rule_definition
from ratelimiter.limits.infrastructure.repositories.rule_repository_impl import RuleRepositoryImpl
from ratelimiter.limits.infrastructure.repositories.tenant_repository_impl import TenantRepositoryImpl
from ratelimiter.shared.error_codes import ERROR_CODES
from ratelimiter.shared.exceptions import NotFoundError
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)


class RuleService:
    """Create and list rate limit rules for a tenant."""

    def __init__(self, session: AsyncSession, rule_cache: Optional[RuleCache] = None) -> None:
        self._session = session
        self._tenants: TenantRepository = TenantRepositoryImpl(session)
        self._rules: RuleRepository = RuleRepositoryImpl(session)
        self._rule_cache = rule_cache

    async def _require_tenant(self, tenant_id: UUID) -> None:
        if await self._tenants.get(tenant_id) is None:
            raise NotFoundError(
                ERROR_CODES["tenant_not_found"]["message"],
                code="tenant_not_found",
                details={"tenant_id": str(tenant_id)},
            )

    async def create_rule(
        self,
        tenant_id: UUID,
        *,
        rule_type: Any,
        limit: Any,
        window_seconds: Any,
        api_pattern: Optional[str] = None,
    ) -> RateLimitRule:
        await self._require_tenant(tenant_id)
        kind, limit, window_seconds, pattern = validate_rule_definition(rule_type, limit, window_seconds, api_pattern)

        rule = await self._rules.create(tenant_id, kind, limit, window_seconds, pattern)
        await self._session.commit()

        if self._rule_cache is not None:
            self._rule_cache.invalidate()

        logger.info(
            "Rate limit rule created",
            tenant_id=str(tenant_id),
            rule_id=str(rule.id),
            rule_type=kind.value,
            limit=limit,
            window_seconds=window_seconds,
        )
        return rule

    async def list_rules(self, tenant_id: UUID) -> list[RateLimitRule]:
        await self._require_tenant(tenant_id)
        return await self._rules.list_for_tenant(tenant_id)
