from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ratelimiter.limits.domain.entities import RateLimitRule, RuleType
from ratelimiter.limits.domain.repositories.rule_repository import RuleRepository
from ratelimiter.limits.infrastructure.mappers import rule_to_domain
from ratelimiter.limits.infrastructure.models import RateLimitRuleORM
from ratelimiter.shared.exceptions import StoreUnavailableError
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)


class RuleRepositoryImpl(RuleRepository):
    """
    SQLAlchemy 2.x async implementation bound to a request-scoped session.
    The caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        tenant_id: UUID,
        rule_type: RuleType,
        limit: int,
        window_seconds: int,
        api_pattern: Optional[str],
    ) -> RateLimitRule:
        row = RateLimitRuleORM(
            tenant_id=tenant_id,
            rule_type=rule_type,
            limit=limit,
            window_seconds=window_seconds,
            api_pattern=api_pattern,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return rule_to_domain(row)

    async def list_for_tenant(self, tenant_id: UUID) -> list[RateLimitRule]:
        stmt = (
            select(RateLimitRuleORM)
            .where(RateLimitRuleORM.tenant_id == tenant_id)
            .order_by(RateLimitRuleORM.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [rule_to_domain(r) for r in rows]

    async def list_all(self) -> list[RateLimitRule]:
        stmt = select(RateLimitRuleORM).order_by(RateLimitRuleORM.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [rule_to_domain(r) for r in rows]


class SqlAlchemyRuleStore:
    """
    Rule store adapter used by the rule cache.

    Opens a short-lived session per fetch since the cache outlives any request.
    Rules come back oldest first so evaluation order within a rule type is stable.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_rules(self, tenant_id: str) -> list[RateLimitRule]:
        try:
            tid = UUID(str(tenant_id))
        except ValueError:
            # Not a tenant id we could have issued; nothing is configured for it.
            return []

        stmt = (
            select(RateLimitRuleORM)
            .where(RateLimitRuleORM.tenant_id == tid)
            .order_by(RateLimitRuleORM.created_at.asc(), RateLimitRuleORM.id.asc())
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except (DBAPIError, OSError) as e:
            logger.error("Rule store query failed", tenant_id=str(tid), error_type=type(e).__name__)
            raise StoreUnavailableError("Rule store unavailable", details={"tenant_id": str(tid)}) from e
        return [rule_to_domain(r) for r in rows]
