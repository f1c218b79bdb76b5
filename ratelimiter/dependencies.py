# ratelimiter/dependencies.py
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ratelimiter.limits.application.services.rate_limit_evaluator import RateLimitEvaluator
from ratelimiter.limits.application.services.rule_cache import RuleCache
from ratelimiter.limits.application.services.rule_service import RuleService
from ratelimiter.limits.application.services.tenant_service import TenantService
from ratelimiter.limits.infrastructure.counter_store import RedisCounterStore
from ratelimiter.limits.infrastructure.repositories.rule_repository_impl import SqlAlchemyRuleStore
from ratelimiter.shared.config import Settings
from ratelimiter.shared.database import db_session, get_session_factory
from ratelimiter.shared.redis import get_redis


async def build_rate_limiter(settings: Settings) -> RateLimitEvaluator:
    """Wire the evaluator against the shared Postgres session factory and Redis pool."""
    rule_cache = RuleCache(
        SqlAlchemyRuleStore(get_session_factory()),
        ttl_seconds=settings.rule_cache_ttl_seconds,
    )
    return RateLimitEvaluator(rule_cache, RedisCounterStore(await get_redis()))


def get_rate_limiter(request: Request) -> RateLimitEvaluator:
    """The process-wide evaluator created at startup (see main.lifespan)."""
    return request.app.state.rate_limiter


def get_tenant_service(session: AsyncSession = Depends(db_session)) -> TenantService:
    return TenantService(session)


def get_rule_service(
    session: AsyncSession = Depends(db_session),
    limiter: RateLimitEvaluator = Depends(get_rate_limiter),
) -> RuleService:
    return RuleService(session, limiter.rule_cache)
