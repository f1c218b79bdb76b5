from __future__ import annotations

from dataclasses import dataclass

from ratelimiter.limits.domain.entities import RateLimitRule
from ratelimiter.limits.domain.repositories.rule_repository import RuleStore
from ratelimiter.shared.clock import Clock, SystemClock
from ratelimiter.shared.config import DEFAULT_RULE_CACHE_TTL_SECONDS
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    rules: tuple[RateLimitRule, ...]
    expires_at: float


class RuleCache:
    """
    Per-tenant rule sets held in process memory for ``ttl_seconds``.

    No lock: a refresh replaces the tenant's entry in one assignment, so
    concurrent refreshes at worst fetch twice and the last write wins. A fetch
    that started before ``invalidate()`` is returned to its caller but not stored.
    """

    def __init__(
        self,
        store: RuleStore,
        *,
        clock: Clock | None = None,
        ttl_seconds: int = DEFAULT_RULE_CACHE_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._ttl = ttl_seconds
        self._entries: dict[str, _Entry] = {}
        self._generation = 0

    async def rules_for(self, tenant_id: str) -> tuple[RateLimitRule, ...]:
        entry = self._entries.get(tenant_id)
        if entry is not None and self._clock.now() < entry.expires_at:
            return entry.rules

        generation = self._generation
        rules = tuple(await self._store.fetch_rules(tenant_id))
        if generation != self._generation:
            return rules
        # expiry counts from fetch completion
        self._entries[tenant_id] = _Entry(rules=rules, expires_at=self._clock.now() + self._ttl)
        logger.debug("Rule cache refreshed", tenant_id=tenant_id, rule_count=len(rules))
        return rules

    def invalidate(self) -> None:
        self._generation += 1
        self._entries = {}
        logger.info("Rule cache invalidated")
