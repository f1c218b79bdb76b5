from __future__ import annotations

from typing import Optional

from ratelimiter.limits.application.dtos import RateLimitDecisionDTO
from ratelimiter.limits.application.services.rule_cache import RuleCache
from ratelimiter.limits.domain.entities import RULE_EVALUATION_ORDER, RateLimitRule, RuleType
from ratelimiter.limits.domain.repositories.counter_store import CounterStore
from ratelimiter.limits.domain.services.counter_keys import counter_key
from ratelimiter.limits.domain.services.pattern_matcher import matches_pattern
from ratelimiter.limits.domain.services.window import window_index, window_reset_epoch
from ratelimiter.shared.clock import Clock, SystemClock
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)

GENERAL_SCOPE = "general"
FAIL_OPEN_EXPLANATION = "rate limiter error, allowing request"


class RateLimitEvaluator:
    """
    Fixed-window decisions across GENERAL, then IP, then API rules.

    Counters live in the counter store under
    rate_limit:{tenant}:{rule_type}:{scope}:{window}. The first rule whose
    count exceeds its limit denies the request; when every applicable rule
    passes, the decision carries the figures of the last rule checked.
    Any failure while deciding yields an allowed decision (fail-open).
    """

    def __init__(
        self,
        rule_cache: RuleCache,
        counters: CounterStore,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._rule_cache = rule_cache
        self._counters = counters
        self._clock = clock or SystemClock()

    @property
    def rule_cache(self) -> RuleCache:
        return self._rule_cache

    async def check_rate_limit(
        self,
        tenant_id: str,
        source_address: str,
        target: Optional[str] = None,
    ) -> RateLimitDecisionDTO:
        try:
            return await self._evaluate(tenant_id, source_address, target)
        except Exception:
            logger.exception("Error checking rate limit; failing open", tenant_id=tenant_id)
            return RateLimitDecisionDTO(allowed=True, explanation=FAIL_OPEN_EXPLANATION)

    async def _evaluate(
        self,
        tenant_id: str,
        source_address: str,
        target: Optional[str],
    ) -> RateLimitDecisionDTO:
        rules = await self._rule_cache.rules_for(tenant_id)
        if not rules:
            return RateLimitDecisionDTO(allowed=True)

        last: Optional[RateLimitDecisionDTO] = None
        for rule_type in RULE_EVALUATION_ORDER:
            for rule in rules:
                if rule.rule_type is not rule_type or not self._applies(rule, target):
                    continue
                decision = await self._check_rule(rule, tenant_id, source_address, target)
                if not decision.allowed:
                    logger.warning(
                        "Rate limit exceeded",
                        tenant_id=tenant_id,
                        rule_id=str(rule.id),
                        rule_type=rule.rule_type.value,
                        limit=rule.limit,
                        window_seconds=rule.window_seconds,
                    )
                    return decision
                last = decision

        return last or RateLimitDecisionDTO(allowed=True)

    @staticmethod
    def _applies(rule: RateLimitRule, target: Optional[str]) -> bool:
        if not rule.is_api_rule():
            return True
        if not target:
            return False
        # API rules without a pattern cover every target
        return rule.api_pattern is None or matches_pattern(target, rule.api_pattern)

    @staticmethod
    def _scope(rule: RateLimitRule, source_address: str, target: Optional[str]) -> str:
        if rule.rule_type is RuleType.GENERAL:
            return GENERAL_SCOPE
        if rule.rule_type is RuleType.IP:
            return source_address
        return target or "unknown"

    async def _check_rule(
        self,
        rule: RateLimitRule,
        tenant_id: str,
        source_address: str,
        target: Optional[str],
    ) -> RateLimitDecisionDTO:
        window = window_index(self._clock.now(), rule.window_seconds)
        key = counter_key(tenant_id, rule.rule_type, self._scope(rule, source_address, target), window)
        count = await self._counters.increment_and_get(key, rule.window_seconds)

        reset = window_reset_epoch(window, rule.window_seconds)
        if count > rule.limit:
            return RateLimitDecisionDTO(
                allowed=False,
                limit=rule.limit,
                remaining=0,
                reset_epoch_seconds=reset,
                explanation=(
                    f"Rate limit exceeded for {rule.rule_type.value} rule. Limit: {rule.describe()}"
                ),
            )
        return RateLimitDecisionDTO(
            allowed=True,
            limit=rule.limit,
            remaining=max(0, rule.limit - count),
            reset_epoch_seconds=reset,
        )
