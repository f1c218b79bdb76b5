from __future__ import annotations

from ratelimiter.limits.domain.entities import RuleType

KEY_PREFIX = "rate_limit"


def counter_key(tenant_id: str, rule_type: RuleType, scope: str, window: int) -> str:
    """rate_limit:{tenant}:{rule_type}:{scope}:{window}"""
    return f"{KEY_PREFIX}:{tenant_id}:{rule_type.value}:{scope}:{window}"
