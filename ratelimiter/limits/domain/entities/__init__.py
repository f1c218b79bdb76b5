from ratelimiter.limits.domain.entities.rate_limit_rule import (
    MAX_API_PATTERN_LENGTH,
    RULE_EVALUATION_ORDER,
    RateLimitRule,
    RuleType,
)
from ratelimiter.limits.domain.entities.tenant import Tenant, TenantWithRules

__all__ = [
    "MAX_API_PATTERN_LENGTH",
    "RULE_EVALUATION_ORDER",
    "RateLimitRule",
    "RuleType",
    "Tenant",
    "TenantWithRules",
]
