from __future__ import annotations

from typing import Any, Optional

from ratelimiter.limits.domain.entities import MAX_API_PATTERN_LENGTH, RuleType
from ratelimiter.shared.exceptions import PatternError, ValidationError


def validate_rule_definition(
    rule_type: Any,
    limit: Any,
    window_seconds: Any,
    api_pattern: Optional[str],
) -> tuple[RuleType, int, int, Optional[str]]:
    """
    Check a rule definition before it is persisted.

    Returns the normalized ``(rule_type, limit, window_seconds, api_pattern)``.
    Raises ValidationError / PatternError with a ``details.field`` pointer.
    """
    try:
        kind = RuleType(rule_type)
    except ValueError:
        allowed = ", ".join(t.value for t in RuleType)
        raise ValidationError(f"rule_type must be one of: {allowed}", details={"field": "rule_type"})

    # bool is an int subclass; reject it explicitly
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError("limit must be a positive integer", details={"field": "limit"})
    if isinstance(window_seconds, bool) or not isinstance(window_seconds, int) or window_seconds <= 0:
        raise ValidationError("window_seconds must be a positive integer", details={"field": "window_seconds"})

    if kind is RuleType.API:
        if api_pattern is None or not api_pattern.strip():
            raise PatternError("api_pattern is required for API rule type", details={"field": "api_pattern"})
        pattern = api_pattern.strip()
        if len(pattern) > MAX_API_PATTERN_LENGTH:
            raise PatternError(
                f"api_pattern must be at most {MAX_API_PATTERN_LENGTH} characters",
                details={"field": "api_pattern"},
            )
        return kind, limit, window_seconds, pattern

    if api_pattern and api_pattern.strip():
        raise PatternError("api_pattern is only allowed for API rule type", details={"field": "api_pattern"})
    return kind, limit, window_seconds, None
