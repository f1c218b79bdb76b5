from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class RuleType(str, Enum):
    """Enumeration that mirrors the DB enum `rule_type_enum`."""
    GENERAL = "GENERAL"  # tenant-wide
    IP = "IP"            # per source address
    API = "API"          # per target matching api_pattern


# Evaluation priority: broadest scope first.
RULE_EVALUATION_ORDER: tuple[RuleType, ...] = (RuleType.GENERAL, RuleType.IP, RuleType.API)

MAX_API_PATTERN_LENGTH = 500


@dataclass(frozen=True, slots=True)
class RateLimitRule:
    """
    Domain entity for one fixed-window limit. Mirrors `rate_limit_rules`.
    """
    id: UUID
    tenant_id: UUID
    rule_type: RuleType
    limit: int
    window_seconds: int
    api_pattern: Optional[str]
    created_at: datetime

    def is_api_rule(self) -> bool:
        return self.rule_type is RuleType.API

    def describe(self) -> str:
        return f"{self.limit} requests per {self.window_seconds}s"
