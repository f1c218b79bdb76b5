from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class RateLimitDecisionDTO:
    allowed: bool
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_epoch_seconds: Optional[int] = None
    explanation: Optional[str] = None

    def headers(self) -> dict[str, str]:
        """X-RateLimit-* response headers for the figures that are present."""
        out: dict[str, str] = {}
        if self.limit is not None:
            out["X-RateLimit-Limit"] = str(self.limit)
        if self.remaining is not None:
            out["X-RateLimit-Remaining"] = str(self.remaining)
        if self.reset_epoch_seconds is not None:
            out["X-RateLimit-Reset"] = str(self.reset_epoch_seconds)
        return out
