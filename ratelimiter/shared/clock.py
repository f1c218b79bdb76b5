from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Wall-clock source in epoch seconds (UTC)."""

    def now(self) -> float: ...


class SystemClock:
    def now(self) -> float:
        return time.time()
