from __future__ import annotations

from typing import Protocol


class CounterStore(Protocol):
    """Shared, process-external window counters."""

    async def increment_and_get(self, key: str, window_seconds: int) -> int:
        """
        Atomically add one to ``key`` and return the new count.
        A fresh counter expires ``window_seconds`` after its first increment.
        """
        ...
