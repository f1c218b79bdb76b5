"""Fixed-window arithmetic. Windows are aligned to the Unix epoch."""

from __future__ import annotations

import math


def window_index(now: float, window_seconds: int) -> int:
    """Index of the ``window_seconds``-long window containing epoch time ``now``."""
    return math.floor(now / window_seconds)


def window_start_epoch(index: int, window_seconds: int) -> int:
    return index * window_seconds


def window_reset_epoch(index: int, window_seconds: int) -> int:
    """Epoch second at which the window after ``index`` begins."""
    return (index + 1) * window_seconds
