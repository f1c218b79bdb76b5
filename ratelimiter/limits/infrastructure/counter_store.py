from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ratelimiter.shared.exceptions import StoreUnavailableError
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RedisCounterStore:
    """
    Fixed-window counters on Redis.

    INCR is atomic on the server, so concurrent callers never lose updates.
    EXPIRE is only issued by the caller that created the key (count == 1);
    the pair is not a transaction.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def _guard(self, op: str, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except (RedisError, OSError) as e:
            logger.error("Counter store call failed", op=op, key=key, error_type=type(e).__name__)
            raise StoreUnavailableError(f"Counter store unavailable during {op}", details={"key": key}) from e

    async def increment_and_get(self, key: str, window_seconds: int) -> int:
        count: Any = await self._guard("incr", key, lambda: self._redis.incr(key))
        count = int(count)
        if count == 1:
            await self._guard("expire", key, lambda: self._redis.expire(key, window_seconds))
        return count
