"""
Async Redis connector.

Policy alignment:
- Redis is an optimization for counters; the DB remains the source of truth for rules.
- Keys: rate_limit:{tenant}:{rule_type}:{scope}:{window}
"""

from __future__ import annotations

import asyncio
from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from ratelimiter.shared.config import get_settings
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)

# -----------------------------
# Lazy singleton pool + client
# -----------------------------
_pool: Optional[ConnectionPool] = None
_client: Optional[Redis] = None
_lock = asyncio.Lock()


async def get_redis() -> Redis:
    """Lazily create a global async Redis client (coroutine-safe)."""
    global _pool, _client
    if _client is not None:
        return _client
    async with _lock:
        if _client is not None:
            return _client
        settings = get_settings()
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            decode_responses=True,  # counters come back as str
        )
        _client = Redis(connection_pool=_pool)
        logger.info("Redis client created", max_connections=settings.redis_max_connections)
        return _client


async def close_redis() -> None:
    """Gracefully close the global client/pool (shutdown / test teardown)."""
    global _client, _pool
    client, pool = _client, _pool
    _client = None
    _pool = None
    if client is not None:
        await client.aclose()
    if pool is not None:
        await pool.disconnect()
