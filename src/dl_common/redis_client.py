"""Redis client factory: backs the local durable session cache only.

A single key, settings.SESSION_CACHE_KEY, holds the cached session JSON:
  - written by SessionService.begin at login
  - read by SessionService.restore at LedgerCore.startup
  - deleted by SessionService.end at logout, or by SessionCache.load when
    the stored document cannot be parsed
The shared pool is created lazily on first use and closed by
LedgerCore.shutdown through close_redis().

NOT used for ledger data: lists and totals always come from the remote API.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
