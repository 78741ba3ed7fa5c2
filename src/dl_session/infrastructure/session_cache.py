"""SessionCache: last-known user and token in the local durable cache.

One JSON document under settings.SESSION_CACHE_KEY. Read only at session
start; written at login and cleared at logout.
"""

import logging

import redis.asyncio as aioredis
from pydantic import ValidationError

from config.settings import settings
from src.dl_common.redis_client import get_redis
from src.dl_session.application.schemas import CachedSession

logger = logging.getLogger(__name__)


class SessionCache:
    def __init__(self, redis: aioredis.Redis | None = None, key: str | None = None) -> None:
        self._redis = redis
        self._key = key or settings.SESSION_CACHE_KEY

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def save(self, cached: CachedSession) -> None:
        r = await self._get_redis()
        await r.set(self._key, cached.model_dump_json())

    async def load(self) -> CachedSession | None:
        r = await self._get_redis()
        raw = await r.get(self._key)
        if raw is None:
            return None
        try:
            return CachedSession.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cached session under %s", self._key)
            await r.delete(self._key)
            return None

    async def clear(self) -> None:
        r = await self._get_redis()
        await r.delete(self._key)
