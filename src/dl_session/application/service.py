"""SessionService: the login/logout boundary that owns the Actor.

Restoring from the durable cache succeeds only when both a user record and a
non-empty token were cached; a user without a token is treated as logged out.
"""

import logging

from src.dl_common.errors import NotAuthenticatedError
from src.dl_session.application.schemas import CachedSession, StoredUser
from src.dl_session.domain.models import Actor, Session
from src.dl_session.infrastructure.session_cache import SessionCache

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, cache: SessionCache | None = None) -> None:
        self._cache = cache or SessionCache()
        self._current: Session | None = None

    @property
    def current(self) -> Session | None:
        return self._current

    def require_actor(self) -> Actor:
        if self._current is None:
            raise NotAuthenticatedError()
        return self._current.actor

    async def token(self) -> str | None:
        """Token provider for RemoteApi adapters."""
        return self._current.token if self._current else None

    async def begin(self, actor: Actor, token: str) -> Session:
        await self._cache.save(CachedSession(user=StoredUser.from_actor(actor), token=token))
        self._current = Session(actor=actor, token=token)
        logger.info("Session started: actor=%s roles=%s", actor.id, sorted(r.value for r in actor.roles))
        return self._current

    async def restore(self) -> Session | None:
        cached = await self._cache.load()
        if cached is None or not cached.token:
            return None
        self._current = Session(actor=cached.user.to_actor(), token=cached.token)
        logger.info("Session restored from cache: actor=%s", cached.user.id)
        return self._current

    async def end(self) -> None:
        await self._cache.clear()
        self._current = None
        logger.info("Session ended")
