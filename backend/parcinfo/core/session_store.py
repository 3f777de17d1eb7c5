"""
Server-side session storage.

A session maps an opaque token to a user id and expires after a fixed TTL.
Expiry is the store's job: an expired token simply reads as absent.
One store is built per process (see ``build_session_store``) and handed to
request handlers through the ``get_session_store`` dependency.
"""
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as aioredis
from fastapi import Request
from redis.asyncio import Redis
from redis.exceptions import RedisError

from parcinfo.core.config import Settings
from parcinfo.core.exceptions import StorageError
from parcinfo.core.logging_config import logger


class SessionStore(ABC):
    """get/set/delete by token with TTL"""

    @abstractmethod
    async def get(self, token: str) -> Optional[int]:
        ...

    @abstractmethod
    async def set(self, token: str, user_id: int, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def delete(self, token: str) -> bool:
        ...

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemorySessionStore(SessionStore):
    """Process-local store; sessions are lost on restart"""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._sessions: Dict[str, Tuple[int, float]] = {}

    async def get(self, token: str) -> Optional[int]:
        entry = self._sessions.get(token)
        if entry is None:
            return None
        user_id, expires_at = entry
        if self._clock() >= expires_at:
            self._sessions.pop(token, None)
            return None
        return user_id

    async def set(self, token: str, user_id: int, ttl_seconds: int) -> None:
        self._purge_expired()
        self._sessions[token] = (int(user_id), self._clock() + ttl_seconds)

    async def delete(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [t for t, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for t in expired:
            del self._sessions[t]


class RedisSessionStore(SessionStore):
    """Redis-backed store, TTL enforced with SETEX"""

    KEY_PREFIX = "session:"

    def __init__(self, redis: Redis):
        self.redis = redis

    @classmethod
    def from_url(cls, url: str) -> "RedisSessionStore":
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True))

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    async def get(self, token: str) -> Optional[int]:
        try:
            value = await self.redis.get(self._key(token))
        except RedisError as e:
            logger.error(f"Redis GET error: {e}")
            raise StorageError("session lookup") from e
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Discarding session with non-integer payload")
            await self.delete(token)
            return None

    async def set(self, token: str, user_id: int, ttl_seconds: int) -> None:
        try:
            await self.redis.setex(self._key(token), ttl_seconds, str(int(user_id)))
        except RedisError as e:
            logger.error(f"Redis SETEX error: {e}")
            raise StorageError("session creation") from e

    async def delete(self, token: str) -> bool:
        try:
            return await self.redis.delete(self._key(token)) > 0
        except RedisError as e:
            logger.error(f"Redis DELETE error: {e}")
            raise StorageError("session deletion") from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.error(f"Redis PING error: {e}")
            return False

    async def close(self) -> None:
        await self.redis.close()
        logger.info("Redis session store disconnected")


def build_session_store(settings: Settings) -> SessionStore:
    """Create the process-wide session store for the configured backend"""
    backend = settings.SESSION_BACKEND.strip().lower()
    if backend == "redis":
        logger.info("Using Redis session store")
        return RedisSessionStore.from_url(settings.REDIS_URL)
    if backend == "memory":
        logger.info("Using in-memory session store")
        return InMemorySessionStore()
    raise ValueError(f"Unknown SESSION_BACKEND '{settings.SESSION_BACKEND}'")


# Dependency
def get_session_store(request: Request) -> SessionStore:
    """Session store attached to the running application"""
    return request.app.state.session_store
