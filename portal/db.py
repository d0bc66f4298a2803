"""
Session Storage Module - Upstash Redis and in-memory clients

Provides:
- Async Upstash Redis client singleton (production session storage)
- SessionStorage interface with Redis and in-memory implementations
- Key prefixes and TTL constants for session-scoped records
"""

import os
import time
from typing import Optional, Protocol

from upstash_redis.asyncio import Redis as AsyncRedis

from portal.logging import get_logger

logger = get_logger(__name__)

UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# redis | memory; empty means "redis when configured, memory otherwise"
SESSION_STORAGE = os.environ.get("SESSION_STORAGE", "").lower()


_redis_client: Optional[AsyncRedis] = None
_session_storage: Optional["SessionStorage"] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class RedisKeys:
    """Redis key prefixes for session-scoped records."""

    CART = "cart:"  # cart:{session_id}
    CHECKOUT = "checkout:"  # checkout:{session_id}

    @staticmethod
    def cart_key(session_id: str) -> str:
        return f"{RedisKeys.CART}{session_id}"

    @staticmethod
    def checkout_key(session_id: str) -> str:
        return f"{RedisKeys.CHECKOUT}{session_id}"


class TTL:
    """Time-to-live constants for session records (in seconds)."""

    # Sliding expiry for abandoned browser sessions; the cookie itself dies with the browser
    SESSION = 86400  # 24 hours


class SessionStorage(Protocol):
    """Key-value store holding one browser session's records."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisSessionStorage:
    """SessionStorage backed by Upstash Redis."""

    def __init__(self, redis: Optional[AsyncRedis] = None):
        self._redis = redis

    @property
    def redis(self) -> AsyncRedis:
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if ttl:
            await self.redis.set(key, value, ex=ttl)
        else:
            await self.redis.set(key, value)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)


class MemorySessionStorage:
    """In-process SessionStorage for tests and local development."""

    def __init__(self):
        self._data: dict[str, tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


def get_session_storage() -> SessionStorage:
    """
    Get the process-wide session storage (singleton).

    Redis is used when configured; otherwise an in-memory store, which only
    works for a single process and loses all carts on restart.
    """
    global _session_storage

    if _session_storage is None:
        use_redis = SESSION_STORAGE == "redis" or (
            SESSION_STORAGE != "memory" and UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN
        )
        if use_redis:
            _session_storage = RedisSessionStorage()
        else:
            logger.warning("Upstash Redis not configured, using in-memory session storage")
            _session_storage = MemorySessionStorage()

    return _session_storage


def set_session_storage(storage: Optional[SessionStorage]) -> None:
    """Replace the session storage singleton (tests, custom deployments)."""
    global _session_storage
    _session_storage = storage
