"""Ephemeral key/value storage with per-key expiry.

Holds pending registrations, OTPs, refresh-token pointers and rate-limit
markers. Callers depend only on the ``TokenStore`` interface: a value is
readable until its TTL elapses or it is deleted.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from estatehub.services.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Abstract base class for expiring stores."""

    available: bool = True

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value for ``key``, or None if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""

    async def ping(self) -> bool:
        return self.available

    async def close(self) -> None:
        return None

    async def get_json(self, key: str) -> Any | None:
        data = await self.get(key)
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.error("Invalid JSON format in key: %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int) -> None:
        await self.set(key, json.dumps(value), ttl)


class MemoryTokenStore(TokenStore):
    """In-process store for development and tests.

    Expired entries are dropped lazily on read. Not shared between processes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._data[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        """Drop every entry. Useful for testing."""
        self._data.clear()


class RedisTokenStore(TokenStore):
    """Redis-backed store using ``SET key value EX ttl``."""

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0) -> None:
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    async def get(self, key: str) -> str | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis GET failed for {key}: {e!r}")
            raise StoreUnavailable() from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self.client.set(key, value, ex=ttl)
        except RedisError as e:
            logger.error(f"Redis SET failed for {key}: {e!r}")
            raise StoreUnavailable() from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            logger.error(f"Redis DEL failed for {key}: {e!r}")
            raise StoreUnavailable() from e

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        await self.client.aclose()


class UnavailableTokenStore(TokenStore):
    """Placeholder used when the cache could not be reached at startup."""

    available = False

    def __init__(self, reason: str = "cache not configured") -> None:
        self.reason = reason

    async def get(self, key: str) -> str | None:
        raise StoreUnavailable()

    async def set(self, key: str, value: str, ttl: int) -> None:
        raise StoreUnavailable()

    async def delete(self, key: str) -> None:
        raise StoreUnavailable()


async def connect_token_store(backend: str, redis_url: str) -> TokenStore:
    """Create the configured store.

    A Redis instance that cannot be reached does not stop startup: an
    ``UnavailableTokenStore`` is returned instead, which disables rate
    limiting and makes every auth flow fail with 503.
    """
    if backend == "memory":
        logger.info("Using in-memory token store")
        return MemoryTokenStore()

    store = RedisTokenStore(redis_url)
    if await store.ping():
        logger.info("Redis connected successfully")
        return store

    logger.warning("Redis not available - running without rate limiting or sessions")
    await store.close()
    return UnavailableTokenStore(reason=f"could not connect to {redis_url}")
