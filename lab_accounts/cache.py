"""Key-value cache backends holding lab account records."""

from __future__ import annotations

import logging
from typing import Protocol

import redis.asyncio as aioredis

from .config import Settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Byte-string key-value store consumed by :class:`~lab_accounts.domain.account.Account`."""

    async def get(self, key: str) -> bytes | None:
        ...

    async def set(self, key: str, value: bytes) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class InMemoryCacheStore:
    """Process-local store used for development and tests."""

    def __init__(self) -> None:
        self._values: dict[str, bytes] = {}

    async def get(self, key: str) -> bytes | None:
        return self._values.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._values[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        """Return the keys currently held, in insertion order."""
        return list(self._values)


class RedisCacheStore:
    """Shared store backed by Redis string keys.

    Errors raised by the client (connection loss, timeouts, server faults) are
    propagated unchanged.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> bytes | None:
        value = await self._client.get(key)
        if isinstance(value, str):
            # client configured with decode_responses=True
            return value.encode("utf-8")
        return value

    async def set(self, key: str, value: bytes) -> None:
        await self._client.set(key, value)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()


def build_cache_store(settings: Settings) -> InMemoryCacheStore | RedisCacheStore:
    """Instantiate the configured cache backend."""
    if settings.cache_backend == "redis":
        if not settings.redis_url:
            raise ConfigurationError("REDIS_URL must be set when CACHE_BACKEND=redis")
        logger.info("account cache configured for redis backend at %s", settings.redis_url)
        return RedisCacheStore(aioredis.from_url(settings.redis_url))

    logger.info("account cache using in-memory backend")
    return InMemoryCacheStore()
