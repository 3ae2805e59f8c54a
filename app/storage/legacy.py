"""
Legacy String Store: a flat key/value store of strings.

Holds the historical catalog copies, the backup mirror, the currency
preference and the manually-cleared flag. The in-memory implementation
serves development and tests; set LEGACY_STORE_URL to use Redis.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import redis
import redis.asyncio as aioredis


logger = logging.getLogger(__name__)

PRIMARY_KEY = "ai-inventory-data"
BACKUP_KEY = "ai-inventory-data-backup"
SAFETY_BACKUP_KEY = "ai-inventory-data-safety-backup"
CURRENCY_KEY = "ai-inventory-currency"
MANUAL_CLEAR_KEY = "ai-inventory-manual-clear"


class StringStoreQuotaError(Exception):
    """A write was rejected because the value does not fit."""


class LegacyStringStore(ABC):
    """Async string key/value store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        return None


class MemoryStringStore(LegacyStringStore):
    """Process-local store. ``quota`` caps the length of a single value."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota: Optional[int] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._quota = quota

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        if self._quota is not None and len(value) > self._quota:
            raise StringStoreQuotaError(f"Value for '{key}' exceeds quota of {self._quota}")
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    async def ping(self) -> bool:
        return True

    def snapshot(self) -> Dict[str, str]:
        """Copy of all stored values."""
        return dict(self._values)


class RedisStringStore(LegacyStringStore):
    """Redis-backed store for deployments that share the legacy data."""

    def __init__(self, url: str) -> None:
        self._client = aioredis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(key, value)
        except redis.ResponseError as e:
            # maxmemory reached
            if "OOM" in str(e):
                raise StringStoreQuotaError(str(e)) from e
            raise

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except redis.RedisError:
            return False

    async def close(self) -> None:
        await self._client.aclose()


def create_legacy_store(url: str = "") -> LegacyStringStore:
    """Redis when a URL is configured, otherwise in-memory."""
    if url:
        logger.info("Using Redis legacy string store")
        return RedisStringStore(url)
    logger.info("Using in-memory legacy string store")
    return MemoryStringStore()
