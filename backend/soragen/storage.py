"""Durable key-value storage for the credential and the active task id.

The Redis backend is best-effort: a storage outage is logged and swallowed,
reads fall back to "absent". Callers are never notified of a failed write.
"""

from __future__ import annotations

import logging
from typing import Protocol

import redis

from soragen.config import Settings, get_settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Plain-text key-value persistence that survives a process restart."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisKeyValueStore:
    """Redis-backed store. All keys are namespaced under ``prefix``."""

    def __init__(self, client: redis.Redis, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> RedisKeyValueStore:
        pool = redis.ConnectionPool.from_url(url, decode_responses=True)
        return cls(redis.Redis(connection_pool=pool), prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError:
            logger.warning("Storage read failed for key %s", key, exc_info=True)
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError:
            logger.warning("Storage write failed for key %s", key, exc_info=True)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError:
            logger.warning("Storage delete failed for key %s", key, exc_info=True)


class MemoryKeyValueStore:
    """Process-local store. Does not survive a restart; used for tests and dev."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


def build_store(settings: Settings | None = None) -> KeyValueStore:
    """Create the storage backend selected by ``STORAGE_BACKEND``."""
    settings = settings or get_settings()
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        logger.warning("Using in-memory storage; sessions will not survive a restart")
        return MemoryKeyValueStore()
    if backend == "redis":
        return RedisKeyValueStore.from_url(settings.REDIS_URL, settings.STORAGE_KEY_PREFIX)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
