"""
KEY-VALUE STORE MODULE
======================

The persistence layer behind the conversation store. Values are JSON strings;
the conversation store decides what goes in them and under which key.

BACKENDS:
  MemoryKeyValueStore - Process-local dicts. Development and tests only; data is
                        lost on restart and not shared between workers.
  RedisKeyValueStore  - Redis via redis.asyncio. History lists use RPUSH + LTRIM
                        inside one MULTI transaction, so concurrent chat turns in
                        the same session cannot overwrite each other.

create_kv_store(backend) returns None for "none": callers treat a missing store
as "unbound" and skip persistence.
"""

from abc import ABC, abstractmethod
import json
import logging
from typing import Dict, List, Optional

import redis.asyncio as redis

logger = logging.getLogger("assistant")


class KeyValueStore(ABC):
    """Interface shared by all store backends."""

    name = "kv"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> List[str]:
        """Return all keys starting with prefix (order unspecified)."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of keys held by the store."""

    async def get_list(self, key: str) -> List[str]:
        """Return the list stored under key, oldest first; [] if absent."""
        raw = await self.get(key)
        return json.loads(raw) if raw else []

    async def append_to_list(self, key: str, item: str, max_len: int) -> None:
        """
        Append item to the list under key and keep only the last max_len items.

        This fallback stores the list as one JSON array and rewrites it whole:
        two writers racing on the same key can lose an update. Backends with an
        atomic primitive override both list methods.
        """
        items = await self.get_list(key)
        items.append(item)
        await self.put(key, json.dumps(items[-max_len:]))

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""


# ==============================================================================
# MEMORY BACKEND
# ==============================================================================

class MemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store. No method awaits between reading and writing, so
    append_to_list is atomic with respect to other coroutines on the same loop.
    """

    name = "memory"

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._lists: Dict[str, List[str]] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def put(self, key: str, value: str) -> None:
        self._values[key] = value

    async def list_keys(self, prefix: str = "") -> List[str]:
        keys = list(self._values) + list(self._lists)
        return [k for k in keys if k.startswith(prefix)]

    async def count(self) -> int:
        return len(self._values) + len(self._lists)

    async def get_list(self, key: str) -> List[str]:
        return list(self._lists.get(key, []))

    async def append_to_list(self, key: str, item: str, max_len: int) -> None:
        items = self._lists.setdefault(key, [])
        items.append(item)
        del items[:-max_len]


# ==============================================================================
# REDIS BACKEND
# ==============================================================================

class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store. Pass an existing client (tests) or a URL."""

    name = "redis"

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None):
        if client is None:
            if not url:
                raise ValueError("RedisKeyValueStore needs a url or a client")
            client = redis.Redis.from_url(url, decode_responses=True)
        self._client = client

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def put(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def list_keys(self, prefix: str = "") -> List[str]:
        return [key async for key in self._client.scan_iter(match=f"{prefix}*")]

    async def count(self) -> int:
        return await self._client.dbsize()

    async def get_list(self, key: str) -> List[str]:
        return await self._client.lrange(key, 0, -1)

    async def append_to_list(self, key: str, item: str, max_len: int) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            await pipe.rpush(key, item).ltrim(key, -max_len, -1).execute()

    async def close(self) -> None:
        await self._client.aclose()


def create_kv_store(backend: str, redis_url: Optional[str] = None) -> Optional[KeyValueStore]:
    """
    Build the store named by KV_BACKEND. Returns None for "none" (store unbound).
    Raises ValueError for an unknown backend name so a typo fails at startup.
    """
    if backend in ("", "none"):
        return None
    if backend == "memory":
        logger.warning("Using in-memory key-value store; data is lost on restart.")
        return MemoryKeyValueStore()
    if backend == "redis":
        return RedisKeyValueStore(url=redis_url)
    raise ValueError(f"Unknown KV_BACKEND: {backend!r}")
