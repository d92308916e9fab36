import asyncio
import json
from typing import Dict, List, Optional

import fakeredis
import pytest

from app.services.kv_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    create_kv_store,
)


class DictOnlyStore(KeyValueStore):
    """Implements only the abstract methods, so list operations use the base fallback."""

    def __init__(self):
        self.values: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def put(self, key: str, value: str) -> None:
        self.values[key] = value

    async def list_keys(self, prefix: str = "") -> List[str]:
        return [k for k in self.values if k.startswith(prefix)]

    async def count(self) -> int:
        return len(self.values)


@pytest.fixture
def redis_kv():
    return RedisKeyValueStore(client=fakeredis.FakeAsyncRedis(decode_responses=True))


@pytest.mark.asyncio
async def test_memory_get_put_and_missing_key():
    kv = MemoryKeyValueStore()
    assert await kv.get("missing") is None
    await kv.put("a", "1")
    await kv.put("a", "2")
    assert await kv.get("a") == "2"


@pytest.mark.asyncio
async def test_memory_list_keys_filters_by_prefix():
    kv = MemoryKeyValueStore()
    await kv.put("conv:1", "{}")
    await kv.put("ticket:1", "{}")
    await kv.append_to_list("history:s", "x", 10)
    assert sorted(await kv.list_keys("conv:")) == ["conv:1"]
    assert len(await kv.list_keys()) == 3
    assert await kv.count() == 3


@pytest.mark.asyncio
async def test_memory_append_keeps_last_entries():
    kv = MemoryKeyValueStore()
    for i in range(5):
        await kv.append_to_list("k", str(i), 3)
    assert await kv.get_list("k") == ["2", "3", "4"]


@pytest.mark.asyncio
async def test_memory_get_list_returns_copy():
    kv = MemoryKeyValueStore()
    await kv.append_to_list("k", "a", 3)
    items = await kv.get_list("k")
    items.append("b")
    assert await kv.get_list("k") == ["a"]


@pytest.mark.asyncio
async def test_base_fallback_stores_list_as_json_array():
    kv = DictOnlyStore()
    assert await kv.get_list("k") == []
    for i in range(4):
        await kv.append_to_list("k", str(i), 2)
    assert await kv.get_list("k") == ["2", "3"]
    assert json.loads(kv.values["k"]) == ["2", "3"]


@pytest.mark.asyncio
async def test_redis_get_put_and_prefix_listing(redis_kv):
    await redis_kv.put("conv:1", "one")
    await redis_kv.put("conv:2", "two")
    await redis_kv.put("settings:default", "{}")
    assert await redis_kv.get("conv:1") == "one"
    assert await redis_kv.get("nope") is None
    assert sorted(await redis_kv.list_keys("conv:")) == ["conv:1", "conv:2"]
    assert await redis_kv.count() == 3


@pytest.mark.asyncio
async def test_redis_append_trims_to_max_len(redis_kv):
    for i in range(12):
        await redis_kv.append_to_list("history:s", str(i), 10)
    assert await redis_kv.get_list("history:s") == [str(i) for i in range(2, 12)]
    assert await redis_kv.get_list("history:other") == []


@pytest.mark.asyncio
async def test_memory_concurrent_appends_keep_every_item():
    kv = MemoryKeyValueStore()
    await asyncio.gather(*(kv.append_to_list("history:s", str(i), 50) for i in range(20)))
    assert sorted(await kv.get_list("history:s"), key=int) == [str(i) for i in range(20)]


@pytest.mark.asyncio
async def test_memory_concurrent_appends_respect_cap():
    kv = MemoryKeyValueStore()
    await asyncio.gather(*(kv.append_to_list("history:s", str(i), 10) for i in range(25)))
    assert len(await kv.get_list("history:s")) == 10


@pytest.mark.asyncio
async def test_redis_concurrent_appends_keep_every_item(redis_kv):
    await asyncio.gather(*(redis_kv.append_to_list("history:s", str(i), 50) for i in range(20)))
    assert sorted(await redis_kv.get_list("history:s"), key=int) == [str(i) for i in range(20)]


@pytest.mark.asyncio
async def test_redis_concurrent_appends_respect_cap(redis_kv):
    await asyncio.gather(*(redis_kv.append_to_list("history:s", str(i), 10) for i in range(25)))
    assert len(await redis_kv.get_list("history:s")) == 10


def test_create_kv_store_by_name():
    assert create_kv_store("none") is None
    assert create_kv_store("") is None
    assert isinstance(create_kv_store("memory"), MemoryKeyValueStore)
    assert isinstance(create_kv_store("redis", "redis://localhost:6379/0"), RedisKeyValueStore)


def test_create_kv_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_kv_store("dynamo")


def test_redis_store_needs_url_or_client():
    with pytest.raises(ValueError):
        RedisKeyValueStore()
