from __future__ import annotations

from fakeredis import aioredis as fake_aioredis
import pytest

from lab_accounts.cache import InMemoryCacheStore, RedisCacheStore
from lab_accounts.config import AccountNaming


@pytest.fixture()
def naming() -> AccountNaming:
    return AccountNaming(prefix="evals", pad_zeroes=True)


@pytest.fixture()
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture()
async def redis_store():
    client = fake_aioredis.FakeRedis()
    await client.flushall()
    store = RedisCacheStore(client)
    yield store
    await store.close()
