from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from kanadle import kv
from kanadle.models import WordEntity
from kanadle.word_id import generate_word_id
from kanadle.word_master import WordMaster

T0 = datetime(2025, 6, 10, 8, 30, tzinfo=timezone.utc)


class DownRedis:
    """Every backend call fails as if the server were unreachable."""

    def scan_iter(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise RedisConnectionError("connection refused")
        return _fail


def make_entity(word, minutes=0, word_id=None, active=True):
    return WordEntity(
        id=word_id or generate_word_id(),
        word=word,
        created_at=T0 + timedelta(minutes=minutes),
        is_active=active,
    )


@pytest.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    kv.use_client(client)
    yield client
    await client.flushall()
    await client.aclose()
    kv.reset_client()


@pytest.fixture
def word_master(redis_client):
    return WordMaster(redis_client)


@pytest.fixture
def down_master():
    return WordMaster(DownRedis())


@pytest.fixture
async def seeded(word_master):
    """Adds entities in creation order and returns them."""
    async def _seed(*words):
        entities = [make_entity(w, minutes=i) for i, w in enumerate(words)]
        for e in entities:
            assert await word_master.add_word(e)
        return entities
    return _seed
