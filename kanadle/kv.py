import logging
import os
from typing import Awaitable, Callable, Optional, TypeVar

from redis.asyncio import Redis

REDIS_URL = os.getenv("REDIS_URL")  # e.g. redis://localhost:6379/0

log = logging.getLogger(__name__)

T = TypeVar("T")

_client: Optional[Redis] = None


def connect(url: Optional[str] = None) -> Redis:
    """Build the shared client; the URL is checked once, here."""
    global _client
    url = url or REDIS_URL
    if not url:
        raise RuntimeError("REDIS_URL is not set")
    _client = Redis.from_url(url, decode_responses=True)
    return _client


def get_client() -> Redis:
    if _client is None:
        return connect()
    return _client


def use_client(client: Redis) -> Redis:
    global _client
    _client = client
    return client


def reset_client() -> None:
    global _client
    _client = None


async def ping() -> bool:
    return bool(await get_client().ping())


async def try_with_fallback(operation: Callable[[], Awaitable[T]], fallback: T) -> T:
    try:
        return await operation()
    except Exception as e:
        log.warning("key-value operation failed, using fallback: %r", e)
        return fallback
