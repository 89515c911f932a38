"""Persisted session state stores."""

from juris.core.cache.memory import MemorySessionStore
from juris.core.cache.redis import RedisSessionStore, close_redis_pool


__all__ = [
    "MemorySessionStore",
    "RedisSessionStore",
    "close_redis_pool",
]
