"""Redis-backed session state store.

Stores share one connection pool built from ``settings.redis_url`` unless
a client is passed in.
"""

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from juris.config import settings
from juris.core.errors import BackingStoreError


_pool: ConnectionPool | None = None


def _get_pool() -> ConnectionPool:
    """Get or create the Redis connection pool."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(
            str(settings.redis_url),
            max_connections=50,
            decode_responses=True,
        )
    return _pool


async def close_redis_pool() -> None:
    """Close the shared connection pool.

    Call this during application shutdown.
    """
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None


class RedisSessionStore:
    """Session state store backed by Redis.

    Keys are namespaced as ``{prefix}:session:{session_id}:{key}``. An
    optional TTL bounds how long abandoned session state survives.
    """

    def __init__(
        self,
        session_id: str,
        client: redis.Redis | None = None,  # type: ignore[type-arg]
        prefix: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self.client = client if client is not None else redis.Redis(connection_pool=_get_pool())
        self.session_id = session_id
        self.prefix = prefix or settings.session_key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}:session:{self.session_id}:{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self.client.get(self._key(key))
        except RedisError as e:
            raise BackingStoreError("Session state read failed", details={"key": key}) from e
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(self._key(key), value, ex=self.ttl_seconds)
        except RedisError as e:
            raise BackingStoreError("Session state write failed", details={"key": key}) from e

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.client.delete(*(self._key(key) for key in keys))
        except RedisError as e:
            raise BackingStoreError("Session state delete failed") from e
