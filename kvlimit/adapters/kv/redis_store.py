"""Redis-backed key-value store.

Shared across processes and hosts, so every worker sees the same window
state. Expiration is delegated to Redis (``SET key value EX ttl``).
"""

from __future__ import annotations

from redis import Redis

from kvlimit.adapters.kv.base import AbstractKeyValueStore


class RedisKeyValueStore(AbstractKeyValueStore):
    """Store implementation on top of a synchronous redis-py client.

    Connection and command errors raised by redis-py are not caught here.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisKeyValueStore":
        """Build a store from a ``redis://`` URL.

        Args:
            url: Redis connection URL.
            **kwargs: Extra options forwarded to ``Redis.from_url``.
        """
        return cls(Redis.from_url(url, **kwargs))

    def get(self, key: str) -> str | bytes | None:
        # Returned undecoded; bytes that aren't valid UTF-8 are the reader's concern.
        return self._client.get(key)

    def put(self, key: str, value: str, *, expire_after_seconds: int) -> None:
        self._client.set(key, value, ex=expire_after_seconds)

    def delete(self, key: str) -> None:
        self._client.delete(key)
