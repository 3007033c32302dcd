"""Key-value store adapters - abstracts over storage backends."""

from kvlimit.adapters.kv.base import AbstractKeyValueStore
from kvlimit.adapters.kv.factory import create_kv_store
from kvlimit.adapters.kv.in_memory import InMemoryKeyValueStore
from kvlimit.adapters.kv.redis_store import RedisKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_kv_store",
]
