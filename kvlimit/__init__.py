"""Fixed-window rate limiting on top of a pluggable key-value store."""

from kvlimit.adapters.kv import (
    AbstractKeyValueStore,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    create_kv_store,
)
from kvlimit.adapters.rate_limit import (
    AbstractRateLimiter,
    KVFixedWindowRateLimiter,
    RateLimitOptions,
    RateLimitOutcome,
)

__version__ = "0.1.0"

__all__ = [
    "AbstractKeyValueStore",
    "AbstractRateLimiter",
    "InMemoryKeyValueStore",
    "KVFixedWindowRateLimiter",
    "RateLimitOptions",
    "RateLimitOutcome",
    "RedisKeyValueStore",
    "create_kv_store",
]
