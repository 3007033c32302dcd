"""Rate limiting adapters.

The limiter keeps no state of its own; window bookkeeping lives in whatever
key-value store it is given, so the same code runs against an in-memory dict
in tests and a shared Redis in production.
"""

from kvlimit.adapters.rate_limit.base import (
    DEFAULT_LIMIT,
    DEFAULT_PERIOD,
    AbstractRateLimiter,
    RateLimitOptions,
    RateLimitOutcome,
)
from kvlimit.adapters.rate_limit.kv_fixed_window import KEY_PREFIX, KVFixedWindowRateLimiter

__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_PERIOD",
    "KEY_PREFIX",
    "AbstractRateLimiter",
    "KVFixedWindowRateLimiter",
    "RateLimitOptions",
    "RateLimitOutcome",
]
