"""Factory pattern for creating key-value store instances."""

from kvlimit.adapters.kv.base import AbstractKeyValueStore
from kvlimit.adapters.kv.in_memory import InMemoryKeyValueStore
from kvlimit.adapters.kv.redis_store import RedisKeyValueStore
from kvlimit.core.config import RateLimitSettings, settings
from kvlimit.core.errors import ValidationAppError


def create_kv_store(rate_limit_settings: RateLimitSettings | None = None) -> AbstractKeyValueStore:
    """Instantiate the configured key-value store backend.

    Args:
        rate_limit_settings: Optional settings; defaults to global settings.

    Returns:
        AbstractKeyValueStore: Configured store instance.

    Raises:
        ValidationAppError: If the backend is unknown or misconfigured.
    """
    cfg = rate_limit_settings or settings.rate_limit
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryKeyValueStore()

    if backend == "redis":
        if not cfg.redis_url:
            raise ValidationAppError(
                code="kv_missing_redis_url",
                message="Redis backend requires RATE_LIMIT_REDIS_URL environment variable",
            )
        return RedisKeyValueStore.from_url(cfg.redis_url)

    raise ValidationAppError(
        code="kv_unknown_backend",
        message=f"Unknown key-value store backend: '{backend}'. Supported backends: memory, redis",
        details={"field": "backend", "allowed_values": ["memory", "redis"], "actual_value": backend},
    )
