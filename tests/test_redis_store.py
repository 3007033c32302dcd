"""Unit tests for the Redis key-value store adapter.

A small fake client stands in for redis-py so no server is needed.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from kvlimit.adapters.kv.redis_store import RedisKeyValueStore
from kvlimit.adapters.rate_limit import KVFixedWindowRateLimiter, RateLimitOptions


class FakeRedis:
    """Dict-backed subset of the redis-py client API (bytes values, EX)."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value.encode()
        self.ttls[key] = ex
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed


def test_get_returns_raw_bytes() -> None:
    client = Mock(spec=Redis)
    client.get.return_value = b'{"remaining": 1, "reset": 5}'
    store = RedisKeyValueStore(client)

    assert store.get("rl:k") == b'{"remaining": 1, "reset": 5}'
    client.get.assert_called_once_with("rl:k")


def test_get_does_not_decode_invalid_utf8() -> None:
    client = Mock(spec=Redis)
    client.get.return_value = b"\xff\xfe"

    assert RedisKeyValueStore(client).get("rl:k") == b"\xff\xfe"


@pytest.mark.parametrize(
    "raw",
    [
        b"\xff\xfe",
        b"\xff\xfe garbage",
        b'{"remaining": "\xff", "reset": 5}',
    ],
)
def test_invalid_utf8_state_is_treated_as_fresh_window(raw: bytes) -> None:
    client = Mock(spec=Redis)
    client.get.return_value = raw
    limiter = KVFixedWindowRateLimiter(
        RedisKeyValueStore(client),
        RateLimitOptions(limit=2, period=60),
        clock=lambda: 1000.0,
    )

    headers = limiter.write_http_metadata("k")
    assert headers["X-RateLimit-Remaining"] == "2"

    assert limiter.limit("k").success is True
    client.set.assert_called_once_with("rl:k", '{"remaining":1,"reset":1060000}', ex=60)


def test_get_passes_through_decoded_strings() -> None:
    client = Mock(spec=Redis)
    client.get.return_value = "already-text"

    assert RedisKeyValueStore(client).get("k") == "already-text"


def test_get_missing_returns_none() -> None:
    client = Mock(spec=Redis)
    client.get.return_value = None

    assert RedisKeyValueStore(client).get("k") is None


def test_put_sets_expiry_in_seconds() -> None:
    client = Mock(spec=Redis)

    RedisKeyValueStore(client).put("k", "v", expire_after_seconds=60)

    client.set.assert_called_once_with("k", "v", ex=60)


def test_delete_forwards_to_client() -> None:
    client = Mock(spec=Redis)
    client.delete.return_value = 0

    RedisKeyValueStore(client).delete("k")

    client.delete.assert_called_once_with("k")


def test_from_url_builds_client() -> None:
    with patch("kvlimit.adapters.kv.redis_store.Redis.from_url") as from_url:
        store = RedisKeyValueStore.from_url("redis://localhost:6379/0", socket_timeout=1)

    from_url.assert_called_once_with("redis://localhost:6379/0", socket_timeout=1)
    assert isinstance(store, RedisKeyValueStore)


def test_connection_errors_propagate_through_limiter() -> None:
    client = Mock(spec=Redis)
    client.get.side_effect = RedisConnectionError("connection refused")
    limiter = KVFixedWindowRateLimiter(RedisKeyValueStore(client), RateLimitOptions(limit=1, period=60))

    with pytest.raises(RedisConnectionError):
        limiter.limit("k")


def test_limiter_scenario_over_redis_store() -> None:
    client = FakeRedis()
    limiter = KVFixedWindowRateLimiter(
        RedisKeyValueStore(client),  # type: ignore[arg-type]
        RateLimitOptions(limit=2, period=10),
    )

    assert limiter.limit("k").success is True
    assert limiter.limit("k").success is True
    assert limiter.limit("k").success is False
    assert client.ttls["rl:k"] == 10

    limiter.reset("k")
    assert "rl:k" not in client.data

    assert limiter.limit("k").success is True
