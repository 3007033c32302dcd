"""Fixed-window rate limiter backed by a key-value store.

Notes:
- All window state lives in the store; the limiter itself only holds its
  immutable options, so one instance can be shared between threads.
- ``limit()`` does a plain read followed by a write. Two concurrent calls for
  the same key can read the same state and both be admitted, so the limit may
  be exceeded slightly under contention.
- Every call, admitted or denied, pushes the window expiry a full period into
  the future. A client that keeps calling while denied stays denied.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from pydantic import ValidationError
from starlette.datastructures import MutableHeaders

from kvlimit.adapters.kv.base import AbstractKeyValueStore
from kvlimit.adapters.rate_limit.base import (
    ALLOWED_PERIODS,
    AbstractRateLimiter,
    RateLimitOptions,
    RateLimitOutcome,
)
from kvlimit.core.errors import ValidationAppError
from kvlimit.core.logging import hash_key
from kvlimit.schemas.window import WindowState

logger = logging.getLogger(__name__)

KEY_PREFIX = "rl:"


class KVFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key in a fixed window.

    Each key maps to a ``WindowState`` stored under ``rl:<key>`` with a
    time-to-live equal to the period, so idle keys expire on their own.
    """

    def __init__(
        self,
        store: AbstractKeyValueStore,
        options: RateLimitOptions | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Key-value store holding window state.
            options: Limit and period; ``RateLimitOptions()`` defaults
                (10 requests per 60 seconds) when omitted.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValidationAppError: If limit or period are invalid.
        """
        options = options if options is not None else RateLimitOptions()

        if options.limit < 1:
            raise ValidationAppError(
                code="rate_limit_invalid_limit",
                message="limit must be >= 1",
                details={"field": "limit", "actual_value": options.limit},
            )
        if options.period not in ALLOWED_PERIODS:
            raise ValidationAppError(
                code="rate_limit_invalid_period",
                message=f"period must be one of {ALLOWED_PERIODS}",
                details={
                    "field": "period",
                    "allowed_values": list(ALLOWED_PERIODS),
                    "actual_value": options.period,
                },
            )

        self._store = store
        self._limit = options.limit
        self._period = options.period
        self._clock = clock

    @property
    def options(self) -> RateLimitOptions:
        return RateLimitOptions(limit=self._limit, period=self._period)

    def limit(self, key: str) -> RateLimitOutcome:
        """Consume one request for key.

        Always performs one store read and one store write, even when the
        request is denied. Store errors propagate unchanged.

        Args:
            key: Caller identifier.

        Returns:
            RateLimitOutcome; ``success`` is False once more than ``limit``
            requests were made in the current window.

        Raises:
            ValidationAppError: If key is empty.
        """
        store_key = self._store_key(key)
        state = self._read_state(key, store_key)

        was_within_limit = state.remaining >= 0
        if was_within_limit:
            state.remaining -= 1

        state.reset_at = self._next_reset_ms()

        self._store.put(store_key, state.to_json(), expire_after_seconds=self._period)

        success = state.remaining >= 0
        self._log_outcome(key, state, success=success, newly_exceeded=was_within_limit and not success)
        return RateLimitOutcome(success=success)

    def reset(self, key: str) -> None:
        """Delete the stored window for key. No-op when nothing is stored."""

        self._store.delete(self._store_key(key))
        logger.info("rate_limit.reset", extra={"key_hash": hash_key(key)})

    def write_http_metadata(
        self,
        key: str,
        resource: str | None = None,
        headers: MutableHeaders | None = None,
    ) -> MutableHeaders:
        """Append X-RateLimit-* and Retry-After headers for key.

        Reads the current window without writing it back, so it never affects
        later ``limit()`` calls.

        ``X-RateLimit-Reset`` and ``Retry-After`` both carry the window expiry
        as epoch milliseconds, matching what existing clients parse.
        """
        if headers is None:
            headers = MutableHeaders()

        state = self._read_state(key, self._store_key(key))

        headers.append("X-RateLimit-Limit", str(self._limit))
        headers.append("X-RateLimit-Remaining", str(state.remaining))
        headers.append("X-RateLimit-Used", str(self._limit - state.remaining))
        headers.append("X-RateLimit-Reset", str(state.reset_at))

        if resource:
            headers.append("X-RateLimit-Resource", resource)

        headers.append("Retry-After", str(state.reset_at))

        return headers

    def _store_key(self, key: str) -> str:
        if not key:
            raise ValidationAppError(
                code="rate_limit_empty_key",
                message="key must be a non-empty string",
            )
        return f"{KEY_PREFIX}{key}"

    def _next_reset_ms(self) -> int:
        return int((self._clock() + self._period) * 1000)

    def _fresh_state(self) -> WindowState:
        return WindowState(remaining=self._limit, reset_at=self._next_reset_ms())

    def _read_state(self, key: str, store_key: str) -> WindowState:
        """Load the window for store_key, falling back to a fresh window.

        A corrupted entry (invalid UTF-8, invalid JSON or the wrong shape) is
        treated as absent rather than raised, so one bad value can't lock a
        key out.
        """
        raw = self._store.get(store_key)
        if raw is None:
            return self._fresh_state()

        try:
            return WindowState.model_validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as exc:
            logger.warning(
                "rate_limit.state_malformed",
                extra={
                    "key_hash": hash_key(key),
                    "error_type": type(exc).__name__,
                },
            )
            return self._fresh_state()

    def _log_outcome(
        self,
        key: str,
        state: WindowState,
        *,
        success: bool,
        newly_exceeded: bool,
    ) -> None:
        extra = {
            "key_hash": hash_key(key),
            "limit": self._limit,
            "remaining": state.remaining,
            "window_s": self._period,
        }
        if success:
            logger.debug("rate_limit.allowed", extra=extra)
        elif newly_exceeded:
            logger.warning("rate_limit.exceeded", extra=extra)
        else:
            logger.debug("rate_limit.denied", extra=extra)
