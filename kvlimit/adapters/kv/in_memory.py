"""In-memory key-value store with per-entry TTL.

Notes:
- Per-process only: running multiple workers gives each its own store.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from kvlimit.adapters.kv.base import AbstractKeyValueStore
from kvlimit.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: str
    expires_at: float


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store honoring expiration on read.

    Expired entries are evicted lazily when read, and in bulk on every write so
    idle keys don't accumulate.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def size(self) -> int:
        """Return the number of live (unexpired) entries."""

        with self._lock:
            self._evict_expired_locked()
            return len(self._entries)

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug("kv.expired", extra={"entries": len(self._entries)})
                return None
            return entry.value

    def put(self, key: str, value: str, *, expire_after_seconds: int) -> None:
        if expire_after_seconds < 1:
            raise ValidationAppError(
                code="kv_invalid_ttl",
                message="expire_after_seconds must be >= 1",
                details={"field": "expire_after_seconds", "actual_value": expire_after_seconds},
            )

        with self._lock:
            self._evict_expired_locked()
            self._entries[key] = _Entry(
                value=value,
                expires_at=self._clock() + expire_after_seconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""

        with self._lock:
            self._entries.clear()

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired_keys = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired_keys:
            del self._entries[key]
