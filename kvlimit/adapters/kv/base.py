"""Key-value store interface consumed by the rate limiter.

The limiter only needs three operations, so any backend (in-memory, Redis,
a database table) can be plugged in by implementing this class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """Interface for string key-value stores with per-entry expiration."""

    @abstractmethod
    def get(self, key: str) -> str | bytes | None:
        """Return the stored value for key.

        Args:
            key: Store key.

        Returns:
            The stored value as text or raw bytes (backends that speak bytes
            return them undecoded), or None when the key is absent or expired.
        """
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: str, *, expire_after_seconds: int) -> None:
        """Store value under key, replacing any existing entry.

        Args:
            key: Store key.
            value: Text to store.
            expire_after_seconds: Time-to-live; once elapsed the entry reads
                as absent.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""
        raise NotImplementedError
