"""Rate limiter interfaces.

Callers should depend on this abstraction (not the concrete implementation)
so the limiting scheme can change without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from starlette.datastructures import MutableHeaders

from kvlimit.core.config import ALLOWED_PERIODS, RateLimitSettings, settings

DEFAULT_LIMIT = 10
DEFAULT_PERIOD = 60


@dataclass(frozen=True)
class RateLimitOptions:
    """Limiter configuration, fixed for the lifetime of a limiter.

    Attributes:
        limit: Max admitted requests per window.
        period: Window length in seconds (10 or 60).
    """

    limit: int = DEFAULT_LIMIT
    period: Literal[10, 60] = DEFAULT_PERIOD

    @classmethod
    def from_settings(cls, rate_limit_settings: RateLimitSettings | None = None) -> "RateLimitOptions":
        cfg = rate_limit_settings or settings.rate_limit
        return cls(limit=cfg.limit, period=cfg.period)


@dataclass(frozen=True)
class RateLimitOutcome:
    """Admit/deny decision for a single rate limit check."""

    success: bool


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def limit(self, key: str) -> RateLimitOutcome:
        """Consume one request for key.

        Args:
            key: Unique identifier (e.g., API key, IP address, route).

        Returns:
            RateLimitOutcome describing whether the request is admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str) -> None:
        """Forget all recorded requests for key."""
        raise NotImplementedError

    @abstractmethod
    def write_http_metadata(
        self,
        key: str,
        resource: str | None = None,
        headers: MutableHeaders | None = None,
    ) -> MutableHeaders:
        """Describe the current window for key as rate limit response headers.

        Must not consume a request.

        Args:
            key: Unique identifier.
            resource: Optional label emitted as X-RateLimit-Resource.
            headers: Header collection to append into; a new one is created
                when omitted.

        Returns:
            The header collection that was written.
        """
        raise NotImplementedError
