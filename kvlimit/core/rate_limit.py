"""Rate limiting dependency for FastAPI routes.

This module composes a limiter with an HTTP pipeline; it ships no app or
router of its own.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Injected limiter: the store is chosen by whoever builds the limiter.
- Headers on every limited response: X-RateLimit-* and Retry-After.

Default key strategy:
- Per API key when the X-API-Key header is present.
- Otherwise fall back to client IP.
"""

from __future__ import annotations

import logging
from typing import Annotated, Callable

from fastapi import Header, HTTPException, Request, Response, status

from kvlimit.adapters.kv.factory import create_kv_store
from kvlimit.adapters.rate_limit.base import AbstractRateLimiter, RateLimitOptions
from kvlimit.adapters.rate_limit.kv_fixed_window import KVFixedWindowRateLimiter
from kvlimit.core.config import settings
from kvlimit.core.logging import hash_key

logger = logging.getLogger(__name__)

KeyFunc = Callable[[Request, str | None], str]

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, str, str | None] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide limiter built from settings.

    The instance is cached in-module. If configuration changes (primarily in
    tests), the limiter and its store are rebuilt.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    cfg = settings.rate_limit
    config = (cfg.limit, cfg.period, cfg.backend, cfg.redis_url)

    if _limiter is None or _limiter_config != config:
        _limiter = KVFixedWindowRateLimiter(
            create_kv_store(cfg),
            RateLimitOptions.from_settings(cfg),
        )
        _limiter_config = config

    return _limiter


def build_rate_limit_key(request: Request, x_api_key: str | None) -> str:
    """Build the limiter key for the current request.

    Args:
        request: FastAPI request.
        x_api_key: API key value from the X-API-Key header.

    Returns:
        str: Namespaced limiter key.
    """

    if x_api_key:
        return f"api_key:{x_api_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def rate_limit_dependency(
    limiter: AbstractRateLimiter | None = None,
    *,
    resource: str | None = None,
    key_func: KeyFunc = build_rate_limit_key,
) -> Callable[..., None]:
    """Create a FastAPI dependency enforcing a rate limit.

    Usage:
        orders_limit = rate_limit_dependency(limiter, resource="orders")

        @router.get("/orders", dependencies=[Depends(orders_limit)])
        def list_orders(): ...

    Args:
        limiter: Limiter to consume from; ``get_rate_limiter()`` when omitted.
        resource: Optional label emitted as X-RateLimit-Resource.
        key_func: Maps the request (and X-API-Key value) to a limiter key.

    Returns:
        Dependency callable to pass to ``Depends``.
    """

    def enforce_rate_limit(
        request: Request,
        response: Response,
        x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
    ) -> None:
        """Consume one request and raise HTTP 429 when the key is over its limit.

        Synchronous on purpose: store calls may block on the network, so
        FastAPI runs this in its threadpool instead of on the event loop.

        Raises:
            HTTPException: 429 Too Many Requests when rate limit is exceeded.
        """

        if not settings.rate_limit.enabled:
            return

        active = limiter if limiter is not None else get_rate_limiter()
        key = key_func(request, x_api_key)
        key_type = "api_key" if x_api_key else "ip"

        outcome = active.limit(key)
        include_headers = settings.rate_limit.include_headers

        if outcome.success:
            if include_headers:
                active.write_http_metadata(key, resource, response.headers)
            return

        logger.warning(
            "rate_limit.rejected",
            extra={
                "key_type": key_type,
                "key_hash": hash_key(key),
                "resource": resource,
                "request_path": request.url.path,
            },
        )

        headers = dict(active.write_http_metadata(key, resource)) if include_headers else None
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers=headers,
        )

    return enforce_rate_limit
