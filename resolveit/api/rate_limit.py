"""
Rate Limiting Middleware
========================

Sliding-window request limit per client IP on the API routes.
Limits are read from settings on every request:

    RATE_LIMIT_ENABLED          on/off switch
    RATE_LIMIT_WINDOW_SECONDS   window length (default 15 minutes)
    RATE_LIMIT_MAX_REQUESTS     requests allowed per window

Counters live in process memory, so each worker enforces its own window.
"""

import time
from collections import defaultdict, deque
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from resolveit.config import settings
from resolveit.core.logging import log

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class RateLimiter:
    """Sliding-window request counter keyed by client."""

    def __init__(self):
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def is_allowed(self, key: str, limit: int, window_seconds: int) -> tuple[bool, int, int]:
        """
        Count a request against `key`.

        Returns:
            (allowed, remaining, seconds until the oldest hit leaves the window)
        """
        now = time.monotonic()
        hits = self._hits[key]
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()

        if len(hits) >= limit:
            reset_after = max(1, int(hits[0] + window_seconds - now) + 1)
            return False, 0, reset_after

        hits.append(now)
        reset_after = max(1, int(hits[0] + window_seconds - now) + 1)
        return True, limit - len(hits), reset_after

    def reset(self) -> None:
        self._hits.clear()


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter shared by the middleware."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject API requests over the per-IP limit with 429."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        prefix = settings.API_PREFIX.rstrip("/") + "/"
        if not settings.get("RATE_LIMIT_ENABLED", True) or not request.url.path.startswith(prefix):
            return await call_next(request)

        limit = int(settings.RATE_LIMIT_MAX_REQUESTS)
        window = int(settings.RATE_LIMIT_WINDOW_SECONDS)
        client_ip = request.client.host if request.client else "unknown"

        allowed, remaining, reset_after = get_rate_limiter().is_allowed(client_ip, limit, window)
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset_after),
        }

        if not allowed:
            log.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": RATE_LIMIT_MESSAGE, "retry_after": reset_after},
                headers={**headers, "Retry-After": str(reset_after)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
