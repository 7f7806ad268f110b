"""Per-client fixed-window request governor for the generation routes.

Architectural role:
    Sits in front of both generation endpoints as a FastAPI dependency and rejects
    clients that exceed `RATE_LIMIT_REQUESTS` within `RATE_LIMIT_WINDOW_SECONDS`.

Window model:
    The first request from a client opens a window; later requests inside it are
    counted. Once the window has passed the next request opens a fresh one.
    Entries idle for more than one extra window are pruned on access.

Concurrency:
    Counters are shared by all in-flight requests, so every read-modify-write
    happens under one lock. State is in-process only.
"""

import logging
import math
import os
import threading
import time
from dataclasses import dataclass

from dotenv import load_dotenv
from fastapi import Request

load_dotenv()

logger = logging.getLogger(__name__)

RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "10"))
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."
TRUST_FORWARDED_FOR = os.getenv("TRUST_FORWARDED_FOR") == "true"


class RateLimitExceeded(Exception):
    """Raised by `check_rate_limit`; rendered as HTTP 429 by the API layer."""

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(RATE_LIMIT_MESSAGE)


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Thread-safe fixed-window counter keyed by client identifier."""

    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> float | None:
        """Count one request for `key`.

        Returns:
            `None` when allowed, otherwise seconds until the window resets.
        """
        with self._lock:
            now = self._clock()
            self._prune(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return None

            if window.count >= self.max_requests:
                return max(window.reset_at - now, 0.0)

            window.count += 1
            return None

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [
            key for key, window in self._windows.items()
            if now > window.reset_at + self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


limiter = FixedWindowRateLimiter(RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS)


def get_client_identifier(request: Request) -> str:
    """Return the peer host, or the first `X-Forwarded-For` hop when trusted.

    The forwarded header is only honoured with `TRUST_FORWARDED_FOR=true`; enable
    it only behind a reverse proxy that overwrites the header.
    """
    if TRUST_FORWARDED_FOR:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


async def check_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client window.

    Raises:
        RateLimitExceeded: client is over the limit for the current window.
    """
    identifier = get_client_identifier(request)
    retry_after = limiter.hit(identifier)
    if retry_after is None:
        return

    logger.warning(
        "Rate limit exceeded for %s on %s. Reset in %.0f seconds.",
        identifier,
        request.url.path,
        retry_after,
    )
    raise RateLimitExceeded(retry_after=max(1, math.ceil(retry_after)))
