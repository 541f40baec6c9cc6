from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List

from fastapi import Depends, HTTPException, Request, status

from .config import Settings, get_settings


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset: int  # unix time (seconds) at which the oldest counted request leaves the window

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }


class RateLimiter:
    """
    Simple in-memory sliding-window rate limiter.

    Tracks request timestamps per identifier (client address) and rejects once
    max_requests have been seen within window_seconds. Identifiers with no
    request inside the window are dropped, at most one window after their last
    request.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.time):
        self._requests: Dict[str, List[float]] = {}
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._requests)

    def _sweep(self, now: float) -> None:
        window_start = now - self.window_seconds
        stale = [key for key, bucket in self._requests.items() if not bucket or bucket[-1] <= window_start]
        for key in stale:
            del self._requests[key]
        self._last_sweep = now

    def check_and_increment(self, identifier: str) -> RateLimitDecision:
        """Check whether identifier may make another request and count it if so."""
        now = self._clock()
        window_start = now - self.window_seconds
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        # Clean old entries
        bucket = [t for t in self._requests.pop(identifier, ()) if t > window_start]

        if len(bucket) >= self.max_requests:
            self._requests[identifier] = bucket
            reset = math.ceil(bucket[0] + self.window_seconds)
            return RateLimitDecision(False, self.max_requests, 0, reset)

        bucket.append(now)
        self._requests[identifier] = bucket
        reset = math.ceil(bucket[0] + self.window_seconds)
        return RateLimitDecision(True, self.max_requests, self.max_requests - len(bucket), reset)

    def reset(self, identifier: str) -> None:
        self._requests.pop(identifier, None)


_global_rate_limiter: RateLimiter | None = None


def get_rate_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter | None:
    """Process-wide limiter built from settings; ``None`` when limiting is disabled."""
    global _global_rate_limiter
    if not settings.rate_limit_requests:
        return None
    limiter = _global_rate_limiter
    if (
        limiter is None
        or limiter.max_requests != settings.rate_limit_requests
        or limiter.window_seconds != settings.rate_limit_window_seconds
    ):
        limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
        _global_rate_limiter = limiter
    return limiter


def client_identifier(request: Request, trust_forwarded_for: bool = False) -> str:
    """Peer address, or the first X-Forwarded-For hop when the proxy is trusted."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded and forwarded.split(",")[0].strip():
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter | None = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> None:
    if limiter is None:
        return
    decision = limiter.check_and_increment(client_identifier(request, settings.trust_forwarded_for))
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="You have reached your request limit. Please try again later.",
            headers=decision.headers(),
        )
