"""Per-client request budgets for expensive write endpoints.

Budgets live in process memory, so each worker counts separately.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from threading import Lock
import time

from fastapi import HTTPException, Request, status

from schoolgrid.core.config import get_settings


class SlidingWindowRateLimiter:
    def __init__(self, *, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = max(1, limit)
        self.window_seconds = max(1, window_seconds)
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = Lock()

    def hit(self, client: str) -> int | None:
        """Record one request for ``client``.

        Returns ``None`` when the request fits the budget, otherwise the
        number of seconds until the oldest counted request expires.
        """
        now = self._clock()
        with self._lock:
            self._prune(now)
            hits = self._hits.setdefault(client, deque())
            if len(hits) >= self.limit:
                return max(1, int(hits[0] + self.window_seconds - now))
            hits.append(now)
        return None

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for client in list(self._hits):
            hits = self._hits[client]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[client]

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_limiters: dict[str, SlidingWindowRateLimiter] = {}
_registry_lock = Lock()


def limiter_for(scope: str, *, limit: int, window_seconds: int) -> SlidingWindowRateLimiter:
    with _registry_lock:
        limiter = _limiters.get(scope)
        if limiter is None:
            limiter = SlidingWindowRateLimiter(limit=limit, window_seconds=window_seconds)
            _limiters[scope] = limiter
        return limiter


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def limit_bulk_schedule_writes(request: Request) -> None:
    """Dependency guarding ``POST /schedule/bulk``; raises 429 with ``Retry-After``."""
    settings = get_settings()
    limiter = limiter_for(
        "bulk schedule",
        limit=settings.bulk_rate_limit_max_requests,
        window_seconds=settings.bulk_rate_limit_window_seconds,
    )
    retry_after = limiter.hit(client_key(request))
    if retry_after is None:
        return
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many bulk schedule requests. Try again in {retry_after} second(s).",
        headers={"Retry-After": str(retry_after)},
    )


def clear_rate_limiter() -> None:
    with _registry_lock:
        for limiter in _limiters.values():
            limiter.reset()
