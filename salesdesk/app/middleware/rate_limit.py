"""In-memory login throttling.

Keyed by an arbitrary string (the client IP for logins). State lives in the
process, so for multi-replica deployments swap to Redis.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable

from fastapi import HTTPException, status


class InMemoryRateLimiter:
    """Sliding-window limiter: at most *max_attempts* per *window_seconds*."""

    def __init__(
        self,
        window_seconds: int = 60,
        max_attempts: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._max = max_attempts
        self._clock = clock
        self._attempts: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of keys currently tracked."""
        return len(self._attempts)

    def _prune(self, key: str, now: float) -> deque[float]:
        attempts = self._attempts.get(key, deque())
        while attempts and now - attempts[0] >= self._window:
            attempts.popleft()
        if attempts:
            self._attempts[key] = attempts
        else:
            self._attempts.pop(key, None)
        return attempts

    def _sweep(self, now: float) -> None:
        # Drop keys whose every attempt has aged out of the window
        if now - self._last_sweep < self._window:
            return
        for key in list(self._attempts):
            self._prune(key, now)
        self._last_sweep = now

    def check(self, key: str) -> None:
        """Record an attempt for *key*; raise HTTP 429 once over the limit."""
        now = self._clock()
        self._sweep(now)
        attempts = self._prune(key, now)
        if len(attempts) >= self._max:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many attempts. Try again in {self._window} seconds.",
            )
        attempts.append(now)
        self._attempts[key] = attempts

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._attempts.clear()
        else:
            self._attempts.pop(key, None)
