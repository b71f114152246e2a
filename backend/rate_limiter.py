"""Simple in-memory rolling-window rate limiter.

Each (client, tool) key keeps the timestamps of its accepted requests.
Timestamps older than the window fall out on the next look, so quotas
reset with time and never by an explicit call.
"""

import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

from config import RATE_LIMIT_WINDOW_SECONDS

LIMIT_REACHED_MESSAGE = "Daily limit reached. Upgrade for unlimited access."


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    limit: int
    remaining: int
    reset_after_seconds: int

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after_seconds),
        }


class RollingWindowRateLimiter:
    def __init__(
        self,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[tuple[str, str], deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, key: tuple[str, str], now: float) -> deque[float]:
        """Drop expired timestamps; a key whose window empties is forgotten."""
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def _sweep(self, now: float) -> None:
        """Forget callers that never came back once their window ran out."""
        self._last_sweep = now
        for key in list(self._hits):
            self._prune(key, now)

    def _status(self, hits: deque[float], limit: int, now: float, allowed: bool) -> RateLimitStatus:
        reset_after = 0
        if hits:
            reset_after = max(0, math.ceil(hits[0] + self.window_seconds - now))
        return RateLimitStatus(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - len(hits)),
            reset_after_seconds=reset_after,
        )

    def peek(self, client_id: str, tool: str, limit: int) -> RateLimitStatus:
        """Report the window without charging it."""
        with self._lock:
            now = self._clock()
            hits = self._prune((client_id, tool), now)
            return self._status(hits, limit, now, allowed=len(hits) < limit)

    def hit(self, client_id: str, tool: str, limit: int) -> RateLimitStatus:
        """Charge one request if the ceiling allows it."""
        key = (client_id, tool)
        with self._lock:
            now = self._clock()
            hits = self._prune(key, now)
            if len(hits) >= limit:
                return self._status(hits, limit, now, allowed=False)
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            self._hits[key] = hits
            hits.append(now)
            return self._status(hits, limit, now, allowed=True)
