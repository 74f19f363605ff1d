"""In-memory per-client request throttling."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict


class RequestThrottle:
    """Sliding-window limiter: at most ``limit`` requests per ``window`` seconds per key.

    Keys whose requests have all left the window are dropped, so the table
    only holds clients seen within the last ``window`` seconds.
    """

    def __init__(
        self,
        limit: int,
        window: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` and report whether it is within the limit."""
        now = self._clock()
        cutoff = now - self.window
        with self._lock:
            self._forget_idle(cutoff)
            hits = self._hits.get(key)
            if hits is None:
                hits = self._hits[key] = deque()
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _forget_idle(self, cutoff: float) -> None:
        # The newest hit is last; once it is stale the whole deque is.
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
