"""In-process fixed-window request counter keyed by client address."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple


class FixedWindowRateLimiter:
    """Allow ``max_requests`` per ``window_seconds`` for each key.

    State lives in process memory, so limits apply per worker.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Optional[Callable[[], float]] = None):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> Tuple[bool, int]:
        """Count one request for ``key``; returns (allowed, retry_after_seconds)."""
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            if len(self._windows) > 10000:
                self._evict_expired(now)
        if count > self.max_requests:
            retry_after = max(1, int(round(started + self.window_seconds - now)))
            return False, retry_after
        return True, 0

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (started, _c) in self._windows.items() if now - started >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
