# src/llm/rate_limiter.py — v1
"""Sliding-window admission limiter for outbound LLM requests.

Keeps a FIFO of admission timestamps. Each probe evicts entries older
than the window, then admits iff fewer than ``max_requests_per_minute``
remain. A refusal is immediate; callers substitute a sentinel result
instead of waiting or retrying.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_S = 60.0


class AdmissionLimiter:
    """Thread-safe rolling-window request gate.

    Args:
        max_requests_per_minute: Admissions allowed per window.
        window_s: Window length in seconds.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        max_requests_per_minute: int,
        window_s: float = DEFAULT_WINDOW_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests_per_minute <= 0:
            raise ValueError("max_requests_per_minute must be > 0")
        self._limit = max_requests_per_minute
        self._window_s = window_s
        self._clock = clock
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def in_window(self) -> int:
        """Number of admissions still counted in the current window."""
        with self._lock:
            self._evict(self._clock())
            return len(self._timestamps)

    @property
    def remaining(self) -> int:
        return max(self._limit - self.in_window, 0)

    def try_acquire(self) -> bool:
        """Record an admission if under the limit.

        Returns:
            True if the request may proceed, False if it must back off.
        """
        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._timestamps) >= self._limit:
                logger.debug(
                    "Admission refused: %d/%d in last %.0fs",
                    len(self._timestamps), self._limit, self._window_s,
                )
                return False
            self._timestamps.append(now)
            return True

    def _evict(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] > self._window_s:
            self._timestamps.popleft()
