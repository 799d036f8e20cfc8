"""
Sliding-window rate limiter.

Admits a request only while fewer than ``max_requests_per_window`` requests
were admitted during the trailing ``window_ms``.
"""

from __future__ import annotations

import os
import threading
from collections import deque
from dataclasses import dataclass

from interview_ai.resilience.clock import Clock, monotonic_ms
from interview_ai.resilience.signals import RateLimiterSnapshot


@dataclass
class RateLimiterConfig:
    """Configuration for the sliding-window rate limiter.

    Attributes:
        max_requests_per_window: Requests admitted per window
        window_ms: Window length in milliseconds
    """

    max_requests_per_window: int = 60
    window_ms: float = 60_000.0

    @classmethod
    def default(cls) -> RateLimiterConfig:
        """Create default configuration (60 requests per minute)."""
        return cls()

    @classmethod
    def from_env(cls) -> RateLimiterConfig:
        """Create configuration from environment variables."""
        return cls(
            max_requests_per_window=int(
                os.getenv("INTERVIEW_AI_RATE_LIMIT_MAX_REQUESTS", "60")
            ),
            window_ms=float(os.getenv("INTERVIEW_AI_RATE_LIMIT_WINDOW_MS", "60000")),
        )


@dataclass
class AdmissionResult:
    """Outcome of an admission check.

    Attributes:
        allowed: Whether the request may proceed
        remaining: Slots left in the current window
        retry_after_ms: Wait before a slot frees up (0 when allowed)
    """

    allowed: bool
    remaining: int
    retry_after_ms: float = 0.0


class RateLimiter:
    """Sliding-window request counter.

    Timestamps of admitted requests are kept in order; entries older than the
    window are purged before every check.

    Example:
        >>> limiter = RateLimiter(RateLimiterConfig(max_requests_per_window=2))
        >>> limiter.try_admit().allowed
        True
    """

    def __init__(
        self,
        config: RateLimiterConfig | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        """Initialize rate limiter.

        Args:
            config: Rate limiter configuration
            clock: Monotonic clock returning milliseconds
        """
        self._config = config or RateLimiterConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._window: deque[float] = deque()

    @property
    def config(self) -> RateLimiterConfig:
        """Get limiter configuration."""
        return self._config

    def _purge(self, now: float) -> None:
        """Drop timestamps that fell out of the window."""
        window_ms = self._config.window_ms
        while self._window and now - self._window[0] >= window_ms:
            self._window.popleft()

    def _retry_after(self, now: float) -> float:
        if not self._window:
            return self._config.window_ms
        return max(0.0, self._window[0] + self._config.window_ms - now)

    def try_admit(self, now: float | None = None) -> AdmissionResult:
        """Check admission and record the request when allowed.

        Args:
            now: Monotonic timestamp in milliseconds (defaults to the clock)

        Returns:
            AdmissionResult
        """
        with self._lock:
            now = self._clock() if now is None else now
            self._purge(now)

            limit = self._config.max_requests_per_window
            if len(self._window) >= limit:
                return AdmissionResult(
                    allowed=False,
                    remaining=0,
                    retry_after_ms=self._retry_after(now),
                )

            self._window.append(now)
            return AdmissionResult(
                allowed=True,
                remaining=limit - len(self._window),
            )

    def snapshot(self, now: float | None = None) -> RateLimiterSnapshot:
        """Get current window state."""
        with self._lock:
            now = self._clock() if now is None else now
            self._purge(now)
            limit = self._config.max_requests_per_window
            reset_ms = (
                max(0.0, self._window[0] + self._config.window_ms - now)
                if self._window
                else 0.0
            )
            return RateLimiterSnapshot(
                limit=limit,
                remaining=max(0, limit - len(self._window)),
                window_ms=self._config.window_ms,
                reset_ms=reset_ms,
            )

    def reset(self) -> None:
        """Clear the request window."""
        with self._lock:
            self._window.clear()

    def __len__(self) -> int:
        return len(self._window)
