"""
Adaptive throttle.

Blocks admission for an exponentially growing cooldown once consecutive
failures reach an escalation threshold. Works independently of the circuit
breaker, so admission can be throttled while the breaker is still closed.
"""

from __future__ import annotations

import math
import os
import threading
from dataclasses import dataclass

from interview_ai.resilience.clock import Clock, monotonic_ms
from interview_ai.resilience.signals import ThrottleSnapshot
from interview_ai.telemetry import get_logger

logger = get_logger("interview_ai.resilience.throttle")


@dataclass
class ThrottleConfig:
    """Configuration for adaptive throttling.

    Attributes:
        failure_escalation_threshold: Consecutive failures before blocking
        base_cooldown_ms: Cooldown at the threshold, doubled per further failure
        max_backoff_ms: Upper bound for the cooldown
    """

    failure_escalation_threshold: int = 3
    base_cooldown_ms: float = 1000.0
    max_backoff_ms: float = 300_000.0

    @classmethod
    def from_env(cls) -> ThrottleConfig:
        """Create configuration from environment variables."""
        return cls(
            failure_escalation_threshold=int(
                os.getenv("INTERVIEW_AI_THROTTLE_THRESHOLD", "3")
            ),
            max_backoff_ms=float(os.getenv("INTERVIEW_AI_THROTTLE_MAX_BACKOFF_MS", "300000")),
        )


@dataclass
class ThrottleDecision:
    """Result of a block check."""

    blocked: bool
    retry_after_ms: float = 0.0


class AdaptiveThrottle:
    """Failure-driven admission cooldown.

    Example:
        >>> throttle = AdaptiveThrottle(ThrottleConfig(failure_escalation_threshold=3))
        >>> for _ in range(3):
        ...     throttle.record_failure()
        >>> throttle.is_blocked().blocked
        True
    """

    def __init__(
        self,
        config: ThrottleConfig | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._config = config or ThrottleConfig()
        self._clock = clock
        self._lock = threading.Lock()

        self._consecutive_failures = 0
        self._blocked_until: float | None = None
        self._last_failure_time: float | None = None

    @property
    def consecutive_failures(self) -> int:
        """Failures since the last success."""
        return self._consecutive_failures

    @property
    def blocked_until(self) -> float | None:
        """Monotonic end of the block window, if one was set."""
        return self._blocked_until

    def cooldown_ms(self, failures: int) -> float:
        """Cooldown applied after ``failures`` consecutive failures."""
        exponent = failures - self._config.failure_escalation_threshold
        if exponent < 0:
            return 0.0
        # Avoid float overflow for long failure streaks
        if exponent > 64:
            return self._config.max_backoff_ms
        return min(
            self._config.base_cooldown_ms * math.pow(2, exponent),
            self._config.max_backoff_ms,
        )

    def record_failure(self, now: float | None = None) -> None:
        """Record a failed request, escalating the block window if needed."""
        with self._lock:
            now = self._clock() if now is None else now
            self._consecutive_failures += 1
            self._last_failure_time = now

            if self._consecutive_failures >= self._config.failure_escalation_threshold:
                cooldown = self.cooldown_ms(self._consecutive_failures)
                self._blocked_until = now + cooldown
                logger.warning(
                    "AI service temporarily blocked after consecutive failures",
                    consecutive_failures=self._consecutive_failures,
                    cooldown_ms=cooldown,
                )

    def record_success(self) -> None:
        """Record a successful request, clearing the failure streak."""
        with self._lock:
            self._consecutive_failures = 0
            self._blocked_until = None
            self._last_failure_time = None

    def is_blocked(self, now: float | None = None) -> ThrottleDecision:
        """Check whether admission is currently blocked."""
        with self._lock:
            now = self._clock() if now is None else now
            if self._blocked_until is not None and now < self._blocked_until:
                return ThrottleDecision(blocked=True, retry_after_ms=self._blocked_until - now)
            return ThrottleDecision(blocked=False)

    def snapshot(self, now: float | None = None) -> ThrottleSnapshot:
        """Get current throttle state."""
        decision = self.is_blocked(now)
        with self._lock:
            return ThrottleSnapshot(
                consecutive_failures=self._consecutive_failures,
                blocked=decision.blocked,
                blocked_until=self._blocked_until,
                retry_after_ms=decision.retry_after_ms,
                last_failure_time=self._last_failure_time,
            )

    def reset(self) -> None:
        """Clear failure history and any block window."""
        self.record_success()
