"""
Resilience signals and snapshots.

Point-in-time views of limiter, throttle and breaker state, aggregated per
service for the administrative status surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RateLimiterSnapshot:
    """Snapshot of sliding-window state.

    Attributes:
        limit: Requests admitted per window
        remaining: Slots left in the current window
        window_ms: Window length
        reset_ms: Time until the oldest entry leaves the window
    """

    limit: int
    remaining: int
    window_ms: float
    reset_ms: float = 0.0

    @property
    def is_throttled(self) -> bool:
        """Whether the window is full."""
        return self.remaining <= 0

    @property
    def utilization(self) -> float:
        """Get utilization ratio (0.0 to 1.0)."""
        if self.limit <= 0:
            return 1.0
        return (self.limit - self.remaining) / self.limit

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "window_ms": self.window_ms,
            "reset_ms": self.reset_ms,
            "is_throttled": self.is_throttled,
            "utilization": self.utilization,
        }


@dataclass
class ThrottleSnapshot:
    """Snapshot of adaptive throttle state.

    Attributes:
        consecutive_failures: Failures since the last success
        blocked: Whether admission is currently blocked
        blocked_until: Monotonic end of the block window, if set
        retry_after_ms: Time left in the block window
        last_failure_time: Monotonic time of the last failure
    """

    consecutive_failures: int
    blocked: bool
    blocked_until: float | None = None
    retry_after_ms: float = 0.0
    last_failure_time: float | None = None

    @property
    def escalating(self) -> bool:
        """Whether any failure is currently being tracked."""
        return self.consecutive_failures > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "consecutive_failures": self.consecutive_failures,
            "blocked": self.blocked,
            "blocked_until": self.blocked_until,
            "retry_after_ms": self.retry_after_ms,
            "last_failure_time": self.last_failure_time,
            "escalating": self.escalating,
        }


@dataclass
class CircuitBreakerSnapshot:
    """Snapshot of circuit breaker state.

    Attributes:
        state: Current state (closed, open, half_open)
        failure_count: Failures in the current monitoring interval
        failure_threshold: Threshold for opening
        success_count: Successes in the current monitoring interval
        request_count: Calls in the current monitoring interval
        last_failure_time: Monotonic time of the last failure
        cooldown_remaining_ms: Time until a trial call is allowed
    """

    state: str
    failure_count: int
    failure_threshold: int
    success_count: int = 0
    request_count: int = 0
    last_failure_time: float | None = None
    cooldown_remaining_ms: float | None = None

    @property
    def is_open(self) -> bool:
        """Check if circuit is open."""
        return self.state == "open"

    @property
    def is_closed(self) -> bool:
        """Check if circuit is closed."""
        return self.state == "closed"

    @property
    def is_half_open(self) -> bool:
        """Check if circuit is half-open."""
        return self.state == "half_open"

    @property
    def failure_rate(self) -> float:
        """Failures per call in the current monitoring interval.

        An open breaker keeps its failure count across a counter reset, so
        the rate is capped at 1.0.
        """
        if self.request_count == 0:
            return 0.0
        return min(1.0, self.failure_count / self.request_count)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "state": self.state,
            "failure_count": self.failure_count,
            "failure_threshold": self.failure_threshold,
            "success_count": self.success_count,
            "request_count": self.request_count,
            "failure_rate": self.failure_rate,
            "last_failure_time": self.last_failure_time,
            "cooldown_remaining_ms": self.cooldown_remaining_ms,
        }


@dataclass
class ServiceStatus:
    """Aggregated resilience state for one service endpoint."""

    service: str
    rate_limit: RateLimiterSnapshot
    throttle: ThrottleSnapshot
    circuit_breaker: CircuitBreakerSnapshot

    @property
    def status(self) -> str:
        """'operational' when calls would be admitted, else 'degraded'."""
        if (
            self.circuit_breaker.is_open
            or self.throttle.blocked
            or self.rate_limit.is_throttled
        ):
            return "degraded"
        return "operational"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "service": self.service,
            "status": self.status,
            "rate_limit": self.rate_limit.to_dict(),
            "throttle": self.throttle.to_dict(),
            "circuit_breaker": self.circuit_breaker.to_dict(),
        }
