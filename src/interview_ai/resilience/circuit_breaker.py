"""
Circuit breaker for fault isolation.

Implements the circuit breaker pattern with three states:
- Closed: Normal operation, requests pass through
- Open: Circuit tripped, requests fail fast
- Half-Open: A single trial call tests whether the service recovered
"""

from __future__ import annotations

import asyncio
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from interview_ai.errors import CircuitOpenError, ErrorKind, classify
from interview_ai.resilience.clock import Clock, monotonic_ms
from interview_ai.resilience.signals import CircuitBreakerSnapshot
from interview_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("interview_ai.resilience.circuit_breaker")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker.

    Attributes:
        failure_threshold: Number of failures to trip the circuit
        reset_timeout_ms: Time after the last failure before a trial call
        monitoring_interval_ms: Period of the counter reset
    """

    failure_threshold: int = 5
    reset_timeout_ms: float = 60_000.0
    monitoring_interval_ms: float = 300_000.0

    @classmethod
    def default(cls) -> CircuitBreakerConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> CircuitBreakerConfig:
        """Create configuration from environment variables."""
        failure_threshold = int(
            os.getenv("INTERVIEW_AI_BREAKER_FAILURE_THRESHOLD", "5")
        )
        reset_timeout_ms = float(
            os.getenv("INTERVIEW_AI_BREAKER_RESET_TIMEOUT_MS", "60000")
        )

        return cls(
            failure_threshold=failure_threshold,
            reset_timeout_ms=reset_timeout_ms,
        )


class CircuitBreaker:
    """Circuit breaker guarding the transport call.

    State is mutated under a ``threading.Lock`` that is released before the
    guarded operation is awaited.

    Example:
        >>> breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=3))
        >>> try:
        ...     result = await breaker.execute(async_operation)
        ... except CircuitOpenError:
        ...     print("Service unavailable")
    """

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        """Initialize circuit breaker.

        Args:
            config: Circuit breaker configuration
            clock: Monotonic clock returning milliseconds
        """
        self._config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

        self._failure_count = 0
        self._success_count = 0
        self._request_count = 0
        self._last_failure_time: float | None = None

        # Set while the single half-open trial call is in flight
        self._trial_in_flight = False

    @property
    def config(self) -> CircuitBreakerConfig:
        """Get breaker configuration."""
        return self._config

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        return self._state

    @property
    def is_closed(self) -> bool:
        """Check if circuit is closed (normal operation)."""
        return self._state == CircuitState.CLOSED

    @property
    def is_open(self) -> bool:
        """Check if circuit is open (failing fast)."""
        return self._state == CircuitState.OPEN

    @property
    def is_half_open(self) -> bool:
        """Check if circuit is half-open (testing)."""
        return self._state == CircuitState.HALF_OPEN

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _transition_to(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return

        old_state = self._state
        self._state = new_state

        if new_state == CircuitState.CLOSED:
            self._failure_count = 0
            logger.info("Circuit breaker closed", previous_state=old_state.value)
        elif new_state == CircuitState.OPEN:
            logger.warning(
                "Circuit breaker opened",
                previous_state=old_state.value,
                failure_count=self._failure_count,
            )
        else:
            logger.info("Circuit breaker half-open, admitting trial call")

    def _time_until_retry(self, now: float) -> float | None:
        if self._state != CircuitState.OPEN or self._last_failure_time is None:
            return None
        elapsed = now - self._last_failure_time
        return max(0.0, self._config.reset_timeout_ms - elapsed)

    def _admit(self) -> bool:
        """Admit a call or raise CircuitOpenError.

        Returns:
            True when the admitted call is the half-open trial
        """
        with self._lock:
            now = self._clock()
            self._request_count += 1

            if self._state == CircuitState.OPEN:
                remaining = self._time_until_retry(now)
                if remaining is not None and remaining > 0:
                    raise CircuitOpenError(retry_after_ms=remaining)
                self._transition_to(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitOpenError(
                        "AI service circuit breaker is testing recovery",
                        retry_after_ms=None,
                    )
                self._trial_in_flight = True
                return True

            return False

    def _record_success(self) -> None:
        with self._lock:
            self._success_count += 1
            self._trial_in_flight = False
            if self._state == CircuitState.HALF_OPEN:
                self._transition_to(CircuitState.CLOSED)

    def _record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()
            self._trial_in_flight = False

            if self._state == CircuitState.HALF_OPEN:
                # Single failure in half-open trips back to open
                self._transition_to(CircuitState.OPEN)
            elif (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self._config.failure_threshold
            ):
                self._transition_to(CircuitState.OPEN)

    def _release_trial(self) -> None:
        with self._lock:
            self._trial_in_flight = False

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute an operation through the circuit breaker.

        Args:
            operation: Async operation to execute

        Returns:
            Operation result

        Raises:
            CircuitOpenError: If the circuit rejects the call
        """
        self._admit()

        try:
            result = await operation()
        except asyncio.CancelledError:
            self._release_trial()
            raise
        except Exception as e:
            if classify(e) == ErrorKind.CANCELLED:
                self._release_trial()
            else:
                self._record_failure()
            raise

        self._record_success()
        return result

    def reset_counters(self) -> None:
        """Zero the monitoring-interval counters.

        The failure count is only cleared while closed, so an open or
        half-open breaker keeps its state.
        """
        with self._lock:
            self._request_count = 0
            self._success_count = 0
            if self._state == CircuitState.CLOSED:
                self._failure_count = 0
        logger.debug("Circuit breaker counters reset", state=self._state.value)

    def snapshot(self) -> CircuitBreakerSnapshot:
        """Get current breaker state."""
        with self._lock:
            now = self._clock()
            return CircuitBreakerSnapshot(
                state=self._state.value,
                failure_count=self._failure_count,
                failure_threshold=self._config.failure_threshold,
                success_count=self._success_count,
                request_count=self._request_count,
                last_failure_time=self._last_failure_time,
                cooldown_remaining_ms=self._time_until_retry(now),
            )

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(state={self._state.value}, "
            f"failures={self._failure_count}/{self._config.failure_threshold})"
        )
