"""
Per-service resilience state.

Owns one rate limiter, adaptive throttle and circuit breaker per service
endpoint, plus the periodic breaker counter reset.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from interview_ai.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from interview_ai.resilience.clock import Clock, monotonic_ms
from interview_ai.resilience.rate_limiter import RateLimiter, RateLimiterConfig
from interview_ai.resilience.retry import RetryConfig
from interview_ai.resilience.signals import ServiceStatus
from interview_ai.resilience.throttle import AdaptiveThrottle, ThrottleConfig
from interview_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = get_logger("interview_ai.resilience.registry")

DEFAULT_SERVICE = "default"


def resume_retry_defaults() -> RetryConfig:
    """Resume analysis: 2 retries starting at 1 s."""
    return RetryConfig(max_retries=2, base_delay_ms=1000.0, backoff_factor=2.0)


def interview_retry_defaults() -> RetryConfig:
    """Question generation: 2 retries starting at 800 ms."""
    return RetryConfig(max_retries=2, base_delay_ms=800.0, backoff_factor=2.0)


@dataclass
class ResilienceConfig:
    """Combined resilience configuration.

    Attributes:
        rate_limiter: Sliding-window admission settings
        throttle: Failure-driven cooldown settings
        circuit_breaker: Breaker thresholds and monitoring interval
        retry: Retry policy for services without their own
        resume_retry: Retry policy for resume analysis
        interview_retry: Retry policy for interview questions
    """

    rate_limiter: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    resume_retry: RetryConfig = field(default_factory=resume_retry_defaults)
    interview_retry: RetryConfig = field(default_factory=interview_retry_defaults)

    @classmethod
    def default(cls) -> ResilienceConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> ResilienceConfig:
        """Create configuration from environment variables.

        ``INTERVIEW_AI_MAX_RETRIES`` and friends apply to every service;
        ``INTERVIEW_AI_RESUME_*`` and ``INTERVIEW_AI_INTERVIEW_*`` override
        them per service.
        """
        return cls(
            rate_limiter=RateLimiterConfig.from_env(),
            throttle=ThrottleConfig.from_env(),
            circuit_breaker=CircuitBreakerConfig.from_env(),
            retry=RetryConfig.from_env(),
            resume_retry=RetryConfig.from_env(
                "INTERVIEW_AI_RESUME_",
                RetryConfig.from_env(defaults=resume_retry_defaults()),
            ),
            interview_retry=RetryConfig.from_env(
                "INTERVIEW_AI_INTERVIEW_",
                RetryConfig.from_env(defaults=interview_retry_defaults()),
            ),
        )


@dataclass
class ServiceState:
    """Resilience state bundle for one service endpoint."""

    name: str
    limiter: RateLimiter
    throttle: AdaptiveThrottle
    breaker: CircuitBreaker


class ScheduledReset:
    """Handle for the periodic breaker counter reset task."""

    def __init__(self, task: asyncio.Task[None]) -> None:
        self._task = task

    @property
    def running(self) -> bool:
        return not self._task.done()

    def cancel(self) -> bool:
        """Stop the periodic reset.

        Returns:
            True if the task was still running
        """
        return self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait for the task to finish after cancel()."""
        await asyncio.gather(self._task, return_exceptions=True)


class ResilienceRegistry:
    """Registry of per-service resilience state.

    Example:
        >>> registry = ResilienceRegistry(ResilienceConfig.default())
        >>> handle = registry.start()
        >>> state = registry.get("resume-analysis")
        >>> await registry.aclose()
    """

    def __init__(
        self,
        config: ResilienceConfig | None = None,
        clock: Clock = monotonic_ms,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize registry.

        Args:
            config: Configuration applied to every service created lazily
            clock: Monotonic clock returning milliseconds
            sleep: Sleep function taking seconds, used by the periodic reset
        """
        self._config = config or ResilienceConfig()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._services: dict[str, ServiceState] = {}
        self._reset_handle: ScheduledReset | None = None

    @property
    def config(self) -> ResilienceConfig:
        """Get resilience configuration."""
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    def get(self, service: str = DEFAULT_SERVICE) -> ServiceState:
        """Get the state bundle for ``service``, creating it on first use."""
        with self._lock:
            state = self._services.get(service)
            if state is None:
                state = ServiceState(
                    name=service,
                    limiter=RateLimiter(self._config.rate_limiter, self._clock),
                    throttle=AdaptiveThrottle(self._config.throttle, self._clock),
                    breaker=CircuitBreaker(self._config.circuit_breaker, self._clock),
                )
                self._services[service] = state
            return state

    def services(self) -> list[str]:
        """Names of services with state."""
        with self._lock:
            return list(self._services)

    def start(self) -> ScheduledReset:
        """Schedule the periodic breaker counter reset on the running loop.

        Calling start() again while the task is running returns the same
        handle.

        Returns:
            Cancellable handle for the reset task
        """
        if self._reset_handle is not None and self._reset_handle.running:
            return self._reset_handle

        interval_s = self._config.circuit_breaker.monitoring_interval_ms / 1000.0

        async def reset_loop() -> None:
            while True:
                await self._sleep(interval_s)
                self.run_counter_reset()

        task = asyncio.get_running_loop().create_task(reset_loop())
        self._reset_handle = ScheduledReset(task)
        logger.debug("Scheduled breaker counter reset", interval_s=interval_s)
        return self._reset_handle

    def run_counter_reset(self) -> None:
        """Zero the breaker counters of every service."""
        with self._lock:
            states = list(self._services.values())
        for state in states:
            state.breaker.reset_counters()

    async def aclose(self) -> None:
        """Cancel the periodic reset task."""
        handle = self._reset_handle
        self._reset_handle = None
        if handle is not None:
            handle.cancel()
            await handle.wait_closed()

    def status(self, service: str = DEFAULT_SERVICE) -> ServiceStatus:
        """Get a point-in-time status for ``service``."""
        state = self.get(service)
        return ServiceStatus(
            service=service,
            rate_limit=state.limiter.snapshot(),
            throttle=state.throttle.snapshot(),
            circuit_breaker=state.breaker.snapshot(),
        )

    def reset(self, service: str | None = None) -> None:
        """Clear rate-limit and throttle state.

        The circuit breaker is left alone; it only closes after a successful
        trial call.

        Args:
            service: Service to reset, or None for all services
        """
        if service is None:
            names = self.services()
        else:
            names = [service]
        for name in names:
            state = self.get(name)
            state.limiter.reset()
            state.throttle.reset()
        logger.info("Rate limit state reset", services=names)
