"""
Resilience layer - admission control, circuit breaking, retry and
graceful degradation for AI service calls.
"""

from interview_ai.resilience.cancel import (
    CancelReason,
    CancelState,
    CancelToken,
    cancellable_sleep,
    run_cancellable,
)
from interview_ai.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from interview_ai.resilience.clock import Clock, monotonic_ms
from interview_ai.resilience.orchestrator import (
    CallOptions,
    DegradationOrchestrator,
    mark_degraded,
)
from interview_ai.resilience.rate_limiter import (
    AdmissionResult,
    RateLimiter,
    RateLimiterConfig,
)
from interview_ai.resilience.registry import (
    DEFAULT_SERVICE,
    ResilienceConfig,
    ResilienceRegistry,
    ScheduledReset,
    ServiceState,
    interview_retry_defaults,
    resume_retry_defaults,
)
from interview_ai.resilience.retry import (
    RetryConfig,
    RetryExecutor,
    default_retry_condition,
)
from interview_ai.resilience.signals import (
    CircuitBreakerSnapshot,
    RateLimiterSnapshot,
    ServiceStatus,
    ThrottleSnapshot,
)
from interview_ai.resilience.throttle import (
    AdaptiveThrottle,
    ThrottleConfig,
    ThrottleDecision,
)

__all__ = [
    # Cancellation
    "CancelReason",
    "CancelState",
    "CancelToken",
    "cancellable_sleep",
    "run_cancellable",
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    # Clock
    "Clock",
    "monotonic_ms",
    # Orchestrator
    "CallOptions",
    "DegradationOrchestrator",
    "mark_degraded",
    # Rate limiter
    "AdmissionResult",
    "RateLimiter",
    "RateLimiterConfig",
    # Registry
    "DEFAULT_SERVICE",
    "ResilienceConfig",
    "ResilienceRegistry",
    "ScheduledReset",
    "ServiceState",
    "interview_retry_defaults",
    "resume_retry_defaults",
    # Retry
    "RetryConfig",
    "RetryExecutor",
    "default_retry_condition",
    # Signals
    "CircuitBreakerSnapshot",
    "RateLimiterSnapshot",
    "ServiceStatus",
    "ThrottleSnapshot",
    # Throttle
    "AdaptiveThrottle",
    "ThrottleConfig",
    "ThrottleDecision",
]
