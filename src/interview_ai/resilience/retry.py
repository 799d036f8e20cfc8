"""
Retry policy with exponential backoff and jitter.

Failures are classified before every retry decision; a fixed set of kinds is
never retried regardless of the configured retry condition.
"""

from __future__ import annotations

import asyncio
import os
import random
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, TypeVar

from interview_ai.errors import (
    DEFAULT_RETRYABLE_KINDS,
    NON_RETRYABLE_KINDS,
    classify,
    extract_retry_after_ms,
)
from interview_ai.resilience.cancel import CancelToken, cancellable_sleep
from interview_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("interview_ai.resilience.retry")


def default_retry_condition(error: BaseException) -> bool:
    """Retry transient failures: timeouts, network, server and rate limits."""
    return classify(error) in DEFAULT_RETRYABLE_KINDS


@dataclass
class RetryConfig:
    """Configuration for retry policy.

    Attributes:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay_ms: Delay before the first retry in milliseconds
        max_delay_ms: Upper bound for the exponential delay
        backoff_factor: Growth factor per attempt
        jitter_factor: Fraction of the delay added as random jitter
        retry_condition: Predicate deciding whether an error is retried
    """

    max_retries: int = 3
    base_delay_ms: float = 1000.0
    max_delay_ms: float = 30_000.0
    backoff_factor: float = 2.0
    jitter_factor: float = 0.1
    retry_condition: Callable[[BaseException], bool] = field(
        default=default_retry_condition
    )

    @classmethod
    def default(cls) -> RetryConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(
        cls, prefix: str = "INTERVIEW_AI_", defaults: RetryConfig | None = None
    ) -> RetryConfig:
        """Create configuration from environment variables.

        Args:
            prefix: Variable prefix, e.g. ``INTERVIEW_AI_RESUME_`` for a
                per-service policy
            defaults: Values used for unset variables
        """
        base = defaults or cls()
        return replace(
            base,
            max_retries=int(os.getenv(f"{prefix}MAX_RETRIES", str(base.max_retries))),
            base_delay_ms=float(
                os.getenv(f"{prefix}RETRY_BASE_DELAY_MS", str(base.base_delay_ms))
            ),
            max_delay_ms=float(os.getenv(f"{prefix}RETRY_MAX_DELAY_MS", str(base.max_delay_ms))),
            backoff_factor=float(
                os.getenv(f"{prefix}RETRY_BACKOFF_FACTOR", str(base.backoff_factor))
            ),
        )

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that disables retries."""
        return cls(max_retries=0)


class RetryExecutor:
    """Sequential retry loop with exponential backoff.

    Example:
        >>> executor = RetryExecutor()
        >>> result = await executor.run(call_service, RetryConfig(max_retries=2))
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        """Initialize retry executor.

        Args:
            sleep: Sleep function taking seconds
            rng: Source of jitter in [0, 1)
        """
        self._sleep = sleep
        self._rng = rng

    @staticmethod
    def calculate_base_delay(attempt: int, policy: RetryConfig) -> float:
        """Exponential delay for ``attempt`` (0-based) before jitter, in ms."""
        try:
            delay = policy.base_delay_ms * (policy.backoff_factor ** attempt)
        except OverflowError:
            return policy.max_delay_ms
        return min(delay, policy.max_delay_ms)

    def calculate_delay(
        self,
        attempt: int,
        policy: RetryConfig,
        retry_after_ms: float | None = None,
    ) -> float:
        """Calculate delay for a retry attempt.

        Args:
            attempt: Current attempt number (0-based)
            policy: Retry configuration
            retry_after_ms: Optional reset hint from the server or limiter

        Returns:
            Delay in milliseconds
        """
        delay = self.calculate_base_delay(attempt, policy)
        delay += delay * policy.jitter_factor * self._rng()

        # Never retry before the server said it is ready
        if retry_after_ms is not None and retry_after_ms > delay:
            delay = retry_after_ms

        return delay

    @staticmethod
    def should_retry(error: BaseException, attempt: int, policy: RetryConfig) -> bool:
        """Check if an error should trigger a retry.

        Args:
            error: The exception that occurred
            attempt: Current attempt number (0-based)
            policy: Retry configuration

        Returns:
            True if should retry
        """
        if attempt >= policy.max_retries:
            return False
        if classify(error) in NON_RETRYABLE_KINDS:
            return False
        return bool(policy.retry_condition(error))

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryConfig | None = None,
        cancel_token: CancelToken | None = None,
    ) -> T:
        """Execute an operation with retry, raising the last error on failure.

        Args:
            operation: Async operation to execute
            policy: Retry configuration
            cancel_token: Aborts the backoff sleep and skips further attempts

        Returns:
            Operation result
        """
        policy = policy or RetryConfig()
        attempt = 0

        while True:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            try:
                return await operation()
            except Exception as e:
                if not self.should_retry(e, attempt, policy):
                    raise

                delay_ms = self.calculate_delay(
                    attempt, policy, extract_retry_after_ms(e)
                )
                logger.warning(
                    "AI request failed, retrying",
                    attempt=attempt + 1,
                    max_retries=policy.max_retries,
                    delay_ms=round(delay_ms),
                    error_kind=classify(e).value,
                )
                await cancellable_sleep(delay_ms, cancel_token, self._sleep)
                attempt += 1
