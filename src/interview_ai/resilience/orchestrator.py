"""
Graceful degradation orchestrator.

Composes admission control, circuit breaker, retry and response sanitizing
around a single transport operation, and falls back to a lower-fidelity
result when the call fails for good.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from interview_ai.errors import ErrorEnvelope, ErrorKind, classify
from interview_ai.resilience.cancel import CancelToken, run_cancellable
from interview_ai.resilience.registry import DEFAULT_SERVICE, ResilienceRegistry, ServiceState
from interview_ai.resilience.retry import RetryConfig, RetryExecutor
from interview_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("interview_ai.resilience.orchestrator")

# Failures a fallback must not paper over
_NON_DEGRADABLE_KINDS = frozenset({ErrorKind.VALIDATION_ERROR, ErrorKind.CANCELLED})


@dataclass
class CallOptions:
    """Per-call resilience options.

    Attributes:
        use_circuit_breaker: Route the call through the service breaker
        retry: Retry policy (defaults to the registry's policy)
        fallback: Async producer of a degraded result
        sanitizer: Normalizes the raw payload; raises a validation envelope
        cancel_token: Aborts the in-flight call and any backoff sleep
        context: Extra fields attached to log records
    """

    use_circuit_breaker: bool = True
    retry: RetryConfig | None = None
    fallback: Callable[[], Awaitable[Any]] | None = None
    sanitizer: Callable[[Any], Any] | None = None
    cancel_token: CancelToken | None = None
    context: dict[str, Any] = field(default_factory=dict)


def mark_degraded(result: Any, kind: ErrorKind) -> Any:
    """Tag a fallback result as degraded.

    Args:
        result: Pydantic model or dict produced by a fallback
        kind: Kind of the failure that triggered the fallback

    Returns:
        Copy of ``result`` with ``degraded`` and ``degraded_reason`` set
    """
    update = {"degraded": True, "degraded_reason": kind.value}
    if isinstance(result, BaseModel):
        return result.model_copy(update=update)
    if isinstance(result, dict):
        return {**result, **update}
    raise TypeError(
        f"Fallback result must be a pydantic model or dict, got {type(result).__name__}"
    )


class DegradationOrchestrator:
    """Runs operations through the full resilience pipeline.

    Order of evaluation: adaptive throttle, rate limiter, circuit breaker,
    retry loop, the operation itself, then the sanitizer. Admission denials
    are raised as envelopes; they are never degraded.

    Example:
        >>> orchestrator = DegradationOrchestrator(ResilienceRegistry())
        >>> result = await orchestrator.call(
        ...     send_request,
        ...     CallOptions(sanitizer=sanitize, fallback=mock_response),
        ...     service="resume-analysis",
        ... )
    """

    def __init__(
        self,
        registry: ResilienceRegistry,
        retry_executor: RetryExecutor | None = None,
    ) -> None:
        self._registry = registry
        self._retry = retry_executor or RetryExecutor()

    @property
    def registry(self) -> ResilienceRegistry:
        return self._registry

    async def call(
        self,
        operation: Callable[[], Awaitable[Any]],
        options: CallOptions | None = None,
        *,
        service: str = DEFAULT_SERVICE,
    ) -> Any:
        """Execute ``operation`` with admission, breaker, retry and fallback.

        Args:
            operation: Async operation performing one transport attempt
            options: Per-call options
            service: Name of the service whose state guards the call

        Returns:
            Sanitized result, or a degraded fallback result

        Raises:
            ErrorEnvelope: Classified terminal failure
        """
        options = options or CallOptions()
        state = self._registry.get(service)

        self._admit(state, options)

        try:
            raw = await self._execute(state, operation, options)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            envelope = ErrorEnvelope.from_exception(
                e, has_fallback=options.fallback is not None
            )
            return await self._degrade(envelope, options, service)

        if options.sanitizer is None:
            return raw
        return options.sanitizer(raw)

    def _admit(self, state: ServiceState, options: CallOptions) -> None:
        decision = state.throttle.is_blocked()
        if decision.blocked:
            logger.warning(
                "Request blocked by adaptive throttle",
                service=state.name,
                retry_after_ms=round(decision.retry_after_ms),
                **options.context,
            )
            raise ErrorEnvelope.build(
                ErrorKind.ADAPTIVE_THROTTLED,
                retry_after_ms=decision.retry_after_ms,
                detail="AI service temporarily blocked due to repeated failures",
            )

        admission = state.limiter.try_admit()
        if not admission.allowed:
            logger.warning(
                "Rate limit exceeded",
                service=state.name,
                retry_after_ms=round(admission.retry_after_ms),
                **options.context,
            )
            raise ErrorEnvelope.build(
                ErrorKind.RATE_LIMIT_EXCEEDED,
                retry_after_ms=admission.retry_after_ms,
                detail="Rate limit exceeded",
            )

    async def _execute(
        self,
        state: ServiceState,
        operation: Callable[[], Awaitable[Any]],
        options: CallOptions,
    ) -> Any:
        token = options.cancel_token
        policy = options.retry or self._registry.config.retry

        async def attempt() -> Any:
            try:
                result = await run_cancellable(operation, token)
            except Exception as e:
                if classify(e) != ErrorKind.CANCELLED:
                    state.throttle.record_failure()
                raise
            state.throttle.record_success()
            return result

        async def with_retry() -> Any:
            return await self._retry.run(attempt, policy, token)

        if options.use_circuit_breaker:
            return await state.breaker.execute(with_retry)
        return await with_retry()

    async def _degrade(
        self,
        envelope: ErrorEnvelope,
        options: CallOptions,
        service: str,
    ) -> Any:
        if options.fallback is None or envelope.kind in _NON_DEGRADABLE_KINDS:
            logger.error(
                "AI request failed",
                service=service,
                error_kind=envelope.kind.value,
                severity=envelope.severity.value,
                **options.context,
            )
            raise envelope

        logger.warning(
            "AI request failed, using fallback response",
            service=service,
            error_kind=envelope.kind.value,
            **options.context,
        )
        try:
            result = await options.fallback()
            if options.sanitizer is not None:
                result = options.sanitizer(result)
            return mark_degraded(result, envelope.kind)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(
                "Fallback failed",
                service=service,
                error_kind=envelope.kind.value,
                **options.context,
            )
            raise envelope from envelope.cause
