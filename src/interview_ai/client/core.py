"""
Core InterviewAiClient implementation.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from interview_ai.config import ServiceConfig
from interview_ai.errors import ErrorEnvelope, ErrorKind, RemoteError
from interview_ai.resilience import (
    CallOptions,
    CancelToken,
    DegradationOrchestrator,
    ResilienceRegistry,
    RetryConfig,
    RetryExecutor,
    monotonic_ms,
)
from interview_ai.services import (
    HEALTH_CHECK_ENDPOINT,
    INTERVIEW_QUESTION_ENDPOINT,
    PLACEHOLDER_ANSWER,
    RATE_RESUME_ENDPOINT,
    MockResponder,
    calculate_difficulty,
    format_interview_request,
    format_resume_request,
)
from interview_ai.services import interview as interview_service
from interview_ai.services import resume as resume_service
from interview_ai.telemetry import configure_logging, get_logger, operation_context
from interview_ai.transport import HttpTransport, Transport
from interview_ai.types import (
    BatchAnalysisResult,
    BatchItemError,
    BatchSummary,
    HealthStatus,
    HistoryEntry,
    InterviewQuestion,
    ProfileSummary,
    QuestionSet,
    QuestionSetMetadata,
    QuestionSuggestions,
    ResumeAnalysis,
    SuggestionGroup,
)
from interview_ai.validation import (
    VALID_ROLES,
    VALID_SESSION_TYPES,
    sanitize_interview_question,
    sanitize_resume_analysis,
    validate_interview_request,
    validate_resume_request,
)
from interview_ai.validation.responses import generate_id, utc_timestamp

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from interview_ai.resilience import Clock

logger = get_logger("interview_ai.client")

HEALTH_SERVICE = "health"
HEALTH_STATUS_FIELDS = frozenset({"status", "timestamp", "error"})
MAX_BATCH_SIZE = 10
MAX_QUESTION_COUNT = 20
QUESTION_PACING_MS = 200.0
DEFAULT_SUGGESTION_ROLE = "Software Engineer"


def _profile_field(profile: Mapping[str, Any], name: str, alias: str) -> str | None:
    value = profile.get(name, profile.get(alias))
    return value if isinstance(value, str) and value else None


class InterviewAiClient:
    """Resilient client for the interview-preparation AI service.

    Every call is validated, admitted by the rate limiter and adaptive
    throttle, guarded by the circuit breaker, retried with backoff and
    sanitized. When ``mock_fallback`` is enabled, calls that fail for good
    return an offline result tagged ``degraded=True``. Constructing a client
    routes package logs according to ``debug`` and ``log_format``.

    Example:
        >>> async with InterviewAiClient(ServiceConfig.from_env()) as client:
        ...     analysis = await client.analyze_resume(resume_text, job_description)
        ...     print(analysis.match_score, analysis.degraded)
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        transport: Transport | None = None,
        registry: ResilienceRegistry | None = None,
        retry_executor: RetryExecutor | None = None,
        mock: MockResponder | None = None,
        clock: Clock = monotonic_ms,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            config: Service configuration (defaults to ServiceConfig())
            transport: Outbound transport (defaults to HttpTransport)
            registry: Per-service resilience state
            retry_executor: Retry loop (inject a fake sleep in tests)
            mock: Fallback producer
            clock: Monotonic clock returning milliseconds
            sleep: Sleep function taking seconds, used between generated questions
        """
        self._config = config or ServiceConfig()
        configure_logging(
            debug=self._config.debug,
            format=self._config.log_format,
            secrets=(self._config.api_key,),
        )
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpTransport(self._config.base_url)
        self._registry = registry or ResilienceRegistry(
            self._config.resilience, clock=clock, sleep=sleep
        )
        self._orchestrator = DegradationOrchestrator(
            self._registry, retry_executor or RetryExecutor(sleep=sleep)
        )
        self._mock = mock or MockResponder()
        self._sleep = sleep

    @classmethod
    def from_env(cls, **kwargs: Any) -> InterviewAiClient:
        """Create a client configured from ``INTERVIEW_AI_*`` variables."""
        return cls(ServiceConfig.from_env(), **kwargs)

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def registry(self) -> ResilienceRegistry:
        """Per-service resilience state."""
        return self._registry

    def _headers(self, request_id: str) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"{self._config.app_name}/{self._config.app_version}",
            "X-Request-ID": request_id,
        }
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def _send(
        self,
        endpoint: str,
        method: str,
        body: dict[str, Any] | None,
        request_id: str,
    ) -> Any:
        """Perform one transport attempt.

        Raises:
            RemoteError: On a 4xx/5xx response
        """
        response = await self._transport.send(
            endpoint,
            method,
            body,
            self._headers(request_id),
            self._config.timeout_ms,
        )
        if response.status_code >= 400:
            raise RemoteError.from_response(
                response.status_code,
                response.body if isinstance(response.body, dict) else None,
                response.headers,
            )
        return response.body

    def _fallback_enabled(self, disable_fallback: bool) -> bool:
        return self._config.mock_fallback and not disable_fallback

    async def analyze_resume(
        self,
        resume_text: str,
        job_description_text: str,
        *,
        priority: str | None = None,
        analysis_depth: str | None = None,
        disable_fallback: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> ResumeAnalysis:
        """Score a resume against a job description.

        Args:
            resume_text: Resume text (50-50,000 characters)
            job_description_text: Job description (20-10,000 characters)
            priority: Optional priority hint forwarded to the service
            analysis_depth: Optional depth hint forwarded to the service
            disable_fallback: Raise instead of returning a mock result
            cancel_token: Aborts the call and any pending retry

        Returns:
            Sanitized ResumeAnalysis, possibly degraded

        Raises:
            ErrorEnvelope: Classified failure
        """
        validation = validate_resume_request(
            resume_text,
            job_description_text,
            priority=priority,
            analysis_depth=analysis_depth,
        )
        validation.raise_if_invalid()
        request = validation.data

        request_id = generate_id("req")
        payload = format_resume_request(request)

        fallback = None
        if self._fallback_enabled(disable_fallback):

            async def fallback() -> dict[str, Any]:
                return self._mock.resume_analysis(
                    request.resume_text, request.job_description_text
                )

        options = CallOptions(
            retry=self._config.resilience.resume_retry,
            fallback=fallback,
            sanitizer=sanitize_resume_analysis,
            cancel_token=cancel_token,
            context={
                "resume_length": len(request.resume_text),
                "job_description_length": len(request.job_description_text),
            },
        )

        with operation_context("analyze_resume", resume_service.SERVICE_NAME, request_id):
            result: ResumeAnalysis = await self._orchestrator.call(
                lambda: self._send(RATE_RESUME_ENDPOINT, "POST", payload, request_id),
                options,
                service=resume_service.SERVICE_NAME,
            )
            logger.debug(
                "Resume analysis completed",
                match_score=result.match_score,
                missing_term_count=len(result.missing_keywords),
                suggestion_count=len(result.format_suggestions),
                degraded=result.degraded,
            )
        return result

    async def get_interview_question(
        self,
        role: str,
        session_type: str,
        history: Sequence[HistoryEntry | Mapping[str, Any]] | None = None,
        *,
        difficulty: str | None = None,
        focus_areas: list[str] | None = None,
        time_limit: int | None = None,
        disable_fallback: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> InterviewQuestion:
        """Get the next interview question for a session.

        Args:
            role: One of the supported job roles
            session_type: Behavioral, Technical or Case Study
            history: Up to 50 previous question/answer pairs
            difficulty: Overrides the difficulty derived from history length
            focus_areas: Topics to focus on
            time_limit: Answer time limit in seconds
            disable_fallback: Raise instead of returning a mock question
            cancel_token: Aborts the call and any pending retry

        Returns:
            Sanitized InterviewQuestion, possibly degraded

        Raises:
            ErrorEnvelope: Classified failure
        """
        validation = validate_interview_request(
            role,
            session_type,
            history,
            difficulty=difficulty,
            focus_areas=focus_areas,
            time_limit=time_limit,
        )
        validation.raise_if_invalid()
        request = validation.data

        request_id = generate_id("req")
        payload = format_interview_request(request)

        fallback = None
        if self._fallback_enabled(disable_fallback):

            async def fallback() -> dict[str, Any]:
                return self._mock.interview_question(
                    request.role, request.session_type, request.history
                )

        options = CallOptions(
            retry=self._config.resilience.interview_retry,
            fallback=fallback,
            sanitizer=sanitize_interview_question,
            cancel_token=cancel_token,
            context={
                "role": request.role,
                "session_type": request.session_type,
                "history_length": len(request.history),
            },
        )

        with operation_context(
            "get_interview_question", interview_service.SERVICE_NAME, request_id
        ):
            result: InterviewQuestion = await self._orchestrator.call(
                lambda: self._send(INTERVIEW_QUESTION_ENDPOINT, "POST", payload, request_id),
                options,
                service=interview_service.SERVICE_NAME,
            )
            logger.debug(
                "Interview question generated",
                question_length=len(result.question_text),
                difficulty=result.difficulty,
                degraded=result.degraded,
            )
        return result

    async def batch_analyze_resumes(
        self,
        items: Sequence[Mapping[str, Any]],
        *,
        concurrency: int = 3,
        fail_fast: bool = False,
    ) -> BatchAnalysisResult:
        """Analyze up to 10 resumes, ``concurrency`` at a time.

        Each item is a mapping with ``resume_text`` and
        ``job_description_text`` (camelCase keys are accepted too).

        Args:
            items: Resume/job-description pairs
            concurrency: Items analyzed in parallel per chunk
            fail_fast: Raise the first failure instead of collecting errors

        Returns:
            BatchAnalysisResult with results and errors ordered by index

        Raises:
            ErrorEnvelope: Invalid batch, or the first failure when fail_fast
        """
        if not items:
            raise ErrorEnvelope.validation(["Analyses list is required and must not be empty"])
        if len(items) > MAX_BATCH_SIZE:
            raise ErrorEnvelope.validation(
                [f"Maximum {MAX_BATCH_SIZE} analyses allowed per batch"]
            )
        if concurrency < 1:
            raise ErrorEnvelope.validation(["Concurrency must be at least 1"])

        malformed = [
            f"Item {index} must be a mapping with resume_text and job_description_text"
            for index, item in enumerate(items)
            if not isinstance(item, Mapping)
        ]
        if malformed:
            raise ErrorEnvelope.validation(malformed)

        pairs = [
            (
                item.get("resume_text", item.get("resumeText")),
                item.get("job_description_text", item.get("jobDescriptionText")),
            )
            for item in items
        ]
        results: list[ResumeAnalysis] = []
        errors: list[BatchItemError] = []

        for start in range(0, len(pairs), concurrency):
            chunk = pairs[start : start + concurrency]
            outcomes = await asyncio.gather(
                *(self.analyze_resume(resume, job) for resume, job in chunk),
                return_exceptions=True,
            )

            for offset, outcome in enumerate(outcomes):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                if isinstance(outcome, Exception):
                    envelope = ErrorEnvelope.from_exception(outcome)
                    if fail_fast:
                        logger.error(
                            "Batch analysis aborted",
                            index=start + offset,
                            error_kind=envelope.kind.value,
                        )
                        raise envelope
                    errors.append(BatchItemError(index=start + offset, error=envelope))
                else:
                    results.append(outcome)

        return BatchAnalysisResult(
            results=results,
            errors=errors,
            summary=BatchSummary(
                total=len(items),
                successful=len(results),
                failed=len(errors),
            ),
        )

    async def generate_interview_questions(
        self,
        role: str,
        session_type: str,
        count: int = 5,
        *,
        difficulty: str | None = None,
        focus_areas: list[str] | None = None,
        time_limit: int | None = None,
        disable_fallback: bool = False,
        cancel_token: CancelToken | None = None,
        pacing_ms: float = QUESTION_PACING_MS,
    ) -> QuestionSet:
        """Generate ``count`` questions sequentially.

        Each question is added to the history (with a placeholder answer)
        before the next one is requested, so the service can avoid repeats.
        Difficulty progresses with the question index unless ``difficulty``
        is given. A failure after at least one success is logged and skipped.

        Args:
            role: One of the supported job roles
            session_type: Behavioral, Technical or Case Study
            count: Number of questions (1-20)
            pacing_ms: Pause between requests

        Returns:
            QuestionSet

        Raises:
            ErrorEnvelope: Invalid count, or the first question failed
        """
        if (
            isinstance(count, bool)
            or not isinstance(count, int)
            or not 1 <= count <= MAX_QUESTION_COUNT
        ):
            raise ErrorEnvelope.validation(
                [f"Count must be an integer between 1 and {MAX_QUESTION_COUNT}"]
            )

        questions: list[InterviewQuestion] = []
        history: list[HistoryEntry] = []

        for index in range(count):
            try:
                question = await self.get_interview_question(
                    role,
                    session_type,
                    history,
                    difficulty=difficulty or calculate_difficulty(index),
                    focus_areas=focus_areas,
                    time_limit=time_limit,
                    disable_fallback=disable_fallback,
                    cancel_token=cancel_token,
                )
            except ErrorEnvelope as e:
                if not questions or e.kind == ErrorKind.CANCELLED:
                    raise
                logger.warning(
                    "Failed to generate question, skipping",
                    index=index + 1,
                    error_kind=e.kind.value,
                )
                continue

            questions.append(question)
            history.append(
                HistoryEntry(
                    question=question.question_text,
                    answer=PLACEHOLDER_ANSWER,
                    timestamp=question.timestamp,
                )
            )

            if index < count - 1 and pacing_ms > 0:
                await self._sleep(pacing_ms / 1000.0)

        return QuestionSet(
            questions=questions,
            metadata=QuestionSetMetadata(
                requested=count,
                generated=len(questions),
                role=role,
                session_type=session_type,
                timestamp=utc_timestamp(),
            ),
        )

    async def get_question_suggestions(
        self,
        profile: Mapping[str, Any],
        *,
        limit: int = 10,
        session_types: Sequence[str] = VALID_SESSION_TYPES,
        difficulty: str = "medium",
        disable_fallback: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> QuestionSuggestions:
        """Suggest questions for a candidate profile.

        Generates one question set per session type for the profile's target
        role, splitting ``limit`` evenly (rounded up) across the types. A
        session type whose set fails is logged and left out; cancellation
        still aborts the whole call.

        Args:
            profile: Mapping with ``target_role``/``targetRole`` and optional
                experience level and target industry
            limit: Total number of questions wanted
            session_types: Session types to cover, in order
            difficulty: Difficulty applied to every question

        Returns:
            QuestionSuggestions

        Raises:
            ErrorEnvelope: Invalid profile, limit or session types, or the
                call was cancelled
        """
        if not isinstance(profile, Mapping):
            raise ErrorEnvelope.validation(["User profile is required"])

        role = _profile_field(profile, "target_role", "targetRole") or DEFAULT_SUGGESTION_ROLE
        session_types = list(session_types)
        errors: list[str] = []
        if role not in VALID_ROLES:
            errors.append(f"Invalid role. Must be one of: {', '.join(VALID_ROLES)}")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            errors.append("Limit must be a positive integer")
        if not session_types:
            errors.append("At least one session type is required")
        errors.extend(
            f"Invalid session type: {session_type}"
            for session_type in session_types
            if session_type not in VALID_SESSION_TYPES
        )
        if errors:
            raise ErrorEnvelope.validation(errors)

        per_type = min(MAX_QUESTION_COUNT, math.ceil(limit / len(session_types)))
        suggestions: list[SuggestionGroup] = []
        failed: list[str] = []

        for session_type in session_types:
            try:
                question_set = await self.generate_interview_questions(
                    role,
                    session_type,
                    per_type,
                    difficulty=difficulty,
                    disable_fallback=disable_fallback,
                    cancel_token=cancel_token,
                )
            except ErrorEnvelope as e:
                if e.kind == ErrorKind.CANCELLED:
                    raise
                logger.warning(
                    "Failed to generate suggestions for session type",
                    session_type=session_type,
                    error_kind=e.kind.value,
                )
                failed.append(session_type)
                continue
            suggestions.append(
                SuggestionGroup(session_type=session_type, questions=question_set.questions)
            )

        return QuestionSuggestions(
            suggestions=suggestions,
            user_profile=ProfileSummary(
                role=role,
                experience_level=_profile_field(profile, "experience_level", "experienceLevel"),
                target_industry=_profile_field(profile, "target_industry", "targetIndustry"),
            ),
            failed_session_types=failed,
            timestamp=utc_timestamp(),
        )

    async def check_health(self) -> HealthStatus:
        """Check the service health endpoint.

        Goes through admission control but not the circuit breaker, and is
        not retried.

        Returns:
            HealthStatus; ``status`` is "unhealthy" when the check failed
        """
        request_id = generate_id("req")
        try:
            body = await self._orchestrator.call(
                lambda: self._send(HEALTH_CHECK_ENDPOINT, "GET", None, request_id),
                CallOptions(use_circuit_breaker=False, retry=RetryConfig.no_retry()),
                service=HEALTH_SERVICE,
            )
        except ErrorEnvelope as e:
            return HealthStatus(status="unhealthy", timestamp=utc_timestamp(), error=e.message)

        data: dict[str, Any] = {"status": "healthy", "timestamp": utc_timestamp()}
        if isinstance(body, dict):
            for key, value in body.items():
                # Non-string values for our own fields are kept under a prefix
                if key in HEALTH_STATUS_FIELDS and not isinstance(value, str):
                    data[f"service_{key}"] = value
                else:
                    data[key] = value
        return HealthStatus.model_validate(data)

    def get_status(self) -> dict[str, Any]:
        """Resilience state of every service, plus configuration issues."""
        names = {resume_service.SERVICE_NAME, interview_service.SERVICE_NAME}
        names.update(self._registry.services())
        return {
            "services": {
                name: self._registry.status(name).to_dict() for name in sorted(names)
            },
            "config": self._config_summary(),
            "issues": self._config.validate(),
            "timestamp": utc_timestamp(),
        }

    def reset(self) -> dict[str, Any]:
        """Clear rate-limit and throttle state.

        An open circuit breaker stays open until a trial call succeeds.
        """
        self._registry.reset()
        return {
            "success": True,
            "message": "Rate limiting state reset successfully",
            "timestamp": utc_timestamp(),
        }

    def validate_config(self) -> dict[str, Any]:
        """Report configuration issues."""
        issues = self._config.validate()
        return {
            "valid": not issues,
            "issues": issues,
            "config": self._config_summary(),
        }

    def _config_summary(self) -> dict[str, Any]:
        resilience = self._config.resilience
        return {
            "base_url": self._config.base_url,
            "has_api_key": bool(self._config.api_key),
            "timeout_ms": self._config.timeout_ms,
            "mock_fallback": self._config.mock_fallback,
            "debug": self._config.debug,
            "rate_limit": {
                "max_requests": resilience.rate_limiter.max_requests_per_window,
                "window_ms": resilience.rate_limiter.window_ms,
            },
            "circuit_breaker": {
                "failure_threshold": resilience.circuit_breaker.failure_threshold,
                "reset_timeout_ms": resilience.circuit_breaker.reset_timeout_ms,
            },
        }

    async def start(self) -> None:
        """Start the periodic breaker counter reset."""
        self._registry.start()

    async def close(self) -> None:
        """Stop background tasks and release the transport."""
        await self._registry.aclose()
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> InterviewAiClient:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()
