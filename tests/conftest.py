"""Root pytest fixtures for interview-ai tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import pytest

from interview_ai.config import ServiceConfig
from interview_ai.resilience import (
    CircuitBreakerConfig,
    RateLimiterConfig,
    ResilienceConfig,
    RetryConfig,
    RetryExecutor,
    ThrottleConfig,
    interview_retry_defaults,
    resume_retry_defaults,
)
from interview_ai.telemetry import configure_logging
from interview_ai.transport import TransportResponse

if TYPE_CHECKING:
    from collections.abc import Iterator

RESUME_TEXT = (
    "Senior software engineer with eight years of experience building Python "
    "services, REST APIs and data pipelines on AWS."
)
JOB_DESCRIPTION = "Looking for a backend engineer with Python, Docker and Kubernetes."


class FakeClock:
    """Manually advanced monotonic clock in milliseconds."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingSleep:
    """Sleep replacement that records delays and advances a fake clock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds * 1000.0)
        await asyncio.sleep(0)


@dataclass
class SentRequest:
    endpoint: str
    method: str
    body: dict[str, Any] | None
    headers: dict[str, str]
    timeout_ms: float


class ScriptedTransport:
    """Transport that replays scripted outcomes in order.

    Each outcome is a TransportResponse, an exception to raise, or a dict
    returned as a 200 body. When the script runs out, ``default`` is used;
    without a default an unexpected call fails the test.
    """

    def __init__(self, *outcomes: Any, default: Any = None) -> None:
        self.outcomes = list(outcomes)
        self.default = default
        self.calls: list[SentRequest] = []
        self.closed = False

    async def send(
        self,
        endpoint: str,
        method: str,
        body: dict[str, Any] | None,
        headers: dict[str, str],
        timeout_ms: float,
    ) -> TransportResponse:
        self.calls.append(SentRequest(endpoint, method, body, headers, timeout_ms))
        if self.outcomes:
            outcome = self.outcomes.pop(0)
        elif self.default is not None:
            outcome = self.default
        else:
            raise AssertionError(f"Unexpected transport call to {endpoint}")

        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, TransportResponse):
            return outcome
        return TransportResponse(status_code=200, body=outcome)

    async def close(self) -> None:
        self.closed = True


def resume_payload(**overrides: Any) -> dict[str, Any]:
    """Valid resume analysis body in the service's wire format."""
    payload: dict[str, Any] = {
        "matchScore": 78,
        "missingKeywords": ["Docker", "Kubernetes"],
        "actionVerbAnalysis": "Strong verbs such as led and delivered.",
        "formatSuggestions": ["Add metrics to achievements"],
        "analysisId": "analysis_1",
        "timestamp": "2024-01-01T00:00:00+00:00",
    }
    payload.update(overrides)
    return payload


def question_payload(**overrides: Any) -> dict[str, Any]:
    """Valid interview question body in the service's wire format."""
    payload: dict[str, Any] = {
        "questionText": "Tell me about a project you are proud of.",
        "questionId": "question_1",
        "category": "Behavioral",
        "difficulty": "easy",
        "timestamp": "2024-01-01T00:00:00+00:00",
    }
    payload.update(overrides)
    return payload


def fast_resilience(**overrides: Any) -> ResilienceConfig:
    """Resilience settings with the documented defaults and no jitter."""
    config = ResilienceConfig(
        rate_limiter=RateLimiterConfig(),
        throttle=ThrottleConfig(),
        circuit_breaker=CircuitBreakerConfig(),
        retry=RetryConfig(jitter_factor=0.0),
        resume_retry=replace(resume_retry_defaults(), jitter_factor=0.0),
        interview_retry=replace(interview_retry_defaults(), jitter_factor=0.0),
    )
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


@pytest.fixture
def fake_clock() -> FakeClock:
    """Deterministic monotonic clock."""
    return FakeClock()


@pytest.fixture
def recording_sleep(fake_clock: FakeClock) -> RecordingSleep:
    """Sleep that advances the fake clock instead of waiting."""
    return RecordingSleep(fake_clock)


@pytest.fixture
def retry_executor(recording_sleep: RecordingSleep) -> RetryExecutor:
    """Retry executor without jitter or real waiting."""
    return RetryExecutor(sleep=recording_sleep, rng=lambda: 0.0)


@pytest.fixture
def service_config() -> ServiceConfig:
    """Service configuration pointing at a test host."""
    return ServiceConfig(
        base_url="https://ai.test",
        api_key="test-key",
        resilience=fast_resilience(),
    )


@pytest.fixture(autouse=True)
def default_logging() -> Iterator[None]:
    """Restore the default package log handler after each test."""
    yield
    configure_logging()
