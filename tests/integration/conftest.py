"""
Integration test helper utilities.

Shared fixtures and utilities for end-to-end tests against a mocked HTTP
service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import pytest_asyncio

from interview_ai import InterviewAiClient
from interview_ai.config import ServiceConfig
from interview_ai.resilience import RetryExecutor
from interview_ai.services import MockResponder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import pytest_httpx

    from tests.conftest import FakeClock, RecordingSleep

BASE_URL = "https://ai.test"
RATE_RESUME_URL = f"{BASE_URL}/api/rate-resume"
INTERVIEW_QUESTION_URL = f"{BASE_URL}/api/get-interview-question"
HEALTH_URL = f"{BASE_URL}/api/health"


def setup_resume_responses(
    httpx_mock: pytest_httpx.HTTPXMock,
    count: int = 1,
    status_code: int = 200,
    json: dict[str, Any] | None = None,
) -> None:
    """Register ``count`` responses on the resume endpoint."""
    for _ in range(count):
        httpx_mock.add_response(
            url=RATE_RESUME_URL,
            method="POST",
            status_code=status_code,
            json=json,
        )


def setup_timeouts(httpx_mock: pytest_httpx.HTTPXMock, url: str, count: int) -> None:
    """Register ``count`` read timeouts on ``url``."""
    for _ in range(count):
        httpx_mock.add_exception(httpx.ReadTimeout("read timed out"), url=url)


def build_http_client(
    config: ServiceConfig,
    clock: FakeClock,
    sleep: RecordingSleep,
) -> InterviewAiClient:
    """Client using the real HTTP transport with deterministic timing."""
    return InterviewAiClient(
        config,
        retry_executor=RetryExecutor(sleep=sleep, rng=lambda: 0.0),
        mock=MockResponder(seed=1),
        clock=clock,
        sleep=sleep,
    )


@pytest_asyncio.fixture
async def http_client(
    service_config: ServiceConfig,
    fake_clock: FakeClock,
    recording_sleep: RecordingSleep,
) -> AsyncIterator[InterviewAiClient]:
    """Client pointed at ``BASE_URL``."""
    service_config.base_url = BASE_URL
    client = build_http_client(service_config, fake_clock, recording_sleep)
    try:
        yield client
    finally:
        await client.close()
