"""Tests for the per-service resilience registry."""

import asyncio

import pytest

from interview_ai.errors import NetworkError
from interview_ai.resilience import (
    DEFAULT_SERVICE,
    CircuitBreakerConfig,
    RateLimiterConfig,
    ResilienceConfig,
    ResilienceRegistry,
    RetryConfig,
    ThrottleConfig,
)
from tests.conftest import FakeClock


class GatedSleep:
    """Sleep that only returns when the test releases it."""

    def __init__(self) -> None:
        self.requested: list[float] = []
        self._gate: asyncio.Queue[None] = asyncio.Queue()

    async def __call__(self, seconds: float) -> None:
        self.requested.append(seconds)
        await self._gate.get()

    def release(self) -> None:
        self._gate.put_nowait(None)


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


async def _fail() -> None:
    raise NetworkError("down")


class TestResilienceConfig:
    """Tests for ResilienceConfig."""

    def test_defaults(self) -> None:
        """Test combined defaults."""
        config = ResilienceConfig.default()
        assert config.rate_limiter.max_requests_per_window == 60
        assert config.throttle.failure_escalation_threshold == 3
        assert config.circuit_breaker.failure_threshold == 5
        assert config.circuit_breaker.monitoring_interval_ms == 300_000
        assert config.retry.max_retries == 3

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment overrides reach every component."""
        monkeypatch.setenv("INTERVIEW_AI_RATE_LIMIT_MAX_REQUESTS", "10")
        monkeypatch.setenv("INTERVIEW_AI_THROTTLE_THRESHOLD", "4")
        monkeypatch.setenv("INTERVIEW_AI_BREAKER_FAILURE_THRESHOLD", "2")
        monkeypatch.setenv("INTERVIEW_AI_MAX_RETRIES", "1")

        config = ResilienceConfig.from_env()
        assert config.rate_limiter.max_requests_per_window == 10
        assert config.throttle.failure_escalation_threshold == 4
        assert config.circuit_breaker.failure_threshold == 2
        assert config.retry.max_retries == 1
        assert config.resume_retry.max_retries == 1
        assert config.interview_retry.max_retries == 1

    def test_service_retry_defaults(self) -> None:
        """Test resume retries twice from 1 s and questions from 800 ms."""
        config = ResilienceConfig()
        assert config.resume_retry.max_retries == 2
        assert config.resume_retry.base_delay_ms == 1_000
        assert config.interview_retry.max_retries == 2
        assert config.interview_retry.base_delay_ms == 800
        assert config.interview_retry.backoff_factor == 2

    def test_service_retry_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test per-service variables override the shared ones."""
        monkeypatch.setenv("INTERVIEW_AI_RETRY_BACKOFF_FACTOR", "3")
        monkeypatch.setenv("INTERVIEW_AI_RESUME_MAX_RETRIES", "0")
        monkeypatch.setenv("INTERVIEW_AI_INTERVIEW_RETRY_BASE_DELAY_MS", "250")

        config = ResilienceConfig.from_env()
        assert config.resume_retry.max_retries == 0
        assert config.resume_retry.base_delay_ms == 1_000
        assert config.resume_retry.backoff_factor == 3
        assert config.interview_retry.max_retries == 2
        assert config.interview_retry.base_delay_ms == 250
        assert config.interview_retry.backoff_factor == 3


class TestResilienceRegistry:
    """Tests for ResilienceRegistry."""

    def test_get_is_lazy_and_stable(self, fake_clock: FakeClock) -> None:
        """Test service state is created once per name."""
        registry = ResilienceRegistry(clock=fake_clock)
        assert registry.services() == []

        state = registry.get("resume-analysis")
        assert registry.get("resume-analysis") is state
        assert state.name == "resume-analysis"
        assert registry.get() is registry.get(DEFAULT_SERVICE)
        assert registry.services() == ["resume-analysis", DEFAULT_SERVICE]

    def test_config_applies_to_each_service(self, fake_clock: FakeClock) -> None:
        """Test every service gets components built from the shared config."""
        config = ResilienceConfig(
            rate_limiter=RateLimiterConfig(max_requests_per_window=7),
            throttle=ThrottleConfig(),
            circuit_breaker=CircuitBreakerConfig(failure_threshold=2),
            retry=RetryConfig(),
        )
        registry = ResilienceRegistry(config, clock=fake_clock)
        a, b = registry.get("a"), registry.get("b")

        assert a.limiter is not b.limiter
        assert a.limiter.config.max_requests_per_window == 7
        assert b.breaker.config.failure_threshold == 2

    def test_status(self, fake_clock: FakeClock) -> None:
        """Test status aggregates the three component snapshots."""
        registry = ResilienceRegistry(clock=fake_clock)
        registry.get("resume-analysis").limiter.try_admit()

        status = registry.status("resume-analysis")
        assert status.status == "operational"
        data = status.to_dict()
        assert data["service"] == "resume-analysis"
        assert data["rate_limit"]["remaining"] == 59
        assert data["throttle"]["blocked"] is False
        assert data["circuit_breaker"]["state"] == "closed"

    def test_status_degraded_when_throttled(self, fake_clock: FakeClock) -> None:
        """Test a blocked throttle reports degraded."""
        registry = ResilienceRegistry(clock=fake_clock)
        throttle = registry.get().throttle
        for _ in range(3):
            throttle.record_failure()
        assert registry.status().status == "degraded"

    @pytest.mark.asyncio
    async def test_reset_clears_limiter_and_throttle_only(self, fake_clock: FakeClock) -> None:
        """Test reset leaves the circuit breaker alone."""
        registry = ResilienceRegistry(
            ResilienceConfig(circuit_breaker=CircuitBreakerConfig(failure_threshold=1)),
            clock=fake_clock,
        )
        state = registry.get("interview-question")
        state.limiter.try_admit()
        state.throttle.record_failure()
        with pytest.raises(NetworkError):
            await state.breaker.execute(_fail)

        registry.reset()

        assert state.limiter.snapshot().remaining == 60
        assert state.throttle.consecutive_failures == 0
        assert state.breaker.is_open

    def test_reset_single_service(self, fake_clock: FakeClock) -> None:
        """Test resetting one service leaves others untouched."""
        registry = ResilienceRegistry(clock=fake_clock)
        registry.get("a").limiter.try_admit()
        registry.get("b").limiter.try_admit()

        registry.reset("a")
        assert len(registry.get("a").limiter) == 0
        assert len(registry.get("b").limiter) == 1

    @pytest.mark.asyncio
    async def test_scheduled_counter_reset(self, fake_clock: FakeClock) -> None:
        """Test the periodic task zeroes breaker counters each interval."""
        sleep = GatedSleep()
        registry = ResilienceRegistry(clock=fake_clock, sleep=sleep)
        breaker = registry.get("resume-analysis").breaker
        with pytest.raises(NetworkError):
            await breaker.execute(_fail)

        handle = registry.start()
        await _settle()
        assert handle.running
        assert sleep.requested == [300.0]
        assert breaker.snapshot().request_count == 1

        sleep.release()
        await _settle()
        snapshot = breaker.snapshot()
        assert snapshot.request_count == 0
        assert snapshot.failure_count == 0
        assert sleep.requested == [300.0, 300.0]

        await registry.aclose()
        assert handle.running is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, fake_clock: FakeClock) -> None:
        """Test a second start returns the running handle."""
        registry = ResilienceRegistry(clock=fake_clock, sleep=GatedSleep())
        first = registry.start()
        assert registry.start() is first
        await registry.aclose()

        second = registry.start()
        assert second is not first
        assert second.cancel() is True
        await second.wait_closed()
        assert second.running is False

    @pytest.mark.asyncio
    async def test_aclose_without_start(self) -> None:
        """Test closing an idle registry is a no-op."""
        registry = ResilienceRegistry()
        await registry.aclose()
