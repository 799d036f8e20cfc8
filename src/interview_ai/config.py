"""
Service configuration.

Settings for reaching the inference service, read from ``INTERVIEW_AI_*``
environment variables or built directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from interview_ai.resilience import ResilienceConfig

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT_MS = 30_000.0
MIN_RECOMMENDED_TIMEOUT_MS = 5_000.0


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServiceConfig:
    """Configuration for the AI call layer.

    Attributes:
        base_url: Inference service base URL
        api_key: Bearer token for the service
        timeout_ms: Per-request timeout
        mock_fallback: Serve offline mock results when a call fails for good
        debug: Emit debug-level logs, including successful results
        log_format: Log output format, "text" or "json"
        app_name: Reported in the User-Agent header
        app_version: Reported in the User-Agent header
        resilience: Limiter, throttle, breaker and retry settings
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    mock_fallback: bool = True
    debug: bool = False
    log_format: str = "text"
    app_name: str = "interview-ai"
    app_version: str = "0.1.0"
    resilience: ResilienceConfig = field(default_factory=ResilienceConfig)

    @classmethod
    def default(cls) -> ServiceConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Create configuration from environment variables."""
        return cls(
            base_url=os.getenv("INTERVIEW_AI_BASE_URL", DEFAULT_BASE_URL),
            api_key=os.getenv("INTERVIEW_AI_API_KEY") or None,
            timeout_ms=float(os.getenv("INTERVIEW_AI_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
            mock_fallback=_env_flag("INTERVIEW_AI_MOCK_FALLBACK", "true"),
            debug=_env_flag("INTERVIEW_AI_DEBUG", "false"),
            log_format=os.getenv("INTERVIEW_AI_LOG_FORMAT", "text").strip().lower(),
            app_name=os.getenv("INTERVIEW_AI_APP_NAME", "interview-ai"),
            app_version=os.getenv("INTERVIEW_AI_APP_VERSION", "0.1.0"),
            resilience=ResilienceConfig.from_env(),
        )

    def validate(self) -> list[str]:
        """Report configuration problems.

        Returns:
            Human-readable issues; empty when the configuration is usable
        """
        issues: list[str] = []
        if not self.base_url:
            issues.append("AI API base URL is not configured")
        if not self.api_key and not self.mock_fallback:
            issues.append("AI API key is not configured and mock responses are disabled")
        if self.timeout_ms < MIN_RECOMMENDED_TIMEOUT_MS:
            issues.append("AI API timeout is too low (minimum 5 seconds recommended)")
        return issues
