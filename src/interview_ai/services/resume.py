"""Resume analysis request shaping."""

from __future__ import annotations

from typing import Any

from interview_ai.types import ResumeAnalysisRequest
from interview_ai.validation.responses import utc_timestamp

RATE_RESUME_ENDPOINT = "/api/rate-resume"
SERVICE_NAME = "resume-analysis"


def format_resume_request(request: ResumeAnalysisRequest) -> dict[str, Any]:
    """Build the wire payload for ``/api/rate-resume``."""
    payload: dict[str, Any] = {
        "resumeText": request.resume_text,
        "jobDescriptionText": request.job_description_text,
        "analysisType": "comprehensive",
        "includeKeywords": True,
        "includeActionVerbs": True,
        "includeFormatSuggestions": True,
        "timestamp": utc_timestamp(),
    }
    if request.priority:
        payload["priority"] = request.priority
    if request.analysis_depth:
        payload["analysisDepth"] = request.analysis_depth
    return payload
