"""Interview question request shaping."""

from __future__ import annotations

from typing import Any

from interview_ai.types import InterviewQuestionRequest
from interview_ai.validation.responses import utc_timestamp

INTERVIEW_QUESTION_ENDPOINT = "/api/get-interview-question"
SERVICE_NAME = "interview-question"

PLACEHOLDER_ANSWER = "[Placeholder answer for context]"


def calculate_difficulty(question_count: int) -> str:
    """Difficulty for the next question given how many were already asked."""
    if question_count < 3:
        return "easy"
    if question_count < 7:
        return "medium"
    return "hard"


def format_interview_request(request: InterviewQuestionRequest) -> dict[str, Any]:
    """Build the wire payload for ``/api/get-interview-question``.

    History timestamps default to the request time; the session start is the
    first entry's timestamp.
    """
    now = utc_timestamp()
    history = [
        {
            "question": entry.question,
            "answer": entry.answer,
            "timestamp": entry.timestamp or now,
        }
        for entry in request.history
    ]

    payload: dict[str, Any] = {
        "role": request.role,
        "sessionType": request.session_type,
        "history": history,
        "context": {
            "totalQuestions": len(history),
            "sessionStartTime": history[0]["timestamp"] if history else now,
            "difficulty": request.difficulty or calculate_difficulty(len(history)),
        },
        "preferences": {
            "avoidRepetition": True,
            "progressiveDifficulty": True,
            "contextAware": True,
        },
        "timestamp": now,
    }
    if request.focus_areas:
        payload["focusAreas"] = list(request.focus_areas)
    if request.time_limit:
        payload["timeLimit"] = request.time_limit
    return payload
