"""User-facing messages for each error kind."""

from __future__ import annotations

import math
from dataclasses import dataclass

from interview_ai.errors.classification import ErrorKind


@dataclass(frozen=True)
class UserMessage:
    """Display text for an error kind."""

    title: str
    message: str
    suggestion: str


_MESSAGES: dict[ErrorKind, UserMessage] = {
    ErrorKind.VALIDATION_ERROR: UserMessage(
        title="Invalid Input",
        message="The provided input doesn't meet the requirements.",
        suggestion="Please check your input and make sure it meets the specified criteria.",
    ),
    ErrorKind.ADAPTIVE_THROTTLED: UserMessage(
        title="Service Temporarily Paused",
        message="The AI service is temporarily unavailable due to repeated failures.",
        suggestion="Please wait {seconds} seconds before trying again.",
    ),
    ErrorKind.CIRCUIT_OPEN: UserMessage(
        title="Service Temporarily Unavailable",
        message="The AI service is currently unavailable.",
        suggestion="We're working to restore service. Please try again in a few minutes.",
    ),
    ErrorKind.TIMEOUT: UserMessage(
        title="Request Timeout",
        message="The AI service is taking longer than expected to respond.",
        suggestion="This usually resolves quickly. Please try again in a moment.",
    ),
    ErrorKind.NETWORK_ERROR: UserMessage(
        title="Connection Problem",
        message="Unable to connect to the AI service.",
        suggestion="Please check your internet connection and try again.",
    ),
    ErrorKind.SERVER_ERROR: UserMessage(
        title="Service Error",
        message="The AI service encountered an internal error.",
        suggestion="Please try again later.",
    ),
    ErrorKind.SERVICE_UNAVAILABLE: UserMessage(
        title="Service Temporarily Unavailable",
        message="The AI service is currently unavailable.",
        suggestion="We're working to restore service. Please try again in a few minutes.",
    ),
    ErrorKind.QUOTA_EXCEEDED: UserMessage(
        title="Usage Limit Reached",
        message="You've reached your usage limit for AI services.",
        suggestion="Your quota will reset soon, or consider upgrading your plan.",
    ),
    ErrorKind.MODEL_ERROR: UserMessage(
        title="AI Model Error",
        message="The AI model encountered an error processing your request.",
        suggestion="This is usually temporary. Please try again with different input.",
    ),
    ErrorKind.CONTENT_FILTER: UserMessage(
        title="Content Not Allowed",
        message="Your content was flagged by our content filter.",
        suggestion="Please modify your content to comply with our guidelines and try again.",
    ),
    ErrorKind.AUTHENTICATION: UserMessage(
        title="Authentication Failed",
        message="The AI service rejected the configured credentials.",
        suggestion="Please contact support if the problem persists.",
    ),
    ErrorKind.PERMISSION_DENIED: UserMessage(
        title="Access Denied",
        message="You don't have permission to use this AI feature.",
        suggestion="Please contact support if you believe this is a mistake.",
    ),
    ErrorKind.CANCELLED: UserMessage(
        title="Request Cancelled",
        message="The request was cancelled before it completed.",
        suggestion="Start the request again when you're ready.",
    ),
    ErrorKind.UNKNOWN: UserMessage(
        title="Something Went Wrong",
        message="An error occurred with the AI service.",
        suggestion="Please try again.",
    ),
}

_RATE_LIMIT = UserMessage(
    title="Too Many Requests",
    message="You've made too many requests. Please wait a moment and try again.",
    suggestion="Please wait {seconds} seconds before trying again.",
)

_DEFAULT_WAIT_MS = 60_000.0


def get_user_message(kind: ErrorKind, *, retry_after_ms: float | None = None) -> UserMessage:
    """Get display text for an error kind.

    Args:
        kind: Error kind
        retry_after_ms: Wait hint quoted in rate-limit style suggestions

    Returns:
        UserMessage with title, message and suggestion
    """
    template = _RATE_LIMIT if kind == ErrorKind.RATE_LIMIT_EXCEEDED else _MESSAGES[kind]
    if "{seconds}" not in template.suggestion:
        return template

    wait_ms = retry_after_ms if retry_after_ms is not None else _DEFAULT_WAIT_MS
    seconds = max(1, math.ceil(wait_ms / 1000.0))
    return UserMessage(
        title=template.title,
        message=template.message,
        suggestion=template.suggestion.format(seconds=seconds),
    )
