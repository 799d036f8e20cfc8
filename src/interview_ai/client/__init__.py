"""
Client layer - User-facing API.

This module provides:
- InterviewAiClient: Resume analysis and interview question operations
- Cancellation tokens for aborting in-flight calls
"""

from interview_ai.client.core import InterviewAiClient
from interview_ai.resilience.cancel import CancelReason, CancelState, CancelToken

__all__ = [
    "CancelReason",
    "CancelState",
    "CancelToken",
    "InterviewAiClient",
]
