"""
Transport layer - the outbound call primitive and its httpx implementation.
"""

from interview_ai.transport.base import Transport, TransportResponse
from interview_ai.transport.http import HttpTransport

__all__ = [
    "HttpTransport",
    "Transport",
    "TransportResponse",
]
