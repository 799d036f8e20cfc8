"""
Transport protocol.

The resilience layer reaches the inference service only through
``Transport.send``; anything implementing it can stand in for HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class TransportResponse:
    """Raw response from the inference service.

    Attributes:
        status_code: HTTP status code
        body: Parsed JSON body (None when the body was empty or not JSON)
        headers: Response headers with lower-cased names
    """

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the status code is 2xx."""
        return 200 <= self.status_code < 300


@runtime_checkable
class Transport(Protocol):
    """Outbound call primitive.

    Implementations raise ``NetworkError`` or ``RequestTimeoutError`` when no
    response was obtained, and return non-2xx responses unchanged.
    """

    async def send(
        self,
        endpoint: str,
        method: str,
        body: dict[str, Any] | None,
        headers: dict[str, str],
        timeout_ms: float,
    ) -> TransportResponse: ...

    async def close(self) -> None: ...
