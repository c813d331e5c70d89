from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class AiParalegalError(RuntimeError):
    """Base error of the library."""


class StreamUnsupportedError(AiParalegalError):
    """The transport did not provide a readable response body."""


class AiParalegalStreamError(AiParalegalError):
    """An `error` event reported by the host in the middle of an event stream."""

    def __init__(self, message: str, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


@dataclass(slots=True)
class AiParalegalAPIError(AiParalegalError):
    """
    Non-2xx response from the AI Paralegal host.

    The host usually answers failures with a JSON body carrying a top level
    `message`:
    {
        "message": "Invalid exchange token"
    }

    Some gateways wrap it in an envelope instead:
    {
        "error": {
            "code": "UNAUTHORIZED",
            "message": "...",
            "requestId": "req_...",
            "details": {...}
        }
    }

    Both shapes are parsed; when the body is not JSON the message falls back to
    "<action> failed with status <code>".
    """
    status_code: int
    message: str
    body: str | None = None

    error_code: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"AiParalegalAPIError("
            f"status_code={self.status_code}, "
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"request_id={self.request_id!r}, "
            f"details={self.details!r}, "
            f"body={'...' if self.body else None})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dict for structured logging."""
        return {
            "status_code": self.status_code,
            "message": self.message,
            "error_code": self.error_code,
            "request_id": self.request_id,
            "details": self.details,
            "body": self.body,
        }

    @property
    def is_client_error(self) -> bool:
        """True for 4xx responses."""
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        """True for 5xx responses."""
        return 500 <= self.status_code < 600

    @property
    def is_auth_error(self) -> bool:
        """True for 401 and 403 responses."""
        return self.status_code in (401, 403)
