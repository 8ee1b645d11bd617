from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Failure classes surfaced to callers of the tutor relay."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    INVALID_REQUEST_BODY = "invalid_request_body"
    INVALID_MESSAGE = "invalid_message"
    CONFIGURATION_ERROR = "configuration_error"
    UPSTREAM_UNAUTHORIZED = "upstream_unauthorized"
    UPSTREAM_RATE_LIMITED = "upstream_rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_MALFORMED_RESPONSE = "upstream_malformed_response"
    INTERNAL_ERROR = "internal_error"

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status for this kind; None means the upstream status is passed through."""
        return _STATUS_CODES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_STATUS_CODES = {
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.INVALID_REQUEST_BODY: 400,
    ErrorKind.INVALID_MESSAGE: 400,
    ErrorKind.CONFIGURATION_ERROR: 500,
    ErrorKind.UPSTREAM_UNAUTHORIZED: 401,
    ErrorKind.UPSTREAM_RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_ERROR: None,
    ErrorKind.UPSTREAM_MALFORMED_RESPONSE: 500,
    ErrorKind.INTERNAL_ERROR: 500,
}

_LABELS = {
    ErrorKind.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorKind.INVALID_REQUEST_BODY: "Invalid request format",
    ErrorKind.INVALID_MESSAGE: "Invalid message",
    ErrorKind.CONFIGURATION_ERROR: "Server configuration error",
    ErrorKind.UPSTREAM_UNAUTHORIZED: "Invalid API key",
    ErrorKind.UPSTREAM_RATE_LIMITED: "Rate limit exceeded",
    ErrorKind.UPSTREAM_ERROR: "AI service error",
    ErrorKind.UPSTREAM_MALFORMED_RESPONSE: "Unexpected response format",
    ErrorKind.INTERNAL_ERROR: "Internal Server Error",
}


class ErrorResponse(BaseModel):
    """Standard error response model."""

    kind: ErrorKind
    error: str
    message: Optional[str] = None
    details: Optional[Any] = None
    hint: Optional[str] = None
    traceback: Optional[str] = None

    @classmethod
    def for_kind(cls, kind: ErrorKind, **fields: Any) -> "ErrorResponse":
        return cls(kind=kind, error=kind.label, **fields)

    def to_content(self) -> dict:
        """JSON-ready body without the unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
