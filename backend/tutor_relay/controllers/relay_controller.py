"""
Relay controller for the English tutor chat endpoint.

Validates the learner's message, forwards it to the configured upstream
provider with the tutor system prompt, and turns every outcome into a
structured JSON response.
"""
import json
import logging
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError

from tutor_relay.api.models import ErrorKind, ErrorResponse, TutorChatRequest
from tutor_relay.services.credentials import CredentialProvider, redact
from tutor_relay.services.providers import ProviderAdapter
from tutor_relay.services.upstream_client import ChatCompletionClient, UpstreamResult

logger = logging.getLogger(__name__)

ALLOWED_METHOD = "POST"
PREFLIGHT_METHOD = "OPTIONS"
MAX_UPSTREAM_ERROR_CHARS = 500


@dataclass
class RelayResponse:
    """Status, JSON content and extra headers for one relay outcome.

    ``content`` is None for responses without a body (preflight).
    """
    status_code: int
    content: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class BodyParseResult:
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_request_body(body: Any) -> BodyParseResult:
    """
    Parse an inbound body into a JSON object.

    Accepts an already-decoded dict, or raw ``str``/``bytes`` that still need
    to be decoded.
    """
    if isinstance(body, dict):
        return BodyParseResult(data=body)

    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return BodyParseResult(error="Request body is not valid UTF-8")

    if not isinstance(body, str) or not body.strip():
        return BodyParseResult(error="Request body must be a JSON object")

    try:
        data = json.loads(body)
    except ValueError:
        return BodyParseResult(error="Request body is not valid JSON")

    if not isinstance(data, dict):
        return BodyParseResult(error="Request body must be a JSON object")

    return BodyParseResult(data=data)


def extract_message(data: Dict[str, Any]) -> Optional[str]:
    """Return the trimmed ``message`` field, or None if it is missing or blank."""
    try:
        return TutorChatRequest.model_validate(data, strict=True).message
    except ValidationError:
        return None


def method_not_allowed_response() -> RelayResponse:
    """405 for any method other than POST or the OPTIONS preflight."""
    body = ErrorResponse.for_kind(
        ErrorKind.METHOD_NOT_ALLOWED,
        message=f"Only {ALLOWED_METHOD} requests are accepted",
        details={"expected_method": ALLOWED_METHOD},
    )
    return RelayResponse(
        status_code=405,
        content=body.to_content(),
        headers={"Allow": f"{ALLOWED_METHOD}, {PREFLIGHT_METHOD}"},
    )


class TutorRelayController:
    """Controller for the tutor relay."""

    def __init__(
        self,
        adapter: ProviderAdapter,
        credentials: CredentialProvider,
        chat_client: ChatCompletionClient,
        is_production: bool = True,
    ):
        self.adapter = adapter
        self.credentials = credentials
        self.chat_client = chat_client
        self.is_production = is_production

    def _error(self, kind: ErrorKind, status_code: Optional[int] = None, **fields: Any) -> RelayResponse:
        body = ErrorResponse.for_kind(kind, **fields)
        return RelayResponse(
            status_code=status_code or kind.status_code,
            content=body.to_content(),
        )

    async def handle(self, method: str, body: Any) -> RelayResponse:
        """
        Handle one inbound request.

        Args:
            method: HTTP method of the inbound request
            body: Raw body bytes/text, or an already-decoded JSON object

        Returns:
            RelayResponse describing the status and JSON content to send back
        """
        method = method.upper()
        if method == PREFLIGHT_METHOD:
            return RelayResponse(status_code=200)

        if method != ALLOWED_METHOD:
            return method_not_allowed_response()

        parsed = parse_request_body(body)
        if not parsed.ok:
            return self._error(ErrorKind.INVALID_REQUEST_BODY, message=parsed.error)

        message = extract_message(parsed.data)
        if message is None:
            return self._error(
                ErrorKind.INVALID_MESSAGE,
                message="Field 'message' must be a non-empty string",
            )

        api_key = self.credentials.get_credential(self.adapter.credential_name)
        if not api_key:
            logger.error(f"{self.adapter.credential_name} is not configured")
            return self._error(
                ErrorKind.CONFIGURATION_ERROR,
                message="API key not configured.",
                hint=f"Add {self.adapter.credential_name} to environment variables.",
            )

        result = await self.chat_client.complete(
            self.adapter, api_key, self.adapter.build_request(message)
        )
        return self._relay_result(result, api_key)

    def _relay_result(self, result: UpstreamResult, api_key: str) -> RelayResponse:
        if result.failure is not None:
            return self._transport_failure(result.failure, api_key)

        if not result.ok:
            return self._upstream_failure(result, api_key)

        normalized = self.adapter.normalize_response(result.payload)
        if normalized is None:
            logger.error(
                "Upstream returned an unexpected response format",
                extra={"provider": self.adapter.name, "status_code": result.status_code},
            )
            return self._error(
                ErrorKind.UPSTREAM_MALFORMED_RESPONSE,
                message="The AI service returned a response without any choices.",
            )

        return RelayResponse(
            status_code=200,
            content=normalized.model_dump(mode="json", exclude_none=True),
        )

    def _upstream_failure(self, result: UpstreamResult, api_key: str) -> RelayResponse:
        kind = self.adapter.classify_error(result.status_code)
        error_text = redact(result.error_text or "", api_key)

        logger.warning(
            "Upstream returned an error",
            extra={
                "provider": self.adapter.name,
                "status_code": result.status_code,
                "kind": kind.value,
            },
        )

        if kind == ErrorKind.UPSTREAM_UNAUTHORIZED:
            return self._error(
                kind,
                message="The AI service rejected the configured API key.",
                hint=f"Get a new API key from {self.adapter.key_help_url}",
            )

        if kind == ErrorKind.UPSTREAM_RATE_LIMITED:
            return self._error(
                kind,
                message="Too many requests to the AI service.",
                hint="Please wait a moment and try again.",
            )

        return self._error(
            kind,
            status_code=result.status_code,
            message=f"AI service returned status {result.status_code}",
            details=error_text[:MAX_UPSTREAM_ERROR_CHARS],
        )

    def _transport_failure(self, exc: Exception, api_key: str) -> RelayResponse:
        logger.error(
            "Failed to get response from AI service",
            extra={"provider": self.adapter.name, "error_type": type(exc).__name__},
        )

        fields: Dict[str, Any] = {"message": "Failed to get response from AI service"}
        if not self.is_production:
            fields["details"] = redact(f"{type(exc).__name__}: {exc}", api_key)
            tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            fields["traceback"] = redact(tb_str, api_key)

        return self._error(ErrorKind.INTERNAL_ERROR, **fields)
