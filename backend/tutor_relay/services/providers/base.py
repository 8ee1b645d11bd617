"""
Provider adapter interface.

An adapter knows how to talk to one chat-completion provider: how to shape the
outbound request, how to read its response, and how to classify its failure
statuses. The relay controller only ever goes through this interface.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from tutor_relay.api.models import ErrorKind, TutorChatResponse


class ProviderAdapter(ABC):
    """Base class for upstream chat-completion providers."""

    #: Short identifier used in configuration (TUTOR_PROVIDER)
    name: str
    #: Environment variable holding the provider API key
    credential_name: str
    base_url: str
    model: str
    #: Where operators get a fresh key, surfaced in 401 hints
    key_help_url: str

    @abstractmethod
    def build_request(self, message: str) -> Dict[str, Any]:
        """Build the chat-completion request body for one learner message."""

    @abstractmethod
    def normalize_response(self, raw: Any) -> Optional[TutorChatResponse]:
        """Normalize a decoded upstream body, or return None if it is malformed."""

    def classify_error(self, status_code: int) -> ErrorKind:
        if status_code == 401:
            return ErrorKind.UPSTREAM_UNAUTHORIZED
        if status_code == 429:
            return ErrorKind.UPSTREAM_RATE_LIMITED
        return ErrorKind.UPSTREAM_ERROR
