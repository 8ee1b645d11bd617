"""
Outbound chat-completion calls.

Wraps the OpenAI SDK so that every call ends in an ``UpstreamResult`` instead of
an exception: a decoded success body, a non-success status with the upstream
error text, or a transport failure.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI

from tutor_relay.services.providers import ProviderAdapter

logger = logging.getLogger(__name__)

UNREADABLE_ERROR_BODY = "<unreadable error body>"


@dataclass
class UpstreamResult:
    """Outcome of a single upstream call."""

    status_code: Optional[int] = None
    payload: Any = None
    error_text: Optional[str] = None
    failure: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return (
            self.failure is None
            and self.status_code is not None
            and 200 <= self.status_code < 300
        )


def _read_error_text(response: Optional[httpx.Response]) -> str:
    if response is None:
        return UNREADABLE_ERROR_BODY
    try:
        return response.text
    except (httpx.HTTPError, httpx.ResponseNotRead, UnicodeDecodeError):
        return UNREADABLE_ERROR_BODY


class ChatCompletionClient:
    """Issues one chat-completion request per call, without retries."""

    def __init__(self, timeout: float = 30.0, http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            timeout: Seconds to wait for the upstream response
            http_client: Shared connection pool; the owner is responsible for closing it
        """
        self.timeout = timeout
        self.http_client = http_client

    async def complete(
        self, adapter: ProviderAdapter, api_key: str, payload: Dict[str, Any]
    ) -> UpstreamResult:
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=adapter.base_url,
            timeout=self.timeout,
            max_retries=0,
            http_client=self.http_client,
        )

        try:
            raw = await client.chat.completions.with_raw_response.create(**payload)
        except APIStatusError as e:
            return UpstreamResult(
                status_code=e.status_code,
                error_text=_read_error_text(e.response),
            )
        except APIError as e:
            # Connection failures and timeouts
            logger.warning(
                "Upstream request failed",
                extra={"provider": adapter.name, "error_type": type(e).__name__},
            )
            return UpstreamResult(failure=e)
        finally:
            if self.http_client is None:
                await client.close()

        http_response = raw.http_response
        try:
            body = http_response.json()
        except ValueError:
            body = None

        return UpstreamResult(status_code=http_response.status_code, payload=body)
