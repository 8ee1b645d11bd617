"""
Shared fixtures: a stub upstream provider, static credentials and a test client
wired to them.
"""
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from tutor_relay.api.endpoints.chat import get_relay_controller
from tutor_relay.controllers import TutorRelayController
from tutor_relay.services.providers import build_provider_adapter
from tutor_relay.services.upstream_client import ChatCompletionClient

API_KEY = "sk-test-secret-key"

HELLO_COMPLETION = {
    "id": "chatcmpl-test-123",
    "object": "chat.completion",
    "model": "deepseek-chat",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "Hello!"},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
}


class StaticCredentials:
    """Credential provider backed by a plain dict."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})
        self.lookups: List[str] = []

    def get_credential(self, name: str) -> Optional[str]:
        self.lookups.append(name)
        return self.values.get(name)


class StubUpstream:
    """Mock chat-completion provider that records every outbound request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = HELLO_COMPLETION
        self.text: Optional[str] = None
        self.error: Optional[Exception] = None

    def respond(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.text = text

    def fail_with(self, error: Exception):
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def sent_json(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def credentials() -> StaticCredentials:
    return StaticCredentials({"DEEPSEEK_API_KEY": API_KEY})


@pytest.fixture
def adapter():
    return build_provider_adapter("deepseek")


@pytest.fixture
def chat_client(upstream) -> ChatCompletionClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    return ChatCompletionClient(timeout=5.0, http_client=http_client)


@pytest.fixture
def controller(adapter, credentials, chat_client) -> TutorRelayController:
    return TutorRelayController(
        adapter=adapter,
        credentials=credentials,
        chat_client=chat_client,
        is_production=False,
    )


@pytest.fixture
def client(controller):
    app = create_app()
    app.dependency_overrides[get_relay_controller] = lambda: controller
    with TestClient(app) as test_client:
        yield test_client
