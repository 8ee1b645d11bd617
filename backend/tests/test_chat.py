"""
Tests for the tutor chat endpoint, end to end through the FastAPI app with a
stubbed upstream provider.
"""
import httpx
import pytest

from tutor_relay.middleware import CORS_HEADERS
from tutor_relay.services.prompts import TUTOR_SYSTEM_PROMPT

from conftest import API_KEY

CHAT_URL = "/api/chat"


def assert_cors_headers(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "HEAD", "TRACE", "PROPFIND", "BREW"])
def test_non_post_methods_are_rejected(client, upstream, method):
    response = client.request(method, CHAT_URL)

    assert response.status_code == 405
    assert response.headers["allow"] == "POST, OPTIONS"
    assert_cors_headers(response)
    assert upstream.calls == 0
    if method == "HEAD":
        return
    body = response.json()
    assert body["kind"] == "method_not_allowed"
    assert body["details"] == {"expected_method": "POST"}


def test_wrong_method_on_other_endpoint_is_structured(client):
    response = client.post("/api/health")

    assert response.status_code == 405
    assert response.json()["kind"] == "method_not_allowed"
    assert "GET" in response.headers["allow"]


def test_preflight_returns_empty_body_with_cors_headers(client, upstream):
    response = client.options(CHAT_URL)

    assert response.status_code == 200
    assert response.content == b""
    assert_cors_headers(response)
    assert upstream.calls == 0


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}, {"message": 42}])
def test_invalid_message_is_rejected_without_upstream_call(client, upstream, payload):
    response = client.post(CHAT_URL, json=payload)

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_message"
    assert upstream.calls == 0


@pytest.mark.parametrize("raw", ["{not json", "", "[1, 2, 3]"])
def test_unparseable_body_is_rejected(client, upstream, raw):
    response = client.post(
        CHAT_URL, content=raw, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "invalid_request_body"
    assert body["error"] == "Invalid request format"
    assert upstream.calls == 0


def test_missing_credential_is_a_configuration_error(client, upstream, credentials):
    credentials.values.clear()

    response = client.post(CHAT_URL, json={"message": "Hello"})

    assert response.status_code == 500
    body = response.json()
    assert body["kind"] == "configuration_error"
    assert "DEEPSEEK_API_KEY" in body["hint"]
    assert upstream.calls == 0


def test_message_is_forwarded_with_tutor_prompt(client, upstream):
    response = client.post(CHAT_URL, json={"message": "  How are you?  "})

    assert response.status_code == 200
    assert upstream.calls == 1

    sent = upstream.requests[0]
    assert str(sent.url) == "https://api.deepseek.com/chat/completions"
    assert sent.headers["authorization"] == f"Bearer {API_KEY}"
    assert sent.headers["content-type"].startswith("application/json")

    payload = upstream.sent_json()
    assert payload["model"] == "deepseek-chat"
    assert payload["messages"][0] == {"role": "system", "content": TUTOR_SYSTEM_PROMPT}
    assert payload["messages"][1] == {"role": "user", "content": "How are you?"}
    assert payload["max_tokens"] == 500
    assert payload["temperature"] == 0.7
    assert payload["stream"] is False


def test_success_returns_normalized_completion(client):
    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 200
    assert response.json() == {
        "choices": [{"message": {"role": "assistant", "content": "Hello!"}}],
        "model": "deepseek-chat",
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
    }
    assert_cors_headers(response)


def test_minimal_upstream_body_is_accepted(client, upstream):
    upstream.respond(body={"choices": [{"message": {"role": "assistant", "content": "Hello!"}}]})

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 200
    assert response.json() == {
        "choices": [{"message": {"role": "assistant", "content": "Hello!"}}]
    }


def test_identical_requests_yield_identical_bodies(client):
    first = client.post(CHAT_URL, json={"message": "Same question"})
    second = client.post(CHAT_URL, json={"message": "Same question"})

    assert first.status_code == second.status_code == 200
    assert first.content == second.content


def test_upstream_unauthorized(client, upstream):
    upstream.respond(401, body={"error": {"message": "Authentication Fails"}})

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 401
    body = response.json()
    assert body["kind"] == "upstream_unauthorized"
    assert body["error"] == "Invalid API key"
    assert "platform.deepseek.com" in body["hint"]
    assert upstream.calls == 1


def test_upstream_rate_limited(client, upstream):
    upstream.respond(429, body={"error": {"message": "Too many requests"}})

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 429
    body = response.json()
    assert body["kind"] == "upstream_rate_limited"
    assert "try again" in body["hint"]
    # no retry
    assert upstream.calls == 1


def test_other_upstream_status_is_passed_through_truncated(client, upstream):
    upstream.respond(503, text="x" * 2000)

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 503
    body = response.json()
    assert body["kind"] == "upstream_error"
    assert body["error"] == "AI service error"
    assert body["details"] == "x" * 500


def test_upstream_error_text_never_echoes_credential(client, upstream):
    upstream.respond(400, text=f"bad request for key {API_KEY}")

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 400
    assert API_KEY not in response.text
    assert "***REDACTED***" in response.json()["details"]


def test_missing_choices_is_a_malformed_response(client, upstream):
    upstream.respond(body={"id": "chatcmpl-1", "model": "deepseek-chat"})

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 500
    assert response.json()["kind"] == "upstream_malformed_response"


def test_non_json_success_is_a_malformed_response(client, upstream):
    upstream.respond(200, text="<html>gateway</html>")

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 500
    assert response.json()["kind"] == "upstream_malformed_response"


def test_network_failure_becomes_internal_error(client, upstream):
    upstream.fail_with(httpx.ConnectError("connection refused"))

    response = client.post(CHAT_URL, json={"message": "Hi"})

    assert response.status_code == 500
    body = response.json()
    assert body["kind"] == "internal_error"
    assert body["message"] == "Failed to get response from AI service"
    assert API_KEY not in response.text
    assert_cors_headers(response)
