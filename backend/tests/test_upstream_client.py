"""
Tests for the chat-completion client against a mock transport.
"""
import httpx
import pytest

from tutor_relay.services.upstream_client import (
    UNREADABLE_ERROR_BODY,
    UpstreamResult,
    _read_error_text,
)

from conftest import API_KEY, HELLO_COMPLETION


@pytest.mark.asyncio
async def test_success_returns_decoded_payload(chat_client, adapter, upstream):
    result = await chat_client.complete(adapter, API_KEY, adapter.build_request("Hi"))

    assert result.ok
    assert result.status_code == 200
    assert result.payload == HELLO_COMPLETION
    assert upstream.calls == 1


@pytest.mark.asyncio
async def test_status_failure_is_not_retried(chat_client, adapter, upstream):
    upstream.respond(500, text="upstream exploded")

    result = await chat_client.complete(adapter, API_KEY, adapter.build_request("Hi"))

    assert not result.ok
    assert result.status_code == 500
    assert result.error_text == "upstream exploded"
    assert result.failure is None
    assert upstream.calls == 1


@pytest.mark.asyncio
async def test_timeout_is_a_transport_failure(chat_client, adapter, upstream):
    upstream.fail_with(httpx.ReadTimeout("timed out"))

    result = await chat_client.complete(adapter, API_KEY, adapter.build_request("Hi"))

    assert not result.ok
    assert result.status_code is None
    assert result.failure is not None
    assert upstream.calls == 1


@pytest.mark.asyncio
async def test_invalid_json_success_has_no_payload(chat_client, adapter, upstream):
    upstream.respond(200, text="not json")

    result = await chat_client.complete(adapter, API_KEY, adapter.build_request("Hi"))

    assert result.ok
    assert result.payload is None


def test_result_ok_requires_success_status():
    assert UpstreamResult(status_code=204).ok
    assert not UpstreamResult(status_code=404).ok
    assert not UpstreamResult().ok


def test_read_error_text_placeholder():
    assert _read_error_text(None) == UNREADABLE_ERROR_BODY

    class UnreadableResponse:
        @property
        def text(self):
            raise httpx.ResponseNotRead()

    assert _read_error_text(UnreadableResponse()) == UNREADABLE_ERROR_BODY
