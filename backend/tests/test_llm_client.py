"""Tests for the Anthropic LLM client wrapper"""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from marketplace_recs.exceptions import UpstreamUnavailable
from marketplace_recs.services.llm_client import AnthropicLLMClient

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class StubMessages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _client(messages):
    return AnthropicLLMClient(
        model="test-model", max_tokens=256, timeout=3.0,
        client=SimpleNamespace(messages=messages)
    )


def test_returns_first_text_block():
    messages = StubMessages(SimpleNamespace(content=[
        SimpleNamespace(type="thinking", thinking="..."),
        SimpleNamespace(type="text", text='[{"id": "p1"}]'),
    ]))

    result = _client(messages).complete("system", "user")

    assert result == '[{"id": "p1"}]'
    assert messages.kwargs["system"] == "system"
    assert messages.kwargs["messages"] == [{"role": "user", "content": "user"}]
    assert messages.kwargs["model"] == "test-model"
    assert messages.kwargs["timeout"] == 3.0


def test_unconfigured_client_is_unavailable(monkeypatch):
    monkeypatch.setattr("marketplace_recs.services.llm_client.settings.ANTHROPIC_API_KEY", None)
    client = AnthropicLLMClient(api_key=None)

    assert client.is_configured is False
    with pytest.raises(UpstreamUnavailable) as exc_info:
        client.complete("system", "user")
    assert exc_info.value.cause == "not_configured"


def test_timeout_is_unavailable():
    messages = StubMessages(error=anthropic.APITimeoutError(request=REQUEST))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        _client(messages).complete("system", "user")

    assert exc_info.value.cause == "timeout"


def test_connection_error_is_unavailable():
    messages = StubMessages(error=anthropic.APIConnectionError(request=REQUEST))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        _client(messages).complete("system", "user")

    assert exc_info.value.cause == "provider_error"


def test_response_without_text_is_unavailable():
    messages = StubMessages(SimpleNamespace(content=[]))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        _client(messages).complete("system", "user")

    assert exc_info.value.cause == "empty_response"
