"""Tests for LiteLLM provider."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from logscrub.core.models import SanitizationOptions, SensitiveDataOptions
from logscrub.providers.llm.base import (
    AIProviderError,
    AuthenticationError,
    InvalidRequestError,
    RateLimitError,
    TransientProviderError,
)
from logscrub.providers.llm.chat_completion import HttpChatCompletionProvider
from logscrub.providers.llm.litellm_provider import LiteLLMProvider


def litellm_response(content: str) -> MagicMock:
    """Build a LiteLLM-style response object."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class StatusError(Exception):
    """Exception carrying an HTTP status, as LiteLLM errors do."""

    def __init__(self, message: str, status_code: int, headers: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = SimpleNamespace(headers=headers or {})


@pytest.fixture
def provider() -> LiteLLMProvider:
    """Create a LiteLLM provider."""
    return LiteLLMProvider(model="anthropic/claude-3-5-sonnet-20241022", api_key="test-key")


@pytest.fixture
def no_sleep():
    """Skip real backoff delays."""
    with patch("logscrub.providers.llm.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestLiteLLMProvider:
    """Test suite for LiteLLMProvider."""

    def test_configuration(self) -> None:
        """Test that a model name is required."""
        assert LiteLLMProvider(model="ollama/llama3").is_configured is True
        assert LiteLLMProvider(model=None).is_configured is False
        assert LiteLLMProvider(model=" ").is_configured is False

    @pytest.mark.asyncio
    async def test_has_no_http_client(self, provider: LiteLLMProvider) -> None:
        """Test that LiteLLM requests do not go through the shared HTTP transport."""
        assert not isinstance(provider, HttpChatCompletionProvider)
        assert not hasattr(provider, "_http_client")
        await provider.close()

    def test_request_params_omit_unset_credentials(self) -> None:
        """Test that api_key and api_base are only sent when set."""
        params = LiteLLMProvider(model="ollama/llama3")._request_params("sys", "text", 0.0)

        assert "api_key" not in params
        assert "api_base" not in params
        assert params["model"] == "ollama/llama3"
        assert params["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_sanitize(self, provider: LiteLLMProvider) -> None:
        """Test a successful sanitization."""
        content = json.dumps(
            {
                "sanitizedText": "user host-a",
                "mappings": [{"type": "Hostname", "original": "dbprimary", "replacement": "host-a"}],
            }
        )

        with patch("litellm.acompletion", new_callable=AsyncMock) as acompletion:
            acompletion.return_value = litellm_response(content)
            result = await provider.sanitize("user dbprimary", SanitizationOptions())

        assert result.success is True
        assert result.sanitized_text == "user host-a"
        kwargs = acompletion.call_args.kwargs
        assert kwargs["model"] == "anthropic/claude-3-5-sonnet-20241022"
        assert kwargs["api_key"] == "test-key"
        assert kwargs["messages"][1] == {"role": "user", "content": "user dbprimary"}

    @pytest.mark.asyncio
    async def test_analyze(self, provider: LiteLLMProvider) -> None:
        """Test analysis output passes through."""
        content = json.dumps({"items": [{"type": "Email", "value": "a@b.io"}], "model": "claude"})

        with patch("litellm.acompletion", new_callable=AsyncMock) as acompletion:
            acompletion.return_value = litellm_response(content)
            payload = json.loads(await provider.analyze_text("a@b.io", SensitiveDataOptions()))

        assert payload["items"][0]["value"] == "a@b.io"
        assert payload["model"] == "claude"

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(
        self, provider: LiteLLMProvider, no_sleep: AsyncMock
    ) -> None:
        """Test recovery after a rate limit."""
        content = json.dumps({"sanitizedText": "clean", "mappings": []})

        with patch("litellm.acompletion", new_callable=AsyncMock) as acompletion:
            acompletion.side_effect = [Exception("Rate limit exceeded"), litellm_response(content)]
            result = await provider.sanitize("dirty", SanitizationOptions())

        assert result.success is True
        assert acompletion.await_count == 2

    @pytest.mark.asyncio
    async def test_authentication_error_not_retried(
        self, provider: LiteLLMProvider, no_sleep: AsyncMock
    ) -> None:
        """Test that auth failures fail at once."""
        with patch("litellm.acompletion", new_callable=AsyncMock) as acompletion:
            acompletion.side_effect = Exception("Authentication failed: invalid API key")
            result = await provider.sanitize("dirty", SanitizationOptions())

        assert result.success is False
        assert "Authentication failed" in result.error
        assert acompletion.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_content_is_error(self, provider: LiteLLMProvider) -> None:
        """Test a response without message content."""
        response = MagicMock()
        response.choices = []

        with patch("litellm.acompletion", new_callable=AsyncMock) as acompletion:
            acompletion.return_value = response
            result = await provider.sanitize("dirty", SanitizationOptions())

        assert result.success is False
        assert "message content" in result.error


class TestLiteLLMErrorMapping:
    """Test suite for LiteLLM error mapping."""

    @pytest.fixture
    def provider(self) -> LiteLLMProvider:
        return LiteLLMProvider(model="openai/gpt-4o-mini")

    def test_rate_limit_with_retry_after(self, provider: LiteLLMProvider) -> None:
        """Test 429 with a Retry-After header."""
        error = provider._map_error(StatusError("slow down", 429, {"retry-after": "12"}))

        assert isinstance(error, RateLimitError)
        assert error.retry_after == 12.0

    @pytest.mark.parametrize("status", [408, 500, 502, 503, 504])
    def test_retryable_status(self, provider: LiteLLMProvider, status: int) -> None:
        """Test that gateway and timeout statuses are transient."""
        error = provider._map_error(StatusError("upstream", status))

        assert isinstance(error, TransientProviderError)
        assert error.error_code == f"http_{status}"

    def test_auth_status(self, provider: LiteLLMProvider) -> None:
        """Test 401."""
        assert isinstance(provider._map_error(StatusError("nope", 401)), AuthenticationError)

    def test_bad_request(self, provider: LiteLLMProvider) -> None:
        """Test 400."""
        assert isinstance(provider._map_error(StatusError("nope", 400)), InvalidRequestError)

    def test_unknown(self, provider: LiteLLMProvider) -> None:
        """Test that other errors are not retried."""
        error = provider._map_error(ValueError("something odd"))

        assert type(error) is AIProviderError
        assert error.error_code == "unknown_error"
        assert error.details["original_error"] == "ValueError"
