"""Pytest configuration and shared fixtures."""

import json
import os
from collections.abc import Callable
from typing import Any, Generator

import httpx
import pytest

from logscrub.core.models import (
    SanitizationOptions,
    SanitizationResult,
    SensitiveDataOptions,
)
from logscrub.providers.llm.base import BaseAIProvider


class FakeProvider(BaseAIProvider):
    """In-memory provider that records calls and returns canned results."""

    def __init__(
        self,
        name: str = "Fake",
        configured: bool = True,
        result: SanitizationResult | None = None,
        error: Exception | None = None,
        analysis: str = '{"items": [], "model": "fake"}',
        analysis_error: Exception | None = None,
    ):
        self._name = name
        self._configured = configured
        self.result = result
        self.error = error
        self.analysis = analysis
        self.analysis_error = analysis_error
        self.analyze_calls: list[str] = []
        self.sanitize_calls: list[str] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def analyze_text(self, text: str, options: SensitiveDataOptions) -> str:
        self.analyze_calls.append(text)
        if self.analysis_error:
            raise self.analysis_error
        return self.analysis

    async def sanitize(self, text: str, options: SanitizationOptions) -> SanitizationResult:
        self.sanitize_calls.append(text)
        if self.error:
            raise self.error
        if self.result is None:
            return SanitizationResult(original_text=text, sanitized_text=text, success=True)
        return self.result

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider() -> type[FakeProvider]:
    """The FakeProvider class, for building providers inside tests."""
    return FakeProvider


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before and after test."""
    # Save original environment
    original_env = os.environ.copy()

    # Clear LogScrub and provider environment variables
    env_prefixes = ["LOGSCRUB_", "AZURE_OPENAI_", "OPENAI_", "OLLAMA_"]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            del os.environ[key]

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_env_vars() -> dict[str, str]:
    """Sample environment variables for testing."""
    return {
        "LOGSCRUB_DEFAULT_PROVIDER": "AzureOpenAI",
        "AZURE_OPENAI_ENDPOINT": "https://scrub-test.openai.azure.com",
        "AZURE_OPENAI_KEY": "azure-test-key-12345678901234567890",
        "AZURE_OPENAI_DEPLOYMENT": "gpt-4o",
        "OPENAI_API_KEY": "sk-test-openai-key-12345678901234567890",
        "OLLAMA_MODEL": "qwen2.5",
        "LOGSCRUB_REQUEST_TIMEOUT_SECONDS": "120",
        "LOGSCRUB_MAX_CHUNK_TOKENS": "4000",
    }


@pytest.fixture
def set_env_vars(sample_env_vars: dict[str, str]) -> Generator[dict[str, str], None, None]:
    """Set sample environment variables for testing."""
    for key, value in sample_env_vars.items():
        os.environ[key] = value
    yield sample_env_vars
    # Cleanup is handled by clean_env fixture


def chat_completion_body(payload: dict[str, Any] | str) -> dict[str, Any]:
    """Wrap model output in an OpenAI-style chat completion response body."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }


@pytest.fixture
def completion_body() -> Callable[[dict[str, Any] | str], dict[str, Any]]:
    """Builder for OpenAI-style response bodies."""
    return chat_completion_body


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Builder for an AsyncClient whose requests are answered by a handler function."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return build
