"""OpenAI (and OpenAI-compatible) provider."""

from __future__ import annotations

from typing import Any

import httpx

from .chat_completion import ChatCompletionProvider, HttpChatCompletionProvider
from .retry import RetryPolicy


class OpenAIProvider(HttpChatCompletionProvider):
    """
    Provider for the OpenAI chat-completions API or any compatible service.

    Point `base_url` at a self-hosted gateway to use an OpenAI-compatible
    server. Configured when an API key is present.
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = ChatCompletionProvider.DEFAULT_TIMEOUT,
        max_chunk_tokens: int = ChatCompletionProvider.DEFAULT_MAX_CHUNK_TOKENS,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        super().__init__(
            timeout=timeout,
            max_chunk_tokens=max_chunk_tokens,
            http_client=http_client,
            retry_policy=retry_policy,
        )
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

    @classmethod
    def from_settings(cls, settings: Any) -> OpenAIProvider:
        """Create provider from LogScrub settings."""
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
            max_chunk_tokens=settings.max_chunk_tokens,
        )

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def model_name(self) -> str:
        return self.model

    def _build_request(
        self, system_prompt: str, text: str, temperature: float
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ],
            "temperature": temperature,
            "response_format": {"type": "json_object"},
        }
        return f"{self.base_url}/chat/completions", headers, payload
