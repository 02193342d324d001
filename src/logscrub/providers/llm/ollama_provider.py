"""Local model provider backed by an Ollama server."""

from __future__ import annotations

from typing import Any

import httpx

from .chat_completion import ChatCompletionProvider, HttpChatCompletionProvider
from .retry import RetryPolicy


class OllamaProvider(HttpChatCompletionProvider):
    """
    Provider for a local Ollama server using the /api/chat endpoint.

    Requests set ``format: "json"``; models that ignore it are still parsed on
    a best-effort basis.
    """

    DEFAULT_ENDPOINT = "http://localhost:11434"
    DEFAULT_MODEL = "llama3"

    def __init__(
        self,
        endpoint: str | None = DEFAULT_ENDPOINT,
        model: str | None = DEFAULT_MODEL,
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
        self.endpoint = (endpoint or "").strip().rstrip("/")
        self.model = (model or "").strip()

    @classmethod
    def from_settings(cls, settings: Any) -> OllamaProvider:
        """Create provider from LogScrub settings."""
        return cls(
            endpoint=settings.ollama_endpoint,
            model=settings.ollama_model,
            timeout=settings.request_timeout_seconds,
            max_chunk_tokens=settings.max_chunk_tokens,
        )

    @property
    def provider_name(self) -> str:
        return "Ollama"

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.model)

    @property
    def model_name(self) -> str:
        return self.model

    def _build_request(
        self, system_prompt: str, text: str, temperature: float
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ],
            "format": "json",
            "stream": False,
            "options": {"temperature": temperature},
        }
        return f"{self.endpoint}/api/chat", {"Content-Type": "application/json"}, payload

    def _extract_content(self, body: dict[str, Any]) -> str | None:
        message = body.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None
