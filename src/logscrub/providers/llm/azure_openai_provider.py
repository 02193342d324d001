"""Azure OpenAI provider."""

from __future__ import annotations

from typing import Any

import httpx

from .chat_completion import ChatCompletionProvider, HttpChatCompletionProvider
from .retry import RetryPolicy


class AzureOpenAIProvider(HttpChatCompletionProvider):
    """
    Provider for an Azure OpenAI chat-completions deployment.

    Considered configured as soon as an endpoint is set; calls additionally
    need an API key, and fail with a configuration error without one.
    """

    DEFAULT_DEPLOYMENT = "gpt-4o-mini"
    DEFAULT_API_VERSION = "2024-08-01-preview"

    def __init__(
        self,
        endpoint: str | None,
        api_key: str | None,
        deployment: str = DEFAULT_DEPLOYMENT,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = ChatCompletionProvider.DEFAULT_TIMEOUT,
        max_chunk_tokens: int = ChatCompletionProvider.DEFAULT_MAX_CHUNK_TOKENS,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize Azure OpenAI provider.

        Args:
            endpoint: Resource endpoint (e.g., 'https://my-resource.openai.azure.com')
            api_key: Azure OpenAI key, sent in the 'api-key' header
            deployment: Deployment name
            api_version: REST API version
            timeout: Request timeout in seconds
            max_chunk_tokens: Estimated token budget per request
            http_client: Pre-built HTTP client (for testing)
            retry_policy: Retry behaviour for transient failures
        """
        super().__init__(
            timeout=timeout,
            max_chunk_tokens=max_chunk_tokens,
            http_client=http_client,
            retry_policy=retry_policy,
        )
        self.endpoint = (endpoint or "").strip()
        self.api_key = api_key
        self.deployment = deployment
        self.api_version = api_version

    @classmethod
    def from_settings(cls, settings: Any) -> AzureOpenAIProvider:
        """
        Create provider from LogScrub settings.

        Args:
            settings: LogScrub settings instance with azure_openai_* fields

        Returns:
            Configured AzureOpenAIProvider instance
        """
        return cls(
            endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_key,
            deployment=settings.azure_openai_deployment,
            api_version=settings.azure_openai_api_version,
            timeout=settings.request_timeout_seconds,
            max_chunk_tokens=settings.max_chunk_tokens,
        )

    @property
    def provider_name(self) -> str:
        return "AzureOpenAI"

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)

    @property
    def model_name(self) -> str:
        return self.deployment

    def _missing_configuration(self) -> str | None:
        if not self.api_key:
            return "AZURE_OPENAI_KEY"
        return None

    def _build_request(
        self, system_prompt: str, text: str, temperature: float
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = (
            f"{self.endpoint.rstrip('/')}/openai/deployments/{self.deployment}"
            f"/chat/completions?api-version={self.api_version}"
        )
        headers = {"api-key": self.api_key or "", "Content-Type": "application/json"}
        payload = {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ],
            "temperature": temperature,
            "response_format": {"type": "json_object"},
        }
        return url, headers, payload
