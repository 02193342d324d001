"""LiteLLM provider implementation for unified LLM access."""

from __future__ import annotations

from typing import Any

import litellm

from .base import (
    AIProviderError,
    AuthenticationError,
    InvalidRequestError,
    RateLimitError,
    TransientProviderError,
)
from .chat_completion import ChatCompletionProvider
from .retry import RETRYABLE_STATUS_CODES, RetryPolicy, parse_retry_after


class LiteLLMProvider(ChatCompletionProvider):
    """
    LiteLLM provider implementation.

    Uses the LiteLLM library to reach any model it supports (Anthropic,
    Bedrock, Vertex, ...) with a `provider/model` name. LiteLLM manages its
    own transport, so there is no HTTP client to share or close.
    """

    def __init__(
        self,
        model: str | None,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float = ChatCompletionProvider.DEFAULT_TIMEOUT,
        max_chunk_tokens: int = ChatCompletionProvider.DEFAULT_MAX_CHUNK_TOKENS,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model: LiteLLM model name (e.g., 'anthropic/claude-3-5-sonnet-20241022')
            api_key: API key for the underlying provider (None to use LiteLLM's environment lookup)
            api_base: Base URL override
            timeout: Request timeout in seconds
            max_chunk_tokens: Estimated token budget per request
            retry_policy: Retry behaviour for transient failures
        """
        super().__init__(
            timeout=timeout,
            max_chunk_tokens=max_chunk_tokens,
            retry_policy=retry_policy,
        )
        self.model = (model or "").strip()
        self.api_key = api_key
        self.api_base = api_base

    @classmethod
    def from_settings(cls, settings: Any) -> LiteLLMProvider:
        """Create provider from LogScrub settings."""
        return cls(
            model=settings.litellm_model,
            api_key=settings.litellm_api_key,
            api_base=settings.litellm_api_base,
            timeout=settings.request_timeout_seconds,
            max_chunk_tokens=settings.max_chunk_tokens,
        )

    @property
    def provider_name(self) -> str:
        return "LiteLLM"

    @property
    def is_configured(self) -> bool:
        return bool(self.model)

    @property
    def model_name(self) -> str:
        return self.model

    def _request_params(self, system_prompt: str, text: str, temperature: float) -> dict[str, Any]:
        """Keyword arguments for one `litellm.acompletion` call."""
        params: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ],
            "temperature": temperature,
            "response_format": {"type": "json_object"},
            "timeout": self._timeout,
        }

        # Only add API key and base when set so LiteLLM can use its own defaults
        if self.api_key:
            params["api_key"] = self.api_key
        if self.api_base:
            params["api_base"] = self.api_base

        return params

    async def _complete(self, system_prompt: str, text: str, temperature: float) -> str:
        params = self._request_params(system_prompt, text, temperature)

        async def send() -> Any:
            try:
                return await litellm.acompletion(**params)
            except Exception as e:
                raise self._map_error(e) from e

        response = await self._retry.run(send, provider=self.provider_name, description="request")

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIProviderError(
                message=f"Response did not contain message content: {e}",
                provider=self.provider_name,
                error_code="invalid_envelope",
            ) from e
        if not isinstance(content, str):
            raise AIProviderError(
                message="Response did not contain message content",
                provider=self.provider_name,
                error_code="invalid_envelope",
            )
        return content

    def _map_error(self, error: Exception) -> AIProviderError:
        """
        Convert a LiteLLM exception to our error types.

        Args:
            error: Exception from litellm

        Returns:
            Matching AIProviderError subclass; transient ones are retried
        """
        error_str = str(error)
        error_type = type(error).__name__
        details = {"original_error": error_type}
        status_code = getattr(error, "status_code", None)

        response = getattr(error, "response", None)
        headers = getattr(response, "headers", None) or {}
        retry_after = parse_retry_after(headers.get("retry-after")) if headers else None

        if status_code == 429 or any(
            phrase in error_str.lower() for phrase in ["rate limit", "too many requests"]
        ):
            return RateLimitError(
                message=f"Rate limit exceeded: {error_str}",
                provider=self.provider_name,
                error_code="rate_limit",
                details=details,
                retry_after=retry_after,
            )

        if status_code in RETRYABLE_STATUS_CODES or isinstance(
            error, (litellm.Timeout, litellm.APIConnectionError)
        ):
            return TransientProviderError(
                message=f"{error_type}: {error_str}",
                provider=self.provider_name,
                error_code=f"http_{status_code}" if status_code else "transport_error",
                details=details,
                retry_after=retry_after,
            )

        if status_code in (401, 403) or any(
            phrase in error_str.lower()
            for phrase in ["authentication", "api key", "unauthorized", "invalid_api_key"]
        ):
            return AuthenticationError(
                message=f"Authentication failed: {error_str}",
                provider=self.provider_name,
                error_code="auth_error",
                details=details,
            )

        if status_code == 400 or any(
            phrase in error_str.lower()
            for phrase in ["invalid request", "bad request", "invalid parameter"]
        ):
            return InvalidRequestError(
                message=f"Invalid request: {error_str}",
                provider=self.provider_name,
                error_code="invalid_request",
                details=details,
            )

        return AIProviderError(
            message=f"LLM request failed: {error_str}",
            provider=self.provider_name,
            error_code="unknown_error",
            details=details,
        )
