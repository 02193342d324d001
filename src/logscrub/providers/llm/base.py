"""Base class and errors for AI providers."""

from abc import ABC, abstractmethod
from typing import Any

from logscrub.core.models import SanitizationOptions, SanitizationResult, SensitiveDataOptions


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.

    Providers implement this interface to analyze and sanitize log text with a
    hosted or local language model (Azure OpenAI, OpenAI-compatible APIs,
    Ollama, LiteLLM). The selector and the pipeline depend only on this
    contract, never on a concrete provider.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Stable identifier used for provider selection."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether the minimum configuration (endpoint, model, ...) is present.

        This does not guarantee that the credential is valid.
        """

    @abstractmethod
    async def analyze_text(self, text: str, options: SensitiveDataOptions) -> str:
        """
        Ask the model which sensitive items the text contains.

        Args:
            text: Text to analyze (already prefiltered)
            options: Detection toggles

        Returns:
            Raw JSON payload, or an error-shaped JSON string on failure.
            Never raises for provider or transport failures.
        """

    @abstractmethod
    async def sanitize(self, text: str, options: SanitizationOptions) -> SanitizationResult:
        """
        Ask the model to rewrite the text with mock values.

        Args:
            text: Text to sanitize (already prefiltered)
            options: Sanitization instructions

        Returns:
            SanitizationResult; `success` is False when the call failed
        """

    async def close(self) -> None:
        """Release transport resources."""
        return None


class AIProviderError(Exception):
    """Base exception for AI provider errors."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize AI provider error.

        Args:
            message: Error message
            provider: Name of the provider (e.g., 'AzureOpenAI', 'Ollama')
            error_code: Provider-specific error code
            details: Additional error details
        """
        self.message = message
        self.provider = provider
        self.error_code = error_code
        self.details = details or {}
        super().__init__(f"AI Provider Error ({provider}): {message}")


class AuthenticationError(AIProviderError):
    """Raised when authentication with the provider fails."""

    pass


class InvalidRequestError(AIProviderError):
    """Raised when the request to the provider is invalid."""

    pass


class TransientProviderError(AIProviderError):
    """Raised for failures worth retrying (timeouts, 408/429/5xx)."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, provider=provider, error_code=error_code, details=details)
        self.retry_after = retry_after


class RateLimitError(TransientProviderError):
    """Raised when the provider rate limit is exceeded (HTTP 429)."""

    pass


class RetryExhaustedError(AIProviderError):
    """Raised when every retry attempt failed."""

    pass
