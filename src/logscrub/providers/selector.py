"""Selection of the AI provider used for a sanitization request."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from logscrub.providers.llm.base import BaseAIProvider

logger = logging.getLogger(__name__)


class NoConfiguredProviderError(Exception):
    """Raised when no registered provider is configured."""

    def __init__(self, message: str, registered: list[str] | None = None):
        self.message = message
        self.registered = registered or []
        super().__init__(message)


class ProviderSelector:
    """
    Registry of AI providers that resolves which one serves a request.

    Resolution runs on every call; nothing is cached, since provider
    configuration may change between requests.
    """

    def __init__(
        self,
        providers: Iterable[BaseAIProvider] | None = None,
        default_provider: str | None = None,
    ):
        """
        Initialize selector.

        Args:
            providers: Providers in registration (fallback) order
            default_provider: Name used when the caller has no preference
        """
        self._providers: list[BaseAIProvider] = []
        self.default_provider = default_provider
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: BaseAIProvider) -> None:
        """
        Register a provider after the existing ones.

        Raises:
            ValueError: If a provider with the same name is already registered
        """
        if self.get(provider.provider_name) is not None:
            raise ValueError(
                f"Provider '{provider.provider_name}' is already registered. "
                "Each provider must have a unique name."
            )
        self._providers.append(provider)

    def get(self, name: str) -> BaseAIProvider | None:
        """Look up a registered provider by name, ignoring case."""
        wanted = name.strip().lower()
        for provider in self._providers:
            if provider.provider_name.lower() == wanted:
                return provider
        return None

    def get_all(self) -> list[BaseAIProvider]:
        """Get all registered providers in registration order."""
        return list(self._providers)

    def _candidate_names(self, preferred: str | None) -> Iterator[str]:
        if preferred and preferred.strip():
            yield preferred.strip()
        default = (self.default_provider or "").strip()
        if default and default.lower() != (preferred or "").strip().lower():
            yield default

    def get_provider(self, preferred: str | None = None) -> BaseAIProvider:
        """
        Resolve the provider for a request.

        The preferred name is tried first, then the configured default. A
        named provider that is missing or not configured is skipped. If no
        named candidate resolves, the first configured provider in
        registration order is used.

        Args:
            preferred: Provider name requested by the caller

        Returns:
            A configured provider

        Raises:
            NoConfiguredProviderError: If no registered provider is configured
        """
        if not self._providers:
            raise NoConfiguredProviderError("No AI providers are registered.")

        for candidate in self._candidate_names(preferred):
            match = self.get(candidate)
            if match is None:
                logger.warning(
                    f"AI provider '{candidate}' was requested but not registered. "
                    "Attempting fallback to another configured provider."
                )
                continue
            if match.is_configured:
                logger.info(f"Using AI provider '{match.provider_name}'.")
                return match
            logger.warning(
                f"AI provider '{match.provider_name}' is registered but not fully configured. "
                "Attempting fallback to another configured provider."
            )

        for provider in self._providers:
            if provider.is_configured:
                logger.info(f"Using fallback AI provider '{provider.provider_name}'.")
                return provider

        registered = [p.provider_name for p in self._providers]
        raise NoConfiguredProviderError(
            "No configured AI providers are available. "
            f"Registered providers: {', '.join(registered)}.",
            registered=registered,
        )

    def describe(self) -> list[dict[str, Any]]:
        """Summarize registered providers for display."""
        return [
            {
                "name": p.provider_name,
                "configured": p.is_configured,
                "default": bool(self.default_provider)
                and p.provider_name.lower() == self.default_provider.lower(),
            }
            for p in self._providers
        ]

    async def close(self) -> None:
        """Close every registered provider."""
        for provider in self._providers:
            await provider.close()


def build_default_selector(settings: Any) -> ProviderSelector:
    """
    Build a selector with every built-in provider, configured from settings.

    Args:
        settings: LogScrub settings instance

    Returns:
        Selector with AzureOpenAI, OpenAI, Ollama and LiteLLM registered in that order
    """
    from logscrub.providers.llm import (
        AzureOpenAIProvider,
        LiteLLMProvider,
        OllamaProvider,
        OpenAIProvider,
    )

    return ProviderSelector(
        providers=[
            AzureOpenAIProvider.from_settings(settings),
            OpenAIProvider.from_settings(settings),
            OllamaProvider.from_settings(settings),
            LiteLLMProvider.from_settings(settings),
        ],
        default_provider=settings.default_provider,
    )
