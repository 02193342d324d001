"""AI providers and provider selection."""

from .selector import NoConfiguredProviderError, ProviderSelector, build_default_selector

__all__ = ["NoConfiguredProviderError", "ProviderSelector", "build_default_selector"]
