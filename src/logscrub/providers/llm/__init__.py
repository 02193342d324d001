"""AI provider abstractions and implementations."""

from .azure_openai_provider import AzureOpenAIProvider
from .base import (
    AIProviderError,
    AuthenticationError,
    BaseAIProvider,
    InvalidRequestError,
    RateLimitError,
    RetryExhaustedError,
    TransientProviderError,
)
from .chat_completion import ChatCompletionProvider, HttpChatCompletionProvider
from .litellm_provider import LiteLLMProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .retry import RetryPolicy

__all__ = [
    # Base classes and errors
    "BaseAIProvider",
    "ChatCompletionProvider",
    "HttpChatCompletionProvider",
    "AIProviderError",
    "AuthenticationError",
    "InvalidRequestError",
    "RateLimitError",
    "RetryExhaustedError",
    "TransientProviderError",
    "RetryPolicy",
    # Provider implementations
    "AzureOpenAIProvider",
    "OpenAIProvider",
    "OllamaProvider",
    "LiteLLMProvider",
]
