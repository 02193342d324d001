"""Configuration settings for LogScrub using Pydantic Settings."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .validation import validate_chunk_tokens, validate_endpoint_url, validate_timeout


class LogScrubSettings(BaseSettings):
    """
    Main configuration settings for LogScrub.

    Provider settings use the environment variable names of each service
    (``AZURE_OPENAI_ENDPOINT``, ``OPENAI_API_KEY``, ``OLLAMA_MODEL``, ...);
    application settings use the ``LOGSCRUB_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOGSCRUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # === Provider Selection ===
    default_provider: str | None = Field(
        default=None,
        description="Provider tried when the caller does not name one",
    )

    # === Azure OpenAI ===
    azure_openai_endpoint: str | None = Field(
        default=None,
        alias="AZURE_OPENAI_ENDPOINT",
        description="Azure OpenAI resource endpoint",
    )

    azure_openai_key: str | None = Field(
        default=None,
        alias="AZURE_OPENAI_KEY",
        description="Azure OpenAI API key",
    )

    azure_openai_deployment: str = Field(
        default="gpt-4o-mini",
        alias="AZURE_OPENAI_DEPLOYMENT",
        description="Azure OpenAI deployment name",
    )

    azure_openai_api_version: str = Field(
        default="2024-08-01-preview",
        alias="AZURE_OPENAI_API_VERSION",
        description="Azure OpenAI REST API version",
    )

    # === OpenAI / OpenAI-compatible ===
    openai_api_key: str | None = Field(
        default=None,
        alias="OPENAI_API_KEY",
        description="OpenAI API key",
    )

    openai_model: str = Field(
        default="gpt-4o-mini",
        alias="OPENAI_MODEL",
        description="OpenAI model to use",
    )

    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        alias="OPENAI_BASE_URL",
        description="Base URL of the OpenAI-compatible API",
    )

    # === Ollama ===
    ollama_endpoint: str | None = Field(
        default="http://localhost:11434",
        alias="OLLAMA_ENDPOINT",
        description="Ollama server URL",
    )

    ollama_model: str | None = Field(
        default="llama3",
        alias="OLLAMA_MODEL",
        description="Ollama model to use",
    )

    # === LiteLLM ===
    litellm_model: str | None = Field(
        default=None,
        description="LiteLLM model name, e.g. 'anthropic/claude-3-5-sonnet-20241022'",
    )

    litellm_api_key: str | None = Field(
        default=None,
        description="API key passed to LiteLLM",
    )

    litellm_api_base: str | None = Field(
        default=None,
        description="Base URL passed to LiteLLM",
    )

    # === Request Settings ===
    request_timeout_seconds: float = Field(
        default=300.0,
        description="Timeout for each provider round trip",
        gt=0,
        le=3600,
    )

    max_chunk_tokens: int = Field(
        default=6000,
        description="Estimated token budget per provider request",
        gt=0,
        le=128_000,
    )

    # === Logging Configuration ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Application log level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator(
        "default_provider",
        "azure_openai_endpoint",
        "azure_openai_key",
        "openai_api_key",
        "ollama_endpoint",
        "ollama_model",
        "litellm_model",
        "litellm_api_key",
        "litellm_api_base",
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank values as unset."""
        if v is not None and len(v.strip()) == 0:
            return None
        return v.strip() if v is not None else None

    @field_validator("log_file")
    @classmethod
    def expand_path(cls, v: Path | None) -> Path | None:
        """Expand user home directory in paths."""
        if v is None:
            return None
        return Path(os.path.expanduser(str(v)))

    def configuration_warnings(self) -> list[str]:
        """
        Check settings that are accepted but unlikely to work.

        Returns:
            Human-readable warnings (empty when everything looks usable)
        """
        warnings = []
        if self.azure_openai_endpoint:
            if not validate_endpoint_url(self.azure_openai_endpoint):
                warnings.append(
                    f"AZURE_OPENAI_ENDPOINT is not an http(s) URL: {self.azure_openai_endpoint}"
                )
            if not self.azure_openai_key:
                warnings.append("AZURE_OPENAI_ENDPOINT is set but AZURE_OPENAI_KEY is missing")
        if self.ollama_endpoint and not validate_endpoint_url(self.ollama_endpoint):
            warnings.append(f"OLLAMA_ENDPOINT is not an http(s) URL: {self.ollama_endpoint}")
        if not validate_endpoint_url(self.openai_base_url):
            warnings.append(f"OPENAI_BASE_URL is not an http(s) URL: {self.openai_base_url}")
        if not validate_timeout(self.request_timeout_seconds):
            warnings.append(
                f"Request timeout of {self.request_timeout_seconds}s is too short for large chunks"
            )
        if not validate_chunk_tokens(self.max_chunk_tokens):
            warnings.append(f"Chunk budget of {self.max_chunk_tokens} tokens is unusually small")
        return warnings


# Global settings instance
_settings: LogScrubSettings | None = None


def get_settings() -> LogScrubSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = LogScrubSettings()  # type: ignore
    return _settings


def reload_settings() -> LogScrubSettings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = LogScrubSettings()  # type: ignore
    return _settings
