"""Configuration management for LogScrub."""

from .settings import LogScrubSettings, get_settings, reload_settings
from .validation import validate_chunk_tokens, validate_endpoint_url, validate_timeout

__all__ = [
    "LogScrubSettings",
    "get_settings",
    "reload_settings",
    "validate_chunk_tokens",
    "validate_endpoint_url",
    "validate_timeout",
]
