"""Validation functions for configuration values."""

from urllib.parse import urlparse


def validate_endpoint_url(url: str) -> bool:
    """
    Validate that an endpoint is an absolute http(s) URL.

    Args:
        url: Endpoint URL

    Returns:
        True if valid, False otherwise
    """
    if not url or not url.strip():
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_timeout(timeout_seconds: float) -> bool:
    """
    Validate a request timeout is long enough for model latency.

    Args:
        timeout_seconds: Timeout in seconds

    Returns:
        True if valid, False otherwise
    """
    # Minimum 10 seconds, maximum 1 hour
    return 10 <= timeout_seconds <= 3600


def validate_chunk_tokens(max_tokens: int) -> bool:
    """
    Validate a per-request token budget.

    Args:
        max_tokens: Estimated tokens per chunk

    Returns:
        True if valid, False otherwise
    """
    return 256 <= max_tokens <= 128_000
