"""Tests for configuration validation functions."""

import pytest

from logscrub.config.validation import (
    validate_chunk_tokens,
    validate_endpoint_url,
    validate_timeout,
)


class TestEndpointValidation:
    """Test suite for endpoint URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://scrub-test.openai.azure.com",
            "http://localhost:11434",
            "https://api.openai.com/v1",
        ],
    )
    def test_valid_urls(self, url: str) -> None:
        """Test valid endpoints."""
        assert validate_endpoint_url(url) is True

    @pytest.mark.parametrize(
        "url", ["", "   ", "localhost:11434", "ftp://files.internal", "https://", "not a url"]
    )
    def test_invalid_urls(self, url: str) -> None:
        """Test invalid endpoints."""
        assert validate_endpoint_url(url) is False


class TestTimeoutValidation:
    """Test suite for timeout validation."""

    def test_valid_timeouts(self) -> None:
        """Test timeouts within range."""
        assert validate_timeout(10) is True
        assert validate_timeout(300) is True
        assert validate_timeout(3600) is True

    def test_invalid_timeouts(self) -> None:
        """Test timeouts outside range."""
        assert validate_timeout(5) is False
        assert validate_timeout(3601) is False


class TestChunkTokenValidation:
    """Test suite for chunk budget validation."""

    def test_range(self) -> None:
        """Test chunk budget boundaries."""
        assert validate_chunk_tokens(256) is True
        assert validate_chunk_tokens(6000) is True
        assert validate_chunk_tokens(128_000) is True
        assert validate_chunk_tokens(255) is False
        assert validate_chunk_tokens(128_001) is False
