"""Tests for the false-positive hostname guard."""

import pytest

from logscrub.core.guards import (
    is_false_positive_hostname,
    is_hostname_type,
    looks_like_false_positive_hostname,
    revert_false_positives,
)
from logscrub.core.models import MappingEntry


class TestLooksLikeFalsePositiveHostname:
    """Test suite for looks_like_false_positive_hostname."""

    @pytest.mark.parametrize("value", ["10:15:42", "10:15", "00:00:00:00", " 23:59:59 "])
    def test_time_values(self, value: str) -> None:
        """Test that colon-separated digit groups are rejected."""
        assert looks_like_false_positive_hostname(value) is True

    @pytest.mark.parametrize("value", ["10::42", "10:15:"])
    def test_empty_digit_groups(self, value: str) -> None:
        """Test that empty groups between colons still count as digits."""
        assert looks_like_false_positive_hostname(value) is True

    def test_non_ascii_digits_are_not_time_like(self) -> None:
        """Test that only ASCII digits form a time-like value."""
        assert looks_like_false_positive_hostname("１０:１５") is False

    def test_value_with_space(self) -> None:
        """Test that values with inner spaces are rejected."""
        assert looks_like_false_positive_hostname("db01 internal") is True

    @pytest.mark.parametrize(
        "value", ["db01.internal.net", "host:8080", "fe80::1", "10:15:4a", "", None]
    )
    def test_plausible_or_empty_values(self, value: str | None) -> None:
        """Test that other values are not flagged."""
        assert looks_like_false_positive_hostname(value) is False


class TestIsHostnameType:
    """Test suite for is_hostname_type."""

    @pytest.mark.parametrize("mapping_type", ["Hostname", "hostname", "Local.Hostname", "AI.HOSTNAME"])
    def test_hostname_types(self, mapping_type: str) -> None:
        """Test matching ignores case and prefixes."""
        assert is_hostname_type(mapping_type) is True

    @pytest.mark.parametrize("mapping_type", ["Email", "Local.IpAddress", "Hostnames", "", None])
    def test_other_types(self, mapping_type: str | None) -> None:
        """Test that other types do not match."""
        assert is_hostname_type(mapping_type) is False

    def test_is_false_positive_hostname_needs_both(self) -> None:
        """Test that only hostname mappings with time-like values are flagged."""
        assert is_false_positive_hostname(MappingEntry("Hostname", "10:15:42", "h1")) is True
        assert is_false_positive_hostname(MappingEntry("Email", "10:15:42", "h1")) is False
        assert is_false_positive_hostname(MappingEntry("Hostname", "db01.net", "h1")) is False


class TestRevertFalsePositives:
    """Test suite for revert_false_positives."""

    def test_reverts_text_and_drops_mapping(self) -> None:
        """Test that the wrongly replaced time is restored."""
        mappings = [
            MappingEntry("Hostname", "10:15:42", "host9.example.local"),
            MappingEntry("Hostname", "db01.internal.net", "host1.example.local"),
        ]
        text, kept = revert_false_positives(
            "host9.example.local ERROR connection to host1.example.local failed", mappings
        )

        assert text == "10:15:42 ERROR connection to host1.example.local failed"
        assert kept == [mappings[1]]

    def test_missing_replacement_only_drops_mapping(self) -> None:
        """Test that the text is untouched when the replacement does not occur."""
        mappings = [MappingEntry("Hostname", "10:15:42", "host9.example.local")]
        text, kept = revert_false_positives("nothing to revert", mappings)

        assert text == "nothing to revert"
        assert kept == []

    def test_no_mappings(self) -> None:
        """Test an empty mapping list."""
        assert revert_false_positives("text", []) == ("text", [])

    def test_only_whole_tokens_are_reverted(self) -> None:
        """Test that a short replacement inside a longer mock value is left alone."""
        mappings = [MappingEntry("Hostname", "10:15", "host1")]
        text, kept = revert_false_positives("host1 host1 ok host1.example.local", mappings)

        assert text == "10:15 10:15 ok host1.example.local"
        assert kept == []

    def test_token_at_sentence_end_is_reverted(self) -> None:
        """Test that trailing punctuation does not block the revert."""
        mappings = [MappingEntry("Hostname", "10:15:42", "timehost")]
        text, _ = revert_false_positives("started at timehost.", mappings)

        assert text == "started at 10:15:42."
