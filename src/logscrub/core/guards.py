"""False-positive guard for hostnames proposed by AI models."""

import re
import string

from .models import MappingEntry, SensitiveCategory


def _is_digit_group(segment: str) -> bool:
    # Empty groups count, so "10::42" is still time-like
    return all(c in string.digits for c in segment)


def looks_like_false_positive_hostname(value: str | None) -> bool:
    """
    Check whether a value flagged as a hostname is really something else.

    Values containing a space, and colon-separated groups of digits such as
    time-of-day stamps (``10:15:42``), are never hostnames.

    Args:
        value: Candidate hostname

    Returns:
        True if the value must not be treated as a hostname
    """
    value = (value or "").strip()
    if not value:
        return False

    if " " in value:
        return True

    if ":" in value:
        segments = value.split(":")
        if len(segments) >= 2 and all(_is_digit_group(s) for s in segments):
            return True

    return False


def is_hostname_type(mapping_type: str | None) -> bool:
    """Match ``Hostname`` and prefixed forms such as ``Local.Hostname``, ignoring case."""
    if not mapping_type:
        return False
    name = mapping_type.rsplit(".", 1)[-1]
    return name.lower() == SensitiveCategory.HOSTNAME.value.lower()


def is_false_positive_hostname(mapping: MappingEntry) -> bool:
    """Check whether a mapping is a hostname classification known to be wrong."""
    return is_hostname_type(mapping.type) and looks_like_false_positive_hostname(
        mapping.original
    )


def _replace_token(text: str, token: str, value: str) -> str:
    """Replace whole-token occurrences only; ``host1`` inside ``host1.example.local`` stays."""
    pattern = re.compile(rf"(?<![\w.-]){re.escape(token)}(?![\w-]|\.\w)")
    return pattern.sub(lambda _: value, text)


def revert_false_positives(
    text: str, mappings: list[MappingEntry]
) -> tuple[str, list[MappingEntry]]:
    """
    Undo false-positive hostname replacements.

    Args:
        text: Sanitized text that may contain wrongly applied replacements
        mappings: Mappings proposed for that text

    Returns:
        Tuple of (text with false positives restored, remaining mappings)
    """
    kept: list[MappingEntry] = []
    for mapping in mappings:
        if is_false_positive_hostname(mapping):
            if mapping.replacement:
                text = _replace_token(text, mapping.replacement, mapping.original)
            continue
        kept.append(mapping)
    return text, kept
