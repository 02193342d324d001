"""Best-effort parsing of JSON returned by language models."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from logscrub.core.models import MappingEntry

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


@dataclass
class ParsedJson:
    """Outcome of a best-effort parse. `data` is None when the content was unreadable."""

    raw: str
    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None


def parse_json_object(content: str | None) -> ParsedJson:
    """
    Parse a JSON object from model output without raising.

    Markdown code fences are stripped, and if the content still does not
    parse, the outermost ``{...}`` span is tried.

    Args:
        content: Raw model output

    Returns:
        ParsedJson with `data` set on success, or `error` set and the raw
        content kept on failure
    """
    raw = content or ""
    text = raw.strip()
    if not text:
        return ParsedJson(raw=raw, error="Empty content")

    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    attempts = [text]
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end and (start, end) != (0, len(text) - 1):
        attempts.append(text[start : end + 1])

    error = "No JSON object found"
    for attempt in attempts:
        try:
            data = json.loads(attempt)
        except json.JSONDecodeError as e:
            error = f"Invalid JSON: {e}"
            continue
        if isinstance(data, dict):
            return ParsedJson(raw=raw, data=data)
        error = f"Expected a JSON object, got {type(data).__name__}"

    return ParsedJson(raw=raw, error=error)


def read_mappings(data: dict[str, Any]) -> list[MappingEntry]:
    """Read the `mappings` array, skipping entries without an original or replacement."""
    entries = data.get("mappings")
    if not isinstance(entries, list):
        return []

    mappings = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        original = entry.get("original")
        replacement = entry.get("replacement")
        if not isinstance(original, str) or not isinstance(replacement, str):
            continue
        if not original or not replacement:
            continue
        mappings.append(
            MappingEntry(
                type=str(entry.get("type") or "Unknown"),
                original=original,
                replacement=replacement,
            )
        )
    return mappings


def read_sanitized_text(data: dict[str, Any], original: str) -> str:
    """
    Read `sanitizedText`, falling back to the original when it is missing.

    Leading and trailing whitespace of the original is restored, since models
    tend to trim it and chunk concatenation depends on it.
    """
    sanitized = data.get("sanitizedText")
    if not isinstance(sanitized, str) or not sanitized.strip() or not original.strip():
        return original

    leading = original[: len(original) - len(original.lstrip())]
    trailing = original[len(original.rstrip()) :]
    return leading + sanitized.strip() + trailing
