"""Token estimation and size-bounded chunking of log text."""

import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str | None) -> int:
    """
    Estimate the token count of text as ceil(characters / 4).

    Args:
        text: Text to measure

    Returns:
        Estimated token count (0 for empty text, at least 1 otherwise)
    """
    if not text:
        return 0
    return max(math.ceil(len(text) / CHARS_PER_TOKEN), 1)


def _find_cut(window: str) -> int:
    """Return the cut offset for a window that does not reach the end of the text."""
    newline = window.rfind("\n")
    if newline >= 0:
        return newline + 1

    carriage_return = window.rfind("\r")
    if carriage_return >= 0:
        return carriage_return + 1

    space = window.rfind(" ")
    if space >= len(window) // 2:
        return space + 1

    return len(window)


def split_into_chunks(text: str, max_tokens: int) -> list[str]:
    """
    Split text into chunks whose estimated size stays within a token budget.

    Boundaries prefer the last newline in the window, then the last carriage
    return, then a space at least halfway through the window, and fall back to
    a hard cut. Joining the returned chunks gives back the input unchanged.

    Args:
        text: Text to split
        max_tokens: Token budget per chunk

    Returns:
        List of chunks in input order (a single chunk if the text fits)

    Raises:
        ValueError: If max_tokens is not positive
    """
    if max_tokens <= 0:
        raise ValueError("max_tokens must be positive")

    if estimate_tokens(text) <= max_tokens:
        return [text]

    window_size = max_tokens * CHARS_PER_TOKEN
    chunks: list[str] = []
    position = 0
    while position < len(text):
        remaining = len(text) - position
        if remaining <= window_size:
            chunks.append(text[position:])
            break
        window = text[position : position + window_size]
        cut = _find_cut(window)
        chunks.append(window[:cut])
        position += cut
    return chunks
