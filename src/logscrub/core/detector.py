"""Local regex pre-filter that replaces sensitive values before any AI call."""

import base64
import hashlib
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import LocalDetectionResult, MappingEntry, SensitiveCategory, SensitiveDataOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    start: int
    length: int
    category: SensitiveCategory
    original: str
    replacement: str

    @property
    def end(self) -> int:
        return self.start + self.length


def _is_valid_ipv4(value: str) -> bool:
    parts = value.split(".")
    if len(parts) != 4:
        return False
    return all(part.isdigit() and 0 <= int(part) <= 255 for part in parts)


def _is_valid_hostname(value: str) -> bool:
    if " " in value or ":" in value:
        return False
    if not any(c.isalpha() for c in value):
        return False

    labels = value.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if not 1 <= len(label) <= 63:
            return False
        if not (label[0].isalnum() and label[-1].isalnum()):
            return False
        if not all(c.isalnum() or c == "-" for c in label):
            return False

    # Top-level labels are never numeric (rules out versions like v1.2.3)
    return not labels[-1].isdigit()


def _mock_ip(index: int) -> str:
    if index <= 254:
        return f"10.0.0.{index}"
    return f"10.0.{index // 254}.{index % 254 + 1}"


def _mock_ssh_key(index: int, original: str) -> str:
    algorithm = original.split(None, 1)[0]
    body = b"".join(
        hashlib.sha256(f"logscrub-ssh-key-{index}-{block}".encode()).digest() for block in range(4)
    )
    return f"{algorithm} AAAA{base64.b64encode(body).decode('ascii')}"


def _mock_ssh_fingerprint(index: int, original: str) -> str:
    seed = f"logscrub-ssh-fingerprint-{index}".encode()
    if original.upper().startswith("SHA256:"):
        digest = base64.b64encode(hashlib.sha256(seed).digest()).decode("ascii").rstrip("=")
        return f"SHA256:{digest}"

    hex_digest = hashlib.md5(seed, usedforsecurity=False).hexdigest()
    pairs = ":".join(hex_digest[i : i + 2] for i in range(0, len(hex_digest), 2))
    if original.upper().startswith("MD5:"):
        return f"MD5:{pairs}"
    return pairs


class LocalSensitiveDataDetector:
    """
    Regex-based detector that swaps sensitive values for deterministic mock values.

    Every call starts its per-category counters at 1, so identical input with
    identical options always produces identical output.
    """

    PATTERNS: dict[SensitiveCategory, re.Pattern[str]] = {
        SensitiveCategory.EMAIL: re.compile(
            r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE
        ),
        SensitiveCategory.IP_ADDRESS: re.compile(r"\b(?:[0-9]{1,3}\.){3}[0-9]{1,3}\b"),
        SensitiveCategory.HOSTNAME: re.compile(
            r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9-]{1,63})+"
        ),
        # Heuristic: long base64-ish tokens
        SensitiveCategory.API_KEY: re.compile(r"[A-Za-z0-9_-]{24,64}"),
        SensitiveCategory.GUID: re.compile(
            r"[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}"
        ),
        SensitiveCategory.SSH_KEY: re.compile(
            r"\b(?:ssh-(?:rsa|dss|ed25519)|ecdsa-sha2-nistp(?:256|384|521))\s+AAAA[A-Za-z0-9+/]+={0,3}"
        ),
        SensitiveCategory.SSH_FINGERPRINT: re.compile(
            r"SHA256:[A-Za-z0-9+/]{43}=?|\b(?:MD5:)?[0-9a-fA-F]{2}(?::[0-9a-fA-F]{2}){15}\b"
        ),
    }

    VALIDATORS: dict[SensitiveCategory, Callable[[str], bool]] = {
        SensitiveCategory.IP_ADDRESS: _is_valid_ipv4,
        SensitiveCategory.HOSTNAME: _is_valid_hostname,
    }

    MOCK_FACTORIES: dict[SensitiveCategory, Callable[[int, str], str]] = {
        SensitiveCategory.EMAIL: lambda i, _: f"user{i}@example.com",
        SensitiveCategory.IP_ADDRESS: lambda i, _: _mock_ip(i),
        SensitiveCategory.HOSTNAME: lambda i, _: f"host{i}.example.local",
        SensitiveCategory.API_KEY: lambda i, _: f"APIKEY_REDACTED_{i}",
        SensitiveCategory.GUID: lambda i, _: f"00000000-0000-0000-0000-{i:012d}",
        SensitiveCategory.SSH_KEY: _mock_ssh_key,
        SensitiveCategory.SSH_FINGERPRINT: _mock_ssh_fingerprint,
    }

    # Tie-break when two categories match the exact same span: earlier wins
    CATEGORY_PRECEDENCE: list[SensitiveCategory] = [
        SensitiveCategory.SSH_KEY,
        SensitiveCategory.SSH_FINGERPRINT,
        SensitiveCategory.EMAIL,
        SensitiveCategory.GUID,
        SensitiveCategory.IP_ADDRESS,
        SensitiveCategory.HOSTNAME,
        SensitiveCategory.API_KEY,
    ]

    def detect_and_replace(
        self, text: str | None, options: SensitiveDataOptions | None = None
    ) -> LocalDetectionResult:
        """
        Detect sensitive values and replace them with mock values.

        Args:
            text: Raw log text
            options: Category toggles (all enabled by default)

        Returns:
            LocalDetectionResult with the prefiltered text and one mapping per
            unique (type, original) pair that was replaced
        """
        if not text:
            return LocalDetectionResult(original_text=text or "", prefiltered_text=text or "")

        options = options or SensitiveDataOptions()
        candidates = self._collect_candidates(text, options)
        applied = self._resolve_overlaps(candidates)

        # Apply from the end so earlier offsets stay valid
        result = text
        for candidate in reversed(applied):
            result = result[: candidate.start] + candidate.replacement + result[candidate.end :]

        mappings: list[MappingEntry] = []
        seen: set[tuple[str, str]] = set()
        for candidate in applied:
            key = (candidate.category.value, candidate.original)
            if key in seen:
                continue
            seen.add(key)
            mappings.append(
                MappingEntry(
                    type=candidate.category.local_type,
                    original=candidate.original,
                    replacement=candidate.replacement,
                )
            )

        logger.debug(
            f"Local detector applied {len(applied)} replacements "
            f"({len(mappings)} unique values, {len(candidates)} candidates)"
        )

        return LocalDetectionResult(
            original_text=text,
            prefiltered_text=result,
            mappings=tuple(mappings),
        )

    def _collect_candidates(
        self, text: str, options: SensitiveDataOptions
    ) -> list[_Candidate]:
        """Run every enabled pattern and allocate mock values per (type, original)."""
        candidates: list[_Candidate] = []
        allocated: dict[str, str] = {}

        for category in options.enabled_categories():
            pattern = self.PATTERNS[category]
            validator = self.VALIDATORS.get(category)
            mock_factory = self.MOCK_FACTORIES[category]
            counter = 0

            for match in pattern.finditer(text):
                original = match.group(0)
                if validator is not None and not validator(original):
                    continue

                key = f"{category.value}|{original}"
                replacement = allocated.get(key)
                if replacement is None:
                    counter += 1
                    replacement = mock_factory(counter, original)
                    allocated[key] = replacement

                candidates.append(
                    _Candidate(
                        start=match.start(),
                        length=len(original),
                        category=category,
                        original=original,
                        replacement=replacement,
                    )
                )

        return candidates

    def _resolve_overlaps(self, candidates: list[_Candidate]) -> list[_Candidate]:
        """Keep the earliest, longest candidate wherever matches overlap."""
        rank = {category: i for i, category in enumerate(self.CATEGORY_PRECEDENCE)}
        ordered = sorted(candidates, key=lambda c: (c.start, -c.length, rank[c.category]))

        kept: list[_Candidate] = []
        current_end = -1
        for candidate in ordered:
            if candidate.start < current_end:
                continue
            kept.append(candidate)
            current_end = candidate.end
        return kept
