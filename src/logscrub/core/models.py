"""Data model shared by the detector, the AI providers and the pipeline."""

import json
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class SensitiveCategory(str, Enum):
    """Categories of sensitive data recognised across local and AI detection."""

    EMAIL = "Email"
    IP_ADDRESS = "IpAddress"
    HOSTNAME = "Hostname"
    API_KEY = "ApiKey"
    GUID = "Guid"
    SSH_KEY = "SshKey"
    SSH_FINGERPRINT = "SshFingerprint"

    @property
    def local_type(self) -> str:
        """Mapping type used for replacements made by the local detector."""
        return f"Local.{self.value}"


@dataclass(frozen=True)
class MappingEntry:
    """One detected sensitive value and the mock value that replaced it."""

    type: str
    original: str
    replacement: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class SensitiveDataOptions:
    """Per-category toggles for detection. `detect_ssh_keys` covers keys and fingerprints."""

    detect_emails: bool = True
    detect_ip_addresses: bool = True
    detect_hostnames: bool = True
    detect_api_keys: bool = True
    detect_guids: bool = True
    detect_ssh_keys: bool = True

    def enabled_categories(self) -> list[SensitiveCategory]:
        """Return enabled categories in detection order."""
        toggles = [
            (self.detect_emails, [SensitiveCategory.EMAIL]),
            (self.detect_ip_addresses, [SensitiveCategory.IP_ADDRESS]),
            (self.detect_hostnames, [SensitiveCategory.HOSTNAME]),
            (self.detect_api_keys, [SensitiveCategory.API_KEY]),
            (self.detect_guids, [SensitiveCategory.GUID]),
            (
                self.detect_ssh_keys,
                [SensitiveCategory.SSH_KEY, SensitiveCategory.SSH_FINGERPRINT],
            ),
        ]
        return [category for enabled, group in toggles if enabled for category in group]


@dataclass(frozen=True)
class SanitizationOptions:
    """
    Instructions for the AI provider about what to keep and what to mask.

    These are advisory: they are rendered into the sanitization prompt and are
    not verified against the model output.
    """

    preserve_timestamps: bool = True
    preserve_log_level: bool = True
    mask_emails: bool = True
    mask_ip_addresses: bool = True
    mask_hostnames: bool = True
    mask_api_keys: bool = True
    mask_guids: bool = True
    mask_ssh_keys: bool = True


@dataclass(frozen=True)
class LocalDetectionResult:
    """Output of the local regex pre-filter."""

    original_text: str
    prefiltered_text: str
    mappings: tuple[MappingEntry, ...] = ()


@dataclass
class SanitizationResult:
    """Output of a single AI provider sanitization call (one chunk or the whole text)."""

    original_text: str
    sanitized_text: str
    mappings: list[MappingEntry] = field(default_factory=list)
    success: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, text: str, error: str) -> "SanitizationResult":
        """Build a failed result that leaves the text untouched."""
        return cls(original_text=text, sanitized_text=text, success=False, error=error)


@dataclass
class SanitizationPipelineResult:
    """Aggregate result of one pipeline invocation. The only artifact callers consume."""

    original_text: str
    prefiltered_text: str
    sanitized_text: str
    mappings: list[MappingEntry]
    provider_name: str
    ai_provider_name: str | None
    used_ai_successfully: bool
    ai_error: str | None
    analysis_json: str | None
    local_replacement_count: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mappings"] = [m.to_dict() for m in self.mappings]
        return data


@dataclass(frozen=True)
class SensitiveItem:
    """A sensitive value reported by an AI analysis call."""

    type: str
    value: str
    start: int
    length: int


@dataclass
class SensitiveDataAnalysis:
    """Parsed form of the raw analysis payload returned by a provider."""

    items: list[SensitiveItem] = field(default_factory=list)
    raw_model_response: str = ""
    model_name: str = ""
    success: bool = False
    error: str | None = None

    @classmethod
    def from_json(cls, raw: str | None) -> "SensitiveDataAnalysis":
        """
        Parse an analysis payload without raising.

        Args:
            raw: Raw JSON string returned by `analyze_text`

        Returns:
            Parsed analysis; `success` is False when the payload is missing,
            unreadable, or carries an `error` field
        """
        if not raw:
            return cls(raw_model_response=raw or "", error="Empty analysis payload")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Analysis payload is not valid JSON: {e}")
            return cls(raw_model_response=raw, error=f"Invalid JSON: {e}")

        if not isinstance(data, dict):
            return cls(raw_model_response=raw, error="Analysis payload is not a JSON object")

        if data.get("error"):
            return cls(raw_model_response=raw, error=str(data["error"]))

        entries = data.get("items")
        if entries is not None and not isinstance(entries, list):
            return cls(raw_model_response=raw, error="Analysis 'items' is not a list")

        items = []
        for entry in entries or []:
            if not isinstance(entry, dict) or not entry.get("value"):
                continue
            try:
                start = int(entry.get("start", 0))
                length = int(entry.get("length", len(entry["value"])))
            except (TypeError, ValueError):
                start, length = 0, len(entry["value"])
            items.append(
                SensitiveItem(
                    type=str(entry.get("type", "Unknown")),
                    value=str(entry["value"]),
                    start=start,
                    length=length,
                )
            )

        return cls(
            items=items,
            raw_model_response=raw,
            model_name=str(data.get("model") or ""),
            success=True,
        )
