"""System prompts shared by every AI provider."""

from logscrub.core.models import SanitizationOptions, SensitiveCategory, SensitiveDataOptions

CATEGORY_NAMES = ", ".join(category.value for category in SensitiveCategory)

ANALYSIS_PROMPT = f"""\
You are a log privacy assistant. Extract potentially sensitive items from the user content. Return ONLY JSON:
{{
    "items": [ {{ "type": string, "value": string, "start": number, "length": number }} ],
    "model": string
}}
Types to detect: {CATEGORY_NAMES}. If none, items = [].
Rules:
- Hostname values must resemble real DNS names (letters, digits, hyphen) and contain at least one dot-separated label.
- Do NOT classify timestamps, times of day, or purely numeric colon-separated values (e.g. 10:15:42) as hostnames.
- Values that already look like mock placeholders (user1@example.com, 10.0.0.1, host1.example.local, APIKEY_REDACTED_1) are not sensitive.
"""

SANITIZATION_PROMPT = f"""\
You sanitize log text. Return ONLY JSON:
{{
    "sanitizedText": string,
    "mappings": [ {{ "type": string, "original": string, "replacement": string }} ]
}}
Types: {CATEGORY_NAMES}.
Guidelines:
- Replace sensitive values with realistic mock equivalents.
- If a sensitive value has already been replaced with a mock placeholder, keep it unchanged and do not create a new mapping entry.
- Reuse the same replacement for every occurrence of the same value.
- Do NOT alter timestamps or time-of-day values; leave them unchanged even if they resemble hostnames.
- Keep every line, and the line order, of the input.
"""

_DETECTION_TOGGLES = [
    ("detect_emails", [SensitiveCategory.EMAIL]),
    ("detect_ip_addresses", [SensitiveCategory.IP_ADDRESS]),
    ("detect_hostnames", [SensitiveCategory.HOSTNAME]),
    ("detect_api_keys", [SensitiveCategory.API_KEY]),
    ("detect_guids", [SensitiveCategory.GUID]),
    ("detect_ssh_keys", [SensitiveCategory.SSH_KEY, SensitiveCategory.SSH_FINGERPRINT]),
]

_MASK_TOGGLES = [
    ("mask_emails", [SensitiveCategory.EMAIL]),
    ("mask_ip_addresses", [SensitiveCategory.IP_ADDRESS]),
    ("mask_hostnames", [SensitiveCategory.HOSTNAME]),
    ("mask_api_keys", [SensitiveCategory.API_KEY]),
    ("mask_guids", [SensitiveCategory.GUID]),
    ("mask_ssh_keys", [SensitiveCategory.SSH_KEY, SensitiveCategory.SSH_FINGERPRINT]),
]


def _disabled(options: object, toggles: list[tuple[str, list[SensitiveCategory]]]) -> list[str]:
    return [
        category.value
        for attribute, categories in toggles
        if not getattr(options, attribute)
        for category in categories
    ]


def build_analysis_prompt(options: SensitiveDataOptions | None = None) -> str:
    """Render the analysis prompt, noting categories the caller turned off."""
    prompt = ANALYSIS_PROMPT
    skipped = _disabled(options or SensitiveDataOptions(), _DETECTION_TOGGLES)
    if skipped:
        prompt += f"- Do not report these types: {', '.join(skipped)}.\n"
    return prompt


def build_sanitization_prompt(options: SanitizationOptions | None = None) -> str:
    """Render the sanitization prompt with the caller's preserve/mask instructions."""
    options = options or SanitizationOptions()
    prompt = SANITIZATION_PROMPT
    if options.preserve_timestamps:
        prompt += "- Preserve timestamps exactly as written.\n"
    if options.preserve_log_level:
        prompt += "- Preserve log levels (INFO, WARN, ERROR, ...) exactly as written.\n"
    skipped = _disabled(options, _MASK_TOGGLES)
    if skipped:
        prompt += f"- Leave these types unchanged: {', '.join(skipped)}.\n"
    return prompt
