"""Command-line interface for LogScrub."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from logscrub import __version__
from logscrub.config import LogScrubSettings, get_settings
from logscrub.core.detector import LocalSensitiveDataDetector
from logscrub.core.models import SanitizationPipelineResult, SensitiveDataOptions
from logscrub.core.pipeline import LogSanitizationPipeline
from logscrub.providers.selector import ProviderSelector, build_default_selector

logger = logging.getLogger(__name__)

_CATEGORY_FLAGS = [
    ("emails", "detect_emails", "email addresses"),
    ("ips", "detect_ip_addresses", "IPv4 addresses"),
    ("hostnames", "detect_hostnames", "hostnames"),
    ("api-keys", "detect_api_keys", "API-key-like tokens"),
    ("guids", "detect_guids", "GUIDs"),
    ("ssh-keys", "detect_ssh_keys", "SSH public keys and fingerprints"),
]


def configure_logging(settings: LogScrubSettings, verbose: bool = False) -> None:
    """Configure root logging from settings."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="logscrub",
        description="Replace sensitive values in log files with deterministic mock values",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  logscrub sanitize app.log                     # Writes app.sanitized.log and app.mappings.json
  logscrub sanitize app.log --provider Ollama   # Prefer a specific AI provider
  logscrub sanitize app.log --no-hostnames      # Skip local hostname detection
  logscrub providers                            # Show registered providers

Environment Variables:
  LOGSCRUB_DEFAULT_PROVIDER   # Provider used when --provider is not given
  AZURE_OPENAI_ENDPOINT       # Azure OpenAI endpoint
  AZURE_OPENAI_KEY            # Azure OpenAI key
  AZURE_OPENAI_DEPLOYMENT     # Azure OpenAI deployment (default: gpt-4o-mini)
  OPENAI_API_KEY              # OpenAI API key
  OLLAMA_ENDPOINT             # Ollama server (default: http://localhost:11434)
  OLLAMA_MODEL                # Ollama model (default: llama3)
  LOGSCRUB_LITELLM_MODEL      # LiteLLM model name
  LOGSCRUB_LOG_LEVEL          # DEBUG, INFO, WARNING or ERROR
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sanitize = subparsers.add_parser("sanitize", help="Sanitize a log file")
    sanitize.add_argument("file", type=Path, help="Log file to sanitize")
    sanitize.add_argument(
        "--provider",
        type=str,
        default=None,
        metavar="NAME",
        help="Preferred AI provider (AzureOpenAI, OpenAI, Ollama, LiteLLM)",
    )
    sanitize.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Sanitized output path (default: <file>.sanitized.log)",
    )
    sanitize.add_argument(
        "--mappings",
        type=Path,
        default=None,
        help="Mapping file path (default: <file>.mappings.json)",
    )
    for flag, _, label in _CATEGORY_FLAGS:
        sanitize.add_argument(
            f"--no-{flag}",
            dest=f"no_{flag.replace('-', '_')}",
            action="store_true",
            help=f"Do not detect {label} locally",
        )

    subparsers.add_parser("providers", help="List AI providers and their configuration state")

    return parser


def detection_options_from_args(args: argparse.Namespace) -> SensitiveDataOptions:
    """Turn --no-<category> flags into detection options."""
    toggles = {
        attribute: not getattr(args, f"no_{flag.replace('-', '_')}")
        for flag, attribute, _ in _CATEGORY_FLAGS
    }
    return SensitiveDataOptions(**toggles)


def build_mapping_document(
    source: Path, sanitized: Path, result: SanitizationPipelineResult
) -> dict:
    """Build the JSON document written next to the sanitized log."""
    return {
        "sourceFile": source.name,
        "sanitizedFile": sanitized.name,
        "generatedUtc": datetime.now(UTC).isoformat(),
        "provider": result.provider_name,
        "aiProvider": result.ai_provider_name,
        "usedAiSuccessfully": result.used_ai_successfully,
        "aiError": result.ai_error,
        "localReplacementCount": result.local_replacement_count,
        "mappingCount": len(result.mappings),
        "mappings": [m.to_dict() for m in result.mappings],
    }


async def run_sanitize(args: argparse.Namespace, selector: ProviderSelector) -> int:
    """Sanitize one file and write the sanitized text and mappings."""
    source: Path = args.file
    if not source.is_file():
        print(f"❌ Log file not found: {source}", file=sys.stderr)
        return 1

    try:
        content = source.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        print(f"❌ Failed to read {source}: {e}", file=sys.stderr)
        return 1

    pipeline = LogSanitizationPipeline(LocalSensitiveDataDetector(), selector)
    try:
        result = await pipeline.sanitize(
            content,
            preferred_provider=args.provider,
            detection_options=detection_options_from_args(args),
        )
    finally:
        await selector.close()

    sanitized_path = args.output or source.with_suffix(".sanitized.log")
    mappings_path = args.mappings or source.with_suffix(".mappings.json")

    sanitized_path.write_text(result.sanitized_text, encoding="utf-8")
    mappings_path.write_text(
        json.dumps(build_mapping_document(source, sanitized_path, result), indent=2),
        encoding="utf-8",
    )

    print(f"✓ Provider: {result.provider_name}")
    if not result.used_ai_successfully:
        note = result.ai_error or "no AI provider available"
        print(f"⚠ AI sanitization not applied ({note}); local replacements only")
    print(f"✓ Replaced {len(result.mappings)} sensitive values")
    print(f"✓ Sanitized log: {sanitized_path}")
    print(f"✓ Mappings: {mappings_path}")
    return 0


def run_providers(selector: ProviderSelector) -> int:
    """Print registered providers and whether each is configured."""
    for entry in selector.describe():
        state = "configured" if entry["configured"] else "not configured"
        marker = " (default)" if entry["default"] else ""
        print(f"{entry['name']}: {state}{marker}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings, verbose=args.verbose)
    for warning in settings.configuration_warnings():
        logger.warning(warning)

    selector = build_default_selector(settings)

    if args.command == "providers":
        return run_providers(selector)

    try:
        return asyncio.run(run_sanitize(args, selector))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
