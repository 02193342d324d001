"""Sanitization pipeline: local pre-filter, AI rewrite, merge."""

import logging
from typing import TYPE_CHECKING

from .chunking import estimate_tokens
from .detector import LocalSensitiveDataDetector
from .guards import revert_false_positives
from .models import (
    LocalDetectionResult,
    MappingEntry,
    SanitizationOptions,
    SanitizationPipelineResult,
    SanitizationResult,
    SensitiveDataOptions,
)

if TYPE_CHECKING:
    from logscrub.providers.selector import ProviderSelector

logger = logging.getLogger(__name__)

LOCAL_PROVIDER_NAME = "LocalDetector"

# Single-request ceiling; larger inputs are chunked by the provider
MAX_MODEL_TOKENS = 128_000

# Number of AI mapping candidates written to the debug log
_MAPPING_LOG_LIMIT = 5


class LogSanitizationPipeline:
    """
    Runs the local detector, then an AI provider, and merges their mappings.

    The pipeline is the error boundary: provider and transport failures never
    escape it. Callers always get a complete result, falling back to the local
    pre-filter output when the AI step cannot be used.
    """

    def __init__(
        self,
        detector: LocalSensitiveDataDetector,
        selector: "ProviderSelector",
    ):
        self.detector = detector
        self.selector = selector

    async def sanitize(
        self,
        content: str,
        preferred_provider: str | None = None,
        detection_options: SensitiveDataOptions | None = None,
        sanitization_options: SanitizationOptions | None = None,
    ) -> SanitizationPipelineResult:
        """
        Sanitize log content.

        Args:
            content: Raw log text
            preferred_provider: Provider name to try first
            detection_options: Category toggles for detection
            sanitization_options: Instructions passed to the AI provider

        Returns:
            SanitizationPipelineResult; `used_ai_successfully` tells whether
            the AI rewrite was applied

        Raises:
            ValueError: If content is None
        """
        if content is None:
            raise ValueError("content must not be None")
        detection_options = detection_options or SensitiveDataOptions()
        sanitization_options = sanitization_options or SanitizationOptions()

        local_result = self.detector.detect_and_replace(content, detection_options)
        logger.info(
            f"Local detector replaced {len(local_result.mappings)} items prior to AI processing."
        )

        estimated_tokens = estimate_tokens(local_result.prefiltered_text)
        if estimated_tokens > MAX_MODEL_TOKENS:
            logger.warning(
                f"Prefiltered content estimated at {estimated_tokens} tokens exceeds the "
                "single-request limit. Provider will process the log in chunks."
            )

        try:
            provider = self.selector.get_provider(preferred_provider)
        except Exception as e:
            logger.error(f"Failed to resolve AI provider, using local-only result: {e}")
            return self._fallback(local_result, attempted_provider=None, ai_error=str(e))

        logger.info(f"Selected AI provider {provider.provider_name} for sanitization.")

        analysis_json: str | None = None
        try:
            analysis_json = await provider.analyze_text(
                local_result.prefiltered_text, detection_options
            )
            logger.debug(f"AI analysis output length: {len(analysis_json or '')}")
        except Exception as e:
            logger.warning(
                f"AI analysis failed for provider {provider.provider_name}, "
                f"continuing with sanitization: {e}",
                exc_info=True,
            )

        try:
            ai_result = await provider.sanitize(local_result.prefiltered_text, sanitization_options)
        except Exception as e:
            logger.error(
                f"AI sanitization call raised for provider {provider.provider_name}: {e}",
                exc_info=True,
            )
            return self._fallback(
                local_result,
                attempted_provider=provider.provider_name,
                ai_error=str(e),
                analysis_json=analysis_json,
            )

        if not ai_result.success:
            logger.warning(
                f"AI sanitization failed; falling back to local-only sanitization. "
                f"Provider={provider.provider_name}, Error={ai_result.error or 'Unknown'}"
            )
            return self._fallback(
                local_result,
                attempted_provider=provider.provider_name,
                ai_error=ai_result.error or "Unknown error",
                analysis_json=analysis_json,
            )

        self._log_ai_mappings(provider.provider_name, ai_result)

        sanitized_text, ai_mappings = revert_false_positives(
            ai_result.sanitized_text, list(ai_result.mappings)
        )
        merged = merge_mappings(local_result.mappings, ai_mappings)

        logger.info(
            f"Merged mapping set contains {len(merged)} entries "
            f"({len(local_result.mappings)} local, "
            f"{len(merged) - len(local_result.mappings)} from AI)."
        )

        return SanitizationPipelineResult(
            original_text=content,
            prefiltered_text=local_result.prefiltered_text,
            sanitized_text=sanitized_text,
            mappings=merged,
            provider_name=provider.provider_name,
            ai_provider_name=provider.provider_name,
            used_ai_successfully=True,
            ai_error=None,
            analysis_json=analysis_json,
            local_replacement_count=len(local_result.mappings),
        )

    def _fallback(
        self,
        local_result: LocalDetectionResult,
        attempted_provider: str | None,
        ai_error: str | None,
        analysis_json: str | None = None,
    ) -> SanitizationPipelineResult:
        return SanitizationPipelineResult(
            original_text=local_result.original_text,
            prefiltered_text=local_result.prefiltered_text,
            sanitized_text=local_result.prefiltered_text,
            mappings=list(local_result.mappings),
            provider_name=LOCAL_PROVIDER_NAME,
            ai_provider_name=attempted_provider,
            used_ai_successfully=False,
            ai_error=ai_error,
            analysis_json=analysis_json,
            local_replacement_count=len(local_result.mappings),
        )

    def _log_ai_mappings(self, provider_name: str, ai_result: SanitizationResult) -> None:
        count = len(ai_result.mappings)
        logger.info(f"AI provider {provider_name} produced {count} proposed mappings.")
        for mapping in ai_result.mappings[:_MAPPING_LOG_LIMIT]:
            # Only the length of original values is logged
            logger.debug(
                f"AI mapping candidate: Type={mapping.type}, "
                f"Replacement={mapping.replacement}, OriginalLength={len(mapping.original)}"
            )
        if count > _MAPPING_LOG_LIMIT:
            logger.debug(f"{count - _MAPPING_LOG_LIMIT} more AI mappings not logged.")


def merge_mappings(
    local_mappings: tuple[MappingEntry, ...] | list[MappingEntry],
    ai_mappings: list[MappingEntry],
) -> list[MappingEntry]:
    """
    Merge local and AI mappings; local entries win for the same original value.

    Args:
        local_mappings: Mappings from the local detector
        ai_mappings: Mappings proposed by the AI provider

    Returns:
        All local mappings followed by AI mappings for originals not seen yet
    """
    merged = list(local_mappings)
    seen = {m.original for m in merged}
    for mapping in ai_mappings:
        if mapping.original not in seen:
            merged.append(mapping)
            seen.add(mapping.original)
    return merged
