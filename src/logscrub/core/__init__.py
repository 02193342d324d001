"""Core sanitization logic for LogScrub."""

from .chunking import estimate_tokens, split_into_chunks
from .detector import LocalSensitiveDataDetector
from .guards import is_false_positive_hostname, revert_false_positives
from .models import (
    LocalDetectionResult,
    MappingEntry,
    SanitizationOptions,
    SanitizationPipelineResult,
    SanitizationResult,
    SensitiveCategory,
    SensitiveDataAnalysis,
    SensitiveDataOptions,
    SensitiveItem,
)
from .pipeline import LogSanitizationPipeline, merge_mappings

__all__ = [
    "LocalDetectionResult",
    "LocalSensitiveDataDetector",
    "LogSanitizationPipeline",
    "MappingEntry",
    "SanitizationOptions",
    "SanitizationPipelineResult",
    "SanitizationResult",
    "SensitiveCategory",
    "SensitiveDataAnalysis",
    "SensitiveDataOptions",
    "SensitiveItem",
    "estimate_tokens",
    "is_false_positive_hostname",
    "merge_mappings",
    "revert_false_positives",
    "split_into_chunks",
]
