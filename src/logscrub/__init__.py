"""LogScrub - sanitize log files with local detection and AI providers."""

__version__ = "0.1.0"
__author__ = "LogScrub Team"
__description__ = "Replace sensitive values in log files with deterministic mock values"

__all__ = ["__version__", "__author__", "__description__"]
