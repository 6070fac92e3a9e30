"""Output formatting for DepDrift."""

from .formatters import ConsoleFormatter, JSONFormatter, ManifestReport

__all__ = ["ConsoleFormatter", "JSONFormatter", "ManifestReport"]
