"""
Error taxonomy for the history ingestion pipeline.

None of these are fatal to the hosting process: the reader and cache store
downgrade them to empty results, and the analysis orchestrator turns the rest
into a response carrying an ``error`` field.
"""
from typing import Optional


class TermlyticError(Exception):
    """Base exception for all termlytic errors."""

    def __init__(self, message: str, details: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class HistoryFileError(TermlyticError):
    """A shell's history file is missing or cannot be read."""

    def __init__(self, shell: str, path: str, reason: str):
        super().__init__(f"Cannot read {shell} history", {"path": path, "reason": reason})
        self.shell = shell
        self.path = path


class HistoryParseError(TermlyticError):
    """A single history line could not be parsed."""

    def __init__(self, shell: str, line_index: int, reason: str):
        super().__init__(f"Unparseable {shell} history line", {"line": str(line_index), "reason": reason})
        self.shell = shell
        self.line_index = line_index


class CacheCorruptError(TermlyticError):
    """The persisted cache record exists but cannot be decoded."""


class CacheWriteError(TermlyticError):
    """Persisting the cache record failed; the previous record is left as-is."""


class AnalysisError(TermlyticError):
    """Reading or analysis failed at the orchestrator level."""
