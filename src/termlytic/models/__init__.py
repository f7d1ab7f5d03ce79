"""Data models for parsed history entries and analysis results."""

from termlytic.models.analysis import (
    AnalysisResult,
    ChartData,
    CommandTicket,
    DateCommand,
    DayNightSplit,
    RangeStats,
)
from termlytic.models.file_fingerprint import FileFingerprint
from termlytic.models.history_entry import (
    BASH,
    FISH,
    SUPPORTED_SHELLS,
    ZSH,
    CommandInfo,
    HistoryEntry,
)

__all__ = [
    "AnalysisResult",
    "ChartData",
    "CommandTicket",
    "DateCommand",
    "DayNightSplit",
    "RangeStats",
    "FileFingerprint",
    "BASH",
    "FISH",
    "SUPPORTED_SHELLS",
    "ZSH",
    "CommandInfo",
    "HistoryEntry",
]
