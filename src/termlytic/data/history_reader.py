#region Imports
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from termlytic.data.path_resolver import HistoryPathResolver
from termlytic.errors import HistoryFileError, HistoryParseError
from termlytic.models.history_entry import SUPPORTED_SHELLS, HistoryEntry
from termlytic.parsers.shell_parsers import parse_shell_entry
#endregion


logger = logging.getLogger(__name__)


#region Data Classes


@dataclass
class ShellReadStats:
    """Bookkeeping for one shell's read."""

    lines: int = 0
    entries: int = 0
    skipped: int = 0
    parse_errors: int = 0
    bytes_read: int = 0


@dataclass
class ReadResult:
    """
    Combined output of reading every supported shell.

    Attributes:
        entries: All entries, newest first (entries without timestamp last)
        shell_counts: Entries read per shell
        diagnostics: Per-shell details (path, timing, errors, samples)
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    shell_counts: dict[str, int] = field(default_factory=dict)
    diagnostics: dict[str, dict] = field(default_factory=dict)


#endregion


#region Functions


def sort_entries(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    """
    Order entries newest first.

    Entries without a timestamp count as epoch 0 and therefore sink to the
    end. The sort is stable, so equal timestamps keep their read order.
    """
    return sorted(entries, key=lambda entry: entry.sort_timestamp, reverse=True)


def split_history_lines(content: str) -> list[str]:
    """
    Split raw history text into parseable lines.

    Blank lines and '#' comment lines are dropped. Line content is otherwise
    left untouched because fish relies on leading indentation.
    """
    lines = []
    for raw_line in content.split("\n"):
        line = raw_line.rstrip("\r")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(line)
    return lines


def parse_history_lines(shell: str, lines: list[str], stats: Optional[ShellReadStats] = None) -> list[HistoryEntry]:
    """
    Run the dialect parser across a list of lines.

    A line that fails to parse is logged and skipped; it never aborts the batch.

    Args:
        shell: Dialect name
        lines: Lines produced by split_history_lines
        stats: Optional counters to update

    Returns:
        Parsed entries in file order
    """
    stats = stats if stats is not None else ShellReadStats()
    stats.lines += len(lines)

    entries: list[HistoryEntry] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        try:
            result = parse_shell_entry(shell, line, lines, index)
        except (ValueError, TypeError, IndexError) as e:
            error = HistoryParseError(shell, index, str(e))
            logger.warning("%s", error)
            stats.parse_errors += 1
            stats.skipped += 1
            index += 1
            continue

        if result.entry is not None:
            entries.append(result.entry)
            stats.entries += 1
        else:
            stats.skipped += 1

        index = result.next_index + 1

    return entries


#endregion


#region Classes


class HistoryReader:
    """
    Reads and parses shell history files, in full or from a byte offset.

    Each shell is read independently: a missing or unreadable file yields
    no entries for that shell and never raises.
    """

    def __init__(self, resolver: Optional[HistoryPathResolver] = None):
        self.resolver = resolver if resolver is not None else HistoryPathResolver()
        self.last_stats: dict[str, ShellReadStats] = {}

    def read_history(self, shell: str, since_byte: int = 0) -> list[HistoryEntry]:
        """
        Read one shell's history starting at a byte offset.

        Args:
            shell: Shell name
            since_byte: Offset to start reading from; clamped to [0, file size].
                Pass the previously recorded file size to read only new data.

        Returns:
            Entries in file order; empty when the file is missing, unreadable or empty

        Raises:
            ValueError: If shell is not supported
        """
        if shell not in SUPPORTED_SHELLS:
            raise ValueError(f"Unsupported shell: {shell}")

        stats = ShellReadStats()
        self.last_stats[shell] = stats

        path = self.resolver.resolve_history_path(shell)
        try:
            content = self._read_range(shell, path, since_byte, stats)
        except HistoryFileError as e:
            logger.info("%s", e)
            return []

        if not content:
            logger.info("No new content to read for %s", shell)
            return []

        lines = split_history_lines(content)
        entries = parse_history_lines(shell, lines, stats)
        logger.info(
            "Parsed %d entries from %s (%d lines, %d bytes, skipped %d)",
            stats.entries, shell, stats.lines, stats.bytes_read, stats.skipped,
        )
        return entries

    def read_all_histories(self) -> ReadResult:
        """
        Read every supported shell, current shell first.

        Returns:
            ReadResult with all entries sorted newest first
        """
        result = ReadResult()

        for shell in self.resolver.shell_order():
            path = self.resolver.resolve_history_path(shell)
            start = time.monotonic()
            try:
                entries = self.read_history(shell)
            except ValueError as e:
                logger.error("Failed to read %s history: %s", shell, e)
                result.shell_counts[shell] = 0
                result.diagnostics[shell] = {
                    "error": str(e),
                    "detectedAsCurrent": shell == self.resolver.current_shell,
                }
                continue
            elapsed_ms = int((time.monotonic() - start) * 1000)

            stats = self.last_stats.get(shell, ShellReadStats())
            result.entries.extend(entries)
            result.shell_counts[shell] = len(entries)
            result.diagnostics[shell] = {
                "filePath": str(path) if path is not None else None,
                "detectedAsCurrent": shell == self.resolver.current_shell,
                "hasValidEntries": bool(entries),
                "entryCount": len(entries),
                "skippedLines": stats.skipped,
                "parseErrors": stats.parse_errors,
                "processingTimeMs": elapsed_ms,
                "sampleEntry": entries[0].to_dict() if entries else None,
            }
            logger.info("%s: %d entries in %dms", shell, len(entries), elapsed_ms)

        result.entries = sort_entries(result.entries)
        logger.info(
            "Read %d entries total; shells with data: %s",
            len(result.entries),
            ", ".join(s for s, count in result.shell_counts.items() if count > 0) or "none",
        )
        return result

    def _read_range(self, shell: str, path: Optional[Path], since_byte: int, stats: ShellReadStats) -> str:
        if path is None:
            raise HistoryFileError(shell, "", "no history path")

        try:
            with open(path, "rb") as f:
                f.seek(0, 2)
                size = f.tell()
                if size == 0:
                    raise HistoryFileError(shell, str(path), "file is empty")
                start = min(max(since_byte, 0), size)
                f.seek(start)
                data = f.read(size - start)
        except FileNotFoundError:
            raise HistoryFileError(shell, str(path), "file not found")
        except OSError as e:
            raise HistoryFileError(shell, str(path), str(e))

        stats.bytes_read = len(data)
        # zsh stores metafied bytes; never fail on undecodable input
        return data.decode("utf-8", errors="replace")


#endregion
