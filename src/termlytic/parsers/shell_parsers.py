"""
Parsers for the supported shell history formats.

- zsh:  extended history ``: <epoch>:<duration>;<command>``, or a plain command
- fish: ``- cmd: <command>`` optionally followed by ``  when: <epoch>``
- bash: one plain command per line, no timestamps
"""
#region Imports
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from termlytic.models.history_entry import BASH, FISH, ZSH, CommandInfo, HistoryEntry
#endregion


#region Constants
ZSH_EXTENDED_PATTERN = re.compile(r"^: (\d+):(\d+);(.*)$")
FISH_COMMAND_PREFIX = "- cmd: "
FISH_WHEN_PREFIX = "  when: "
#endregion


#region Data Classes


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one record.

    Attributes:
        entry: Parsed entry, None when the line is not a command record
        next_index: Index of the last line consumed; the caller resumes at next_index + 1
    """

    entry: Optional[HistoryEntry]
    next_index: int


@dataclass(frozen=True)
class _RawRecord:
    command: str
    timestamp: Optional[datetime] = None
    duration: int = 0
#endregion


#region Functions


def _epoch_to_datetime(value: str) -> datetime:
    """
    Convert an epoch-seconds string to an aware UTC datetime.

    Raises:
        ValueError: If the value is not an integer or is out of range
    """
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value}") from e


def parse_zsh_line(line: str) -> _RawRecord:
    """
    Parse a zsh history line.

    Lines in extended format carry a timestamp and duration. Anything else,
    including extended lines whose timestamp cannot be converted, is kept
    as a plain command.
    """
    match = ZSH_EXTENDED_PATTERN.match(line)
    if match:
        try:
            timestamp = _epoch_to_datetime(match.group(1))
        except ValueError:
            return _RawRecord(command=line.strip())
        return _RawRecord(
            command=match.group(3).strip(),
            timestamp=timestamp,
            duration=int(match.group(2)),
        )

    return _RawRecord(command=line.strip())


def parse_fish_line(line: str) -> Optional[_RawRecord]:
    """Parse a fish '- cmd:' line; any other line yields None."""
    if line.startswith(FISH_COMMAND_PREFIX):
        return _RawRecord(command=line[len(FISH_COMMAND_PREFIX):].strip())
    return None


def parse_bash_line(line: str) -> _RawRecord:
    return _RawRecord(command=line.strip())


def parse_shell_entry(
    shell: str,
    line: str,
    lines: Sequence[str] = (),
    index: int = 0,
) -> ParseResult:
    """
    Parse one history record for the given dialect.

    Fish records may span two lines: when the line after a '- cmd:' line is a
    '  when:' line, both are consumed and next_index points at the second.

    Args:
        shell: Dialect ('zsh', 'fish', 'bash'); unknown values parse as bash
        line: The current line
        lines: All lines of the batch, used for fish lookahead
        index: Position of line within lines

    Returns:
        ParseResult with the entry (or None) and the last consumed index
    """
    next_index = index

    if shell == ZSH:
        record = parse_zsh_line(line)
    elif shell == FISH:
        record = parse_fish_line(line)
        if record is not None and index + 1 < len(lines):
            following = lines[index + 1]
            if following.startswith(FISH_WHEN_PREFIX):
                next_index = index + 1
                try:
                    timestamp = _epoch_to_datetime(following[len(FISH_WHEN_PREFIX):].strip())
                except ValueError:
                    timestamp = None
                record = _RawRecord(command=record.command, timestamp=timestamp)
    else:
        record = parse_bash_line(line)

    if record is None or not record.command:
        return ParseResult(entry=None, next_index=next_index)

    command_info = CommandInfo.from_command(record.command)
    if command_info is None:
        return ParseResult(entry=None, next_index=next_index)

    entry = HistoryEntry(
        command=record.command,
        timestamp=record.timestamp,
        duration_seconds=record.duration,
        shell=shell if shell in (ZSH, FISH) else BASH,
        command_info=command_info,
    )
    return ParseResult(entry=entry, next_index=next_index)


#endregion
