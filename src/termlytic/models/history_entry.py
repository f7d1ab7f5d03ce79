#region Imports
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
#endregion


#region Constants
BASH = "bash"
ZSH = "zsh"
FISH = "fish"

SUPPORTED_SHELLS: tuple[str, ...] = (BASH, ZSH, FISH)

# Commands longer than this are treated as garbage (pasted blobs, binary noise)
MAX_COMMAND_LENGTH = 1000

# Timestamps outside (MIN, MAX) exclusive are ignored for time-bucketed metrics
MIN_PLAUSIBLE_YEAR = 1990
MAX_PLAUSIBLE_YEAR = 2100
#endregion


#region Data Classes


@dataclass(frozen=True)
class CommandInfo:
    """
    Tokenized decomposition of a command line.

    Attributes:
        main: First whitespace-delimited token (e.g. 'git')
        sub: Second token, empty string if absent (e.g. 'commit')
        full: The complete command text
        args: Every token after the main command
    """

    main: str
    sub: str
    full: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_command(cls, command: str) -> Optional["CommandInfo"]:
        """
        Split a command on whitespace into its parts.

        Args:
            command: Complete command string

        Returns:
            CommandInfo, or None if the command has no tokens
        """
        parts = command.split()
        if not parts:
            return None

        return cls(
            main=parts[0],
            sub=parts[1] if len(parts) > 1 else "",
            full=command,
            args=tuple(parts[1:]),
        )

    def to_dict(self) -> dict:
        return {"main": self.main, "sub": self.sub, "full": self.full, "args": list(self.args)}

    @classmethod
    def from_dict(cls, data: dict) -> "CommandInfo":
        return cls(
            main=data["main"],
            sub=data.get("sub", ""),
            full=data["full"],
            args=tuple(data.get("args", [])),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """
    One parsed command invocation from a shell history file.

    Timestamps are always timezone-aware UTC datetimes; conversion to the
    user's timezone happens only when bucketing by hour/day.

    Attributes:
        command: Full command text (trimmed)
        timestamp: When the command ran, None when the format has no timestamp
        duration_seconds: Execution time (zsh extended history only)
        shell: Origin dialect ('bash', 'zsh' or 'fish')
        command_info: Tokenized command
    """

    command: str
    timestamp: Optional[datetime]
    duration_seconds: int
    shell: str
    command_info: CommandInfo

    @property
    def sort_timestamp(self) -> float:
        """
        Epoch seconds used for ordering.

        Entries without a timestamp order as epoch 0, i.e. older than
        everything that has one.
        """
        if self.timestamp is None:
            return 0.0
        return self.timestamp.timestamp()

    @property
    def has_plausible_timestamp(self) -> bool:
        """Check if the timestamp exists and falls in a sane year range."""
        if self.timestamp is None:
            return False
        return MIN_PLAUSIBLE_YEAR < self.timestamp.year < MAX_PLAUSIBLE_YEAR

    @property
    def dedupe_key(self) -> tuple[str, str]:
        """Identity used to collapse duplicate records within one batch."""
        stamp = self.timestamp.isoformat() if self.timestamp is not None else "none"
        return (self.command_info.full.strip(), stamp)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "command": self.command,
            "timestamp": self.timestamp.isoformat() if self.timestamp is not None else None,
            "duration": self.duration_seconds,
            "shell": self.shell,
            "commandInfo": self.command_info.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        """
        Rebuild an entry from its serialized form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the timestamp is not ISO formatted
        """
        raw_timestamp = data.get("timestamp")
        timestamp = None
        if raw_timestamp:
            timestamp = datetime.fromisoformat(raw_timestamp)
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)

        return cls(
            command=data["command"],
            timestamp=timestamp,
            duration_seconds=int(data.get("duration", 0)),
            shell=data["shell"],
            command_info=CommandInfo.from_dict(data["commandInfo"]),
        )
#endregion
