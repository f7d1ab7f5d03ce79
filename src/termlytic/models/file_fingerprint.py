#region Imports
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
#endregion


#region Data Classes


@dataclass(frozen=True)
class FileFingerprint:
    """
    Size and modification time of a history file at a point in time.

    Attributes:
        exists: Whether the file was present when captured
        size_bytes: File size in bytes (0 when missing)
        modified_at_millis: Modification time in epoch milliseconds (0 when missing)
    """

    exists: bool = False
    size_bytes: int = 0
    modified_at_millis: int = 0

    @classmethod
    def capture(cls, path: Optional[Path]) -> "FileFingerprint":
        """
        Stat a file and record its fingerprint.

        Args:
            path: File to stat, or None when no path could be resolved

        Returns:
            Fingerprint; a missing or unreadable file yields exists=False
        """
        if path is None:
            return cls()

        try:
            stats = path.stat()
        except OSError:
            return cls()

        return cls(
            exists=True,
            size_bytes=stats.st_size,
            modified_at_millis=stats.st_mtime_ns // 1_000_000,
        )

    def differs_from(self, other: "FileFingerprint") -> bool:
        """Check if size or mtime changed relative to another fingerprint."""
        return (
            self.size_bytes != other.size_bytes
            or self.modified_at_millis != other.modified_at_millis
        )

    def to_dict(self) -> dict:
        return {
            "exists": self.exists,
            "size": self.size_bytes,
            "mtime": self.modified_at_millis,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileFingerprint":
        return cls(
            exists=bool(data.get("exists", False)),
            size_bytes=int(data.get("size", 0)),
            modified_at_millis=int(data.get("mtime", 0)),
        )
#endregion
