"""
On-disk cache of parsed entries, their analysis, and history file fingerprints.

Two JSON files live in the data directory:

- history_data.json: entries + analysis + the fingerprints they were read at
- metadata.json: fingerprints + version + last update, for cheap change checks

history_data.json is the source of truth. It is written first; metadata.json
only mirrors its fingerprints. Both are written to a temp file and renamed
into place so a crash mid-write leaves the previous record intact.
"""
#region Imports
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from termlytic.config.settings import CACHE_VERSION, HISTORY_DATA_FILENAME, METADATA_FILENAME
from termlytic.errors import CacheCorruptError, CacheWriteError
from termlytic.models.analysis import AnalysisResult
from termlytic.models.file_fingerprint import FileFingerprint
from termlytic.models.history_entry import HistoryEntry
#endregion


logger = logging.getLogger(__name__)


#region Data Classes


@dataclass
class CacheRecord:
    """
    Persisted analysis state.

    Attributes:
        entries: Every cached entry, newest first
        analysis: Analysis computed from entries (None when no record exists)
        fingerprints: History file fingerprints the entries were read at
        last_update: When the record was written (ISO string)
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    analysis: Optional[AnalysisResult] = None
    fingerprints: dict[str, FileFingerprint] = field(default_factory=dict)
    last_update: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.analysis is not None


@dataclass
class CacheInfo:
    """Summary of what is currently cached."""

    has_cache: bool
    last_update: Optional[str]
    files: dict[str, dict]
    size: int
    entries: int
    data_file: str
    meta_file: str


@dataclass
class ClearResult:
    """Outcome of deleting the cache files."""

    success: bool
    data_deleted: bool = False
    metadata_deleted: bool = False
    errors: list[str] = field(default_factory=list)


#endregion


#region Functions


def compute_current_fingerprints(paths: Mapping[str, Optional[Path]]) -> dict[str, FileFingerprint]:
    """
    Stat every resolved history file.

    Args:
        paths: Shell -> resolved history path

    Returns:
        Shell -> current fingerprint
    """
    return {shell: FileFingerprint.capture(path) for shell, path in paths.items()}


def needs_update(
    current: Mapping[str, FileFingerprint],
    stored: Mapping[str, FileFingerprint],
) -> bool:
    """
    Decide whether any history file changed since the stored fingerprints.

    Only files that exist now can trigger an update; a file that has
    disappeared since the last run is not a trigger on its own.

    Args:
        current: Fingerprints captured now
        stored: Fingerprints from the last successful save

    Returns:
        True if an existing file's size or mtime differs from its stored values
    """
    for shell, fingerprint in current.items():
        if not fingerprint.exists:
            continue
        previous = stored.get(shell, FileFingerprint())
        if fingerprint.differs_from(previous):
            logger.debug(
                "File changed: %s size %d -> %d, mtime %d -> %d",
                shell,
                previous.size_bytes,
                fingerprint.size_bytes,
                previous.modified_at_millis,
                fingerprint.modified_at_millis,
            )
            return True
    return False


def _atomic_write_json(filepath: Path, data: dict) -> None:
    """Write JSON to a temp file in the same directory, then rename over filepath."""
    temp_fd, temp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=filepath.stem + "_",
        dir=filepath.parent,
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(temp_path, filepath)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def _fingerprints_to_dict(fingerprints: Mapping[str, FileFingerprint]) -> dict:
    return {shell: fp.to_dict() for shell, fp in fingerprints.items()}


def _fingerprints_from_dict(data: Mapping) -> dict[str, FileFingerprint]:
    return {shell: FileFingerprint.from_dict(fp) for shell, fp in data.items()}


#endregion


#region Classes


class CacheStore:
    """JSON-file persistence for the analysis cache."""

    def __init__(self, data_dir: Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory for history_data.json and metadata.json;
                created on first save
        """
        self.data_dir = Path(data_dir)
        self.data_file = self.data_dir / HISTORY_DATA_FILENAME
        self.meta_file = self.data_dir / METADATA_FILENAME

    def load_metadata(self) -> dict:
        """
        Read metadata.json.

        Returns:
            Metadata dict; a default empty one when missing or unreadable
        """
        default = {"lastUpdate": None, "files": {}, "version": CACHE_VERSION}
        try:
            with open(self.meta_file, "r", encoding="utf-8") as f:
                metadata = json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("%s", CacheCorruptError("Unreadable cache metadata", {"path": str(self.meta_file), "reason": str(e)}))
            return default

        if not isinstance(metadata, dict) or not isinstance(metadata.get("files", {}), dict):
            return default
        return metadata

    def load_fingerprints(self) -> dict[str, FileFingerprint]:
        """
        Fingerprints recorded by the last successful save.

        Returns:
            Shell -> fingerprint; empty when no record exists yet
        """
        metadata = self.load_metadata()
        try:
            return _fingerprints_from_dict(metadata.get("files", {}))
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring malformed fingerprints: %s", e)
            return {}

    def load_cached_entries(self) -> CacheRecord:
        """
        Load the persisted record.

        Returns:
            The record; an empty CacheRecord when absent or corrupt
        """
        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No existing cache found, starting fresh")
            return CacheRecord()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("%s", CacheCorruptError("Unreadable cache data", {"path": str(self.data_file), "reason": str(e)}))
            return CacheRecord()

        try:
            record = CacheRecord(
                entries=[HistoryEntry.from_dict(item) for item in data["entries"]],
                analysis=AnalysisResult.from_dict(data["analysis"]),
                fingerprints=_fingerprints_from_dict(data.get("metadata", {}).get("files", {})),
                last_update=data.get("metadata", {}).get("lastUpdate"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("%s", CacheCorruptError("Malformed cache data", {"path": str(self.data_file), "reason": str(e)}))
            return CacheRecord()

        logger.info("Loaded %d cached entries", len(record.entries))
        return record

    def save(
        self,
        entries: list[HistoryEntry],
        analysis: AnalysisResult,
        fingerprints: Mapping[str, FileFingerprint],
    ) -> str:
        """
        Persist a full record, replacing the previous one.

        Args:
            entries: All entries (not capped)
            analysis: Analysis of entries
            fingerprints: Fingerprints entries were read at

        Returns:
            The lastUpdate timestamp written

        Raises:
            CacheWriteError: If either file cannot be written
        """
        last_update = datetime.now(timezone.utc).isoformat()
        files = _fingerprints_to_dict(fingerprints)

        data = {
            "entries": [entry.to_dict() for entry in entries],
            "analysis": analysis.to_dict(),
            "metadata": {
                "files": files,
                "lastUpdate": last_update,
                "totalEntries": len(entries),
            },
            "savedAt": last_update,
        }
        metadata = {
            "files": files,
            "lastUpdate": last_update,
            "totalEntries": len(entries),
            "version": CACHE_VERSION,
        }

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            _atomic_write_json(self.data_file, data)
            _atomic_write_json(self.meta_file, metadata)
        except (OSError, TypeError, ValueError) as e:
            raise CacheWriteError("Failed to save cache", {"path": str(self.data_dir), "reason": str(e)}) from e

        logger.info("Cache saved: %d entries", len(entries))
        return last_update

    def clear(self) -> None:
        """Delete both cache files. Missing or undeletable files are logged, never raised."""
        for path in (self.data_file, self.meta_file):
            try:
                path.unlink()
                logger.info("Deleted %s", path.name)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Failed to delete %s: %s", path.name, e)

    def clear_all_data(self) -> ClearResult:
        """
        Delete both cache files and report what happened.

        Returns:
            ClearResult; success is False if any existing file could not be removed
        """
        result = ClearResult(success=True)

        for path, attr in ((self.data_file, "data_deleted"), (self.meta_file, "metadata_deleted")):
            try:
                path.unlink()
                setattr(result, attr, True)
            except FileNotFoundError:
                pass
            except OSError as e:
                result.errors.append(f"Failed to delete {path.name}: {e}")

        result.success = not result.errors
        return result

    def get_cache_info(self) -> CacheInfo:
        """
        Describe the current cache contents.

        Returns:
            CacheInfo (has_cache False when nothing is cached)
        """
        metadata = self.load_metadata()
        data_fingerprint = FileFingerprint.capture(self.data_file)

        entry_count = 0
        if data_fingerprint.exists:
            entry_count = len(self.load_cached_entries().entries)

        return CacheInfo(
            has_cache=data_fingerprint.exists,
            last_update=metadata.get("lastUpdate"),
            files=metadata.get("files", {}),
            size=data_fingerprint.size_bytes,
            entries=entry_count,
            data_file=str(self.data_file),
            meta_file=str(self.meta_file),
        )


#endregion
