"""
Analysis orchestrator.

Chooses between serving the cache, applying an incremental update, or doing
a full rescan, then persists the result. Every public method returns a
result object; analyze() never raises.
"""
#region Imports
import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Callable, Mapping, Optional

from termlytic.aggregation import heatmap as heatmap_queries
from termlytic.aggregation import time_range as range_queries
from termlytic.aggregation.analyzer import AnalyzerConfig, HistoryStatsAnalyzer
from termlytic.data.history_reader import HistoryReader, sort_entries
from termlytic.data.path_resolver import HistoryPathResolver
from termlytic.errors import AnalysisError, CacheWriteError
from termlytic.models.analysis import AnalysisResult, CommandTicket, DateCommand, RangeStats
from termlytic.models.file_fingerprint import FileFingerprint
from termlytic.models.history_entry import HistoryEntry
from termlytic.storage.cache_store import (
    CacheInfo,
    CacheRecord,
    CacheStore,
    ClearResult,
    compute_current_fingerprints,
    needs_update,
)
#endregion


logger = logging.getLogger(__name__)


#region Constants
DEFAULT_RESULT_CAP = 10000

ANALYSIS_CACHE = "cache"
ANALYSIS_INCREMENTAL = "incremental"
ANALYSIS_FULL = "full"
ANALYSIS_EMPTY = "empty"
#endregion


#region Data Classes


@dataclass
class ResponseMetadata:
    """
    Bookkeeping attached to every analysis response.

    Attributes:
        total_entries: Entries known in total (before the result cap)
        files: Fingerprints the entries correspond to, keyed by shell
        last_update: When the cache record was written (None if never)
        analysis_type: 'cache', 'incremental', 'full' or 'empty'
    """

    total_entries: int = 0
    files: dict[str, dict] = field(default_factory=dict)
    last_update: Optional[str] = None
    analysis_type: str = ANALYSIS_EMPTY


@dataclass
class AnalysisResponse:
    """
    Result of one analyze() call.

    Attributes:
        entries: Newest-first entries, truncated to the result cap
        analysis: Analysis over the full entry set
        metadata: Totals, fingerprints and which path produced the result
        from_cache: True when served from the persisted record
        error: Set when reading or analysis failed and a fallback was served
        cache_write_error: Set when the result could not be persisted
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    analysis: AnalysisResult = field(default_factory=AnalysisResult)
    metadata: ResponseMetadata = field(default_factory=ResponseMetadata)
    from_cache: bool = False
    error: Optional[str] = None
    cache_write_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "analysis": self.analysis.to_dict(),
            "metadata": {
                "totalEntries": self.metadata.total_entries,
                "files": self.metadata.files,
                "lastUpdate": self.metadata.last_update,
                "analysisType": self.metadata.analysis_type,
            },
            "fromCache": self.from_cache,
            "error": self.error,
            "cacheWriteError": self.cache_write_error,
        }


#endregion


#region Classes


class ShellHistoryAnalyzer:
    """
    Coordinates the history reader, the cache store and the statistics engine.

    One instance owns the in-memory entry set for one data directory. Calls
    that read or rewrite the cache are serialized on an instance lock, so a
    file watcher thread and a foreground caller never race on the same
    fingerprints.
    """

    def __init__(
        self,
        reader: HistoryReader,
        store: CacheStore,
        stats: HistoryStatsAnalyzer,
        result_cap: int = DEFAULT_RESULT_CAP,
    ):
        """
        Initialize the orchestrator.

        Args:
            reader: History reader (owns the path resolver)
            store: Cache store for the data directory
            stats: Statistics engine
            result_cap: Maximum entries returned per response
        """
        self.reader = reader
        self.store = store
        self.stats = stats
        self.result_cap = result_cap
        self._lock = threading.RLock()
        self._entries: list[HistoryEntry] = []
        self._analysis: Optional[AnalysisResult] = None

    @property
    def resolver(self) -> HistoryPathResolver:
        return self.reader.resolver

    def analyze(self) -> AnalysisResponse:
        """
        Return up-to-date statistics, reading only what changed.

        - cache hit: no history file changed since the last save
        - incremental: some files changed; only new bytes are read
        - full: no usable cache record

        On failure the last persisted record is served with ``error`` set, or
        an empty response when nothing was ever persisted.

        Returns:
            AnalysisResponse
        """
        with self._lock:
            try:
                return self._analyze_locked()
            except Exception as e:
                error = AnalysisError("History analysis failed", {"reason": str(e)})
                logger.error("%s", error, exc_info=logger.isEnabledFor(logging.DEBUG))
                return self._fallback(str(error))

    def force_refresh(self) -> AnalysisResponse:
        """
        Discard the cache and rescan every history file.

        Returns:
            AnalysisResponse produced by the full-rescan path
        """
        with self._lock:
            logger.info("Forcing full refresh")
            try:
                self.store.clear()
            except Exception as e:
                error = AnalysisError("Could not clear the cache", {"reason": str(e)})
                logger.error("%s", error)
                return self._fallback(str(error))
            self._entries = []
            self._analysis = None
            return self.analyze()

    def get_cache_info(self) -> CacheInfo:
        return self.store.get_cache_info()

    def clear_cache(self) -> ClearResult:
        """
        Delete the persisted record and forget the in-memory entries.

        Returns:
            ClearResult describing which files were removed
        """
        with self._lock:
            result = self.store.clear_all_data()
            self._entries = []
            self._analysis = None
            logger.info("Cache cleared: %s", result)
            return result

    def stats_for_range(self, time_range: str) -> RangeStats:
        """
        Metrics for one of 'day', 'week', 'month', 'year', 'all'.

        Raises:
            ValueError: If time_range is unknown
        """
        return range_queries.stats_for_range(self.stats, self._current_entries(), time_range)

    def heatmap_for_year(self, year: int, shells: heatmap_queries.ShellFilter = "all") -> list[tuple[str, int]]:
        return heatmap_queries.heatmap_for_year(self.stats, self._current_entries(), year, shells)

    def commands_for_date(self, date_str: str, shells: heatmap_queries.ShellFilter = "all") -> list[DateCommand]:
        """
        Commands run on a local date (YYYY-MM-DD).

        Raises:
            ValueError: If date_str is not a valid date
        """
        return heatmap_queries.commands_for_date(self.stats, self._current_entries(), date_str, shells)

    def available_years(self) -> list[int]:
        return heatmap_queries.available_years(self.stats, self._current_entries())

    def generate_ticket(self, year: Optional[int] = None) -> CommandTicket:
        """
        Yearly summary ticket.

        Args:
            year: Year to summarize (defaults to the current year)

        Returns:
            CommandTicket
        """
        entries = self._current_entries()
        year = year if year is not None else self.stats.now().year
        analysis = self._analysis or AnalysisResult()
        shell_count = sum(1 for count in analysis.shell_counts.values() if count > 0)
        return heatmap_queries.generate_command_ticket(self.stats, entries, year, shell_count)

    def history_page(self, page: int = 1, limit: int = 100) -> dict:
        """
        One page of the capped, newest-first entry list.

        Args:
            page: 1-based page number
            limit: Entries per page

        Returns:
            Dictionary with entries, page, limit, total, total_pages and has_more

        Raises:
            ValueError: If page or limit is below 1
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        entries = self._current_entries()[:self.result_cap]
        total = len(entries)
        start = (page - 1) * limit
        page_entries = entries[start:start + limit]

        return {
            "entries": [entry.to_dict() for entry in page_entries],
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
            "has_more": start + limit < total,
        }

    def get_file_status(self) -> dict:
        return self.resolver.get_all_file_status()

    def diagnose(self) -> dict:
        return self.resolver.diagnose()

    def _current_entries(self) -> list[HistoryEntry]:
        if self._analysis is None:
            self.analyze()
        return self._entries

    def _analyze_locked(self) -> AnalysisResponse:
        current = compute_current_fingerprints(self.resolver.history_files())
        stored = self.store.load_fingerprints()
        record = self.store.load_cached_entries()

        if record.exists and not needs_update(current, stored):
            logger.info("Using cached analysis (%d entries)", len(record.entries))
            self._entries = record.entries
            self._analysis = record.analysis
            return self._build_response(
                record.entries,
                record.analysis,
                record.fingerprints,
                record.last_update,
                ANALYSIS_CACHE,
                from_cache=True,
            )

        if record.exists:
            logger.info("History files changed, applying incremental update")
            entries = self._incremental_entries(record, current)
            analysis_type = ANALYSIS_INCREMENTAL
        else:
            logger.info("No usable cache, performing full analysis")
            entries = self.reader.read_all_histories().entries
            analysis_type = ANALYSIS_FULL

        analysis = self.stats.analyze(entries)

        last_update = None
        cache_write_error = None
        try:
            last_update = self.store.save(entries, analysis, current)
        except CacheWriteError as e:
            logger.error("%s", e)
            cache_write_error = str(e)

        self._entries = entries
        self._analysis = analysis
        response = self._build_response(entries, analysis, current, last_update, analysis_type)
        response.cache_write_error = cache_write_error
        return response

    def _incremental_entries(
        self,
        record: CacheRecord,
        current: Mapping[str, FileFingerprint],
    ) -> list[HistoryEntry]:
        """
        Merge cached entries with what changed on disk.

        The record's own fingerprints are the baseline, so the offsets always
        match the entries they describe.

        - grew: read from the previous size
        - shrank, or same size with a new mtime: evict the shell, re-read it
        - new file: read it whole
        - unchanged or missing now: keep cached entries as they are
        """
        entries = list(record.entries)
        new_entries: list[HistoryEntry] = []

        for shell in self.resolver.shell_order():
            now = current.get(shell, FileFingerprint())
            before = record.fingerprints.get(shell, FileFingerprint())
            if not now.exists or not now.differs_from(before):
                continue

            if before.exists and now.size_bytes > before.size_bytes:
                logger.info("%s grew by %d bytes", shell, now.size_bytes - before.size_bytes)
                new_entries.extend(self.reader.read_history(shell, since_byte=before.size_bytes))
            elif before.exists:
                logger.info("%s history was rewritten, re-reading it", shell)
                entries = [entry for entry in entries if entry.shell != shell]
                new_entries.extend(self.reader.read_history(shell))
            else:
                logger.info("New %s history file found", shell)
                new_entries.extend(self.reader.read_history(shell))

        logger.info("Incremental update: %d new entries", len(new_entries))
        return sort_entries(entries + new_entries)

    def _fallback(self, error: str) -> AnalysisResponse:
        record = self.store.load_cached_entries()
        if record.exists:
            logger.warning("Serving last good cache after failure")
            self._entries = record.entries
            self._analysis = record.analysis
            response = self._build_response(
                record.entries,
                record.analysis,
                record.fingerprints,
                record.last_update,
                ANALYSIS_CACHE,
                from_cache=True,
            )
        else:
            response = AnalysisResponse()
        response.error = error
        return response

    def _build_response(
        self,
        entries: list[HistoryEntry],
        analysis: AnalysisResult,
        fingerprints: Mapping[str, FileFingerprint],
        last_update: Optional[str],
        analysis_type: str,
        from_cache: bool = False,
    ) -> AnalysisResponse:
        return AnalysisResponse(
            entries=entries[:self.result_cap],
            analysis=analysis,
            metadata=ResponseMetadata(
                total_entries=len(entries),
                files={shell: fp.to_dict() for shell, fp in fingerprints.items()},
                last_update=last_update,
                analysis_type=analysis_type,
            ),
            from_cache=from_cache,
        )


#endregion


#region Functions


def create_history_analyzer(
    data_dir: Optional[Path] = None,
    tz: Optional[tzinfo] = None,
    clock: Optional[Callable[[], datetime]] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ShellHistoryAnalyzer:
    """
    Build an orchestrator from the user configuration.

    Explicit arguments win over configured values.

    Args:
        data_dir: Cache directory (defaults to the configured data dir)
        tz: Bucketing timezone (defaults to the configured timezone)
        clock: Source of "now" for streaks and time ranges
        home: Home directory used for history file discovery
        environ: Environment used for history file discovery

    Returns:
        ShellHistoryAnalyzer
    """
    from termlytic.config.settings import get_data_dir
    from termlytic.config.user_config import get_analysis_options, get_history_path_overrides

    options = get_analysis_options()
    resolver = HistoryPathResolver(home=home, environ=environ, overrides=get_history_path_overrides())
    stats = HistoryStatsAnalyzer(
        config=AnalyzerConfig(
            max_top_commands=options["max_top_commands"],
            day_start_hour=options["day_start_hour"],
            day_end_hour=options["day_end_hour"],
        ),
        tz=tz,
        clock=clock,
    )

    return ShellHistoryAnalyzer(
        reader=HistoryReader(resolver),
        store=CacheStore(data_dir if data_dir is not None else get_data_dir()),
        stats=stats,
        result_cap=options["result_cap"],
    )


#endregion
