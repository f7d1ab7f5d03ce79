#region Imports
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, DefaultDict, Iterable, Optional

from termlytic.models.analysis import AnalysisResult, DayNightSplit
from termlytic.models.history_entry import MAX_COMMAND_LENGTH, HistoryEntry
from termlytic.utils.timezone import convert_to_local, resolve_timezone
#endregion


logger = logging.getLogger(__name__)


#region Constants
BATCH_SIZE = 1000
#endregion


#region Data Classes


@dataclass
class AnalyzerConfig:
    """
    Tunables for the statistics engine.

    Attributes:
        max_top_commands: Entries kept in each frequency table
        day_start_hour: First hour (inclusive) counted as daytime
        day_end_hour: First hour (exclusive) counted as nighttime again
    """

    max_top_commands: int = 50
    day_start_hour: int = 6
    day_end_hour: int = 18


#endregion


#region Functions


def validate_entries(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    """
    Drop invalid and duplicate entries.

    An entry is invalid when its command is empty after trimming or longer
    than MAX_COMMAND_LENGTH. Duplicates share the same (command, timestamp)
    pair, entries without a timestamp all sharing the 'none' stamp. The first
    occurrence wins and relative order is preserved.

    Args:
        entries: Entries in their original order

    Returns:
        Valid, de-duplicated entries
    """
    valid: list[HistoryEntry] = []
    seen: set[tuple[str, str]] = set()

    for entry in entries:
        if entry is None or entry.command_info is None:
            continue

        command = entry.command_info.full.strip()
        if not command or len(command) > MAX_COMMAND_LENGTH:
            continue

        key = entry.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        valid.append(entry)

    return valid


def top_n(counter: dict[str, int], limit: int) -> dict[str, int]:
    """
    Keep the highest counts.

    Ties keep the order in which keys were first counted, so the result is
    deterministic for identical input order.

    Args:
        counter: Key -> count, in first-seen order
        limit: Maximum number of keys to keep

    Returns:
        Dict ordered by descending count
    """
    ranked = sorted(counter.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:limit])


def compute_streaks(active_dates: Iterable[date], today: date) -> tuple[int, int]:
    """
    Compute the longest and current runs of consecutive active days.

    The current streak counts backward from today and stops at the first
    missing day, so it is 0 when today itself has no activity.

    Args:
        active_dates: Dates with at least one command
        today: Reference date for the current streak

    Returns:
        (longest_streak, current_streak)
    """
    dates = sorted(set(active_dates))
    if not dates:
        return 0, 0

    longest = 1
    run = 1
    for previous, current in zip(dates, dates[1:]):
        if (current - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    present = set(dates)
    current_streak = 0
    expected = today
    while expected in present:
        current_streak += 1
        expected -= timedelta(days=1)

    return longest, current_streak


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def iso_week_key(day: date) -> str:
    """Format a date's ISO week as 'YYYY-Www'."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def _sorted_counts(counter: dict[str, int]) -> dict[str, int]:
    return dict(sorted(counter.items()))


#endregion


#region Classes


class _Accumulator:
    """Mutable counters filled during the single pass."""

    def __init__(self) -> None:
        self.shells: dict[str, int] = {}
        self.full: dict[str, int] = {}
        self.main: dict[str, int] = {}
        self.sub: dict[str, int] = {}
        self.by_shell: DefaultDict[str, dict[str, int]] = defaultdict(dict)
        self.unique: set[str] = set()
        self.hourly = [0] * 24
        self.weekday = [0] * 7
        self.daily: dict[str, int] = {}
        self.weekly: dict[str, int] = {}
        self.monthly: dict[str, int] = {}
        self.yearly: dict[str, int] = {}
        self.active_dates: set[date] = set()
        self.day_night = DayNightSplit()


def _increment(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


class HistoryStatsAnalyzer:
    """
    Statistics engine for parsed history entries.

    analyze() depends only on its input, the configuration, the timezone and
    the clock (used for the current streak).
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            config: Analysis tunables (defaults used when None)
            tz: Timezone for hour/day bucketing (configured timezone when None)
            clock: Returns the current aware datetime; defaults to datetime.now
        """
        self.config = config or AnalyzerConfig()
        self.tz = tz if tz is not None else resolve_timezone()
        self._clock = clock

    def now(self) -> datetime:
        """Current time in the analyzer's timezone."""
        if self._clock is not None:
            return convert_to_local(self._clock(), self.tz)
        return datetime.now(self.tz)

    def to_local(self, timestamp: datetime) -> datetime:
        return convert_to_local(timestamp, self.tz)

    def analyze(self, entries: list[HistoryEntry]) -> AnalysisResult:
        """
        Build the full statistical profile of a batch of entries.

        Args:
            entries: Entries in any order; duplicates and invalid entries are dropped

        Returns:
            AnalysisResult
        """
        valid = validate_entries(entries)
        logger.info("Analyzing %d entries (%d after filtering)", len(entries), len(valid))

        acc = _Accumulator()
        total_batches = math.ceil(len(valid) / BATCH_SIZE)
        for start in range(0, len(valid), BATCH_SIZE):
            if start % (BATCH_SIZE * 5) == 0:
                logger.debug("Processing batch %d/%d", start // BATCH_SIZE + 1, total_batches)
            for entry in valid[start:start + BATCH_SIZE]:
                self._process_entry(entry, acc)

        return self._finalize(acc, total=len(valid), original=len(entries))

    def _process_entry(self, entry: HistoryEntry, acc: _Accumulator) -> None:
        info = entry.command_info

        _increment(acc.shells, entry.shell)

        acc.unique.add(info.full)
        _increment(acc.main, info.main)
        _increment(acc.full, info.full)
        if info.sub:
            _increment(acc.sub, f"{info.main} {info.sub}")
        _increment(acc.by_shell[entry.shell], info.main)

        if entry.has_plausible_timestamp:
            self._process_time(entry.timestamp, acc)

    def _process_time(self, timestamp: datetime, acc: _Accumulator) -> None:
        local = self.to_local(timestamp)
        day = local.date()
        date_key = day.isoformat()

        _increment(acc.daily, date_key)
        acc.active_dates.add(day)

        acc.hourly[local.hour] += 1
        # isoweekday: Monday=1 .. Sunday=7 -> Sunday=0
        acc.weekday[local.isoweekday() % 7] += 1

        if self.config.day_start_hour <= local.hour < self.config.day_end_hour:
            acc.day_night.day += 1
        else:
            acc.day_night.night += 1

        _increment(acc.weekly, iso_week_key(day))
        _increment(acc.monthly, f"{local.year}-{local.month:02d}")
        _increment(acc.yearly, str(local.year))

    def _finalize(self, acc: _Accumulator, total: int, original: int) -> AnalysisResult:
        limit = self.config.max_top_commands

        longest, current = compute_streaks(acc.active_dates, self.now().date())
        active_days = len(acc.active_dates)
        daily = _sorted_counts(acc.daily)

        busiest_day, busiest_count = None, 0
        laziest_day, laziest_count = None, 0
        for day_key, count in daily.items():
            if busiest_day is None or count > busiest_count:
                busiest_day, busiest_count = day_key, count
            if laziest_day is None or count < laziest_count:
                laziest_day, laziest_count = day_key, count

        peak_hour = None
        if any(acc.hourly):
            peak_hour = acc.hourly.index(max(acc.hourly))

        shell_percentages = {
            shell: round(count / total * 100, 1) for shell, count in acc.shells.items()
        } if total else {}

        return AnalysisResult(
            total_commands=total,
            original_total=original,
            filtered_out=original - total,
            shell_counts=dict(acc.shells),
            shell_percentages=shell_percentages,
            command_frequency=top_n(acc.full, limit),
            main_command_frequency=top_n(acc.main, limit),
            sub_command_frequency=top_n(acc.sub, limit),
            commands_by_shell={shell: top_n(counts, limit) for shell, counts in acc.by_shell.items()},
            hourly_histogram=acc.hourly,
            weekday_histogram=acc.weekday,
            daily_counts=daily,
            weekly_counts=_sorted_counts(acc.weekly),
            monthly_counts=_sorted_counts(acc.monthly),
            yearly_counts=_sorted_counts(acc.yearly),
            day_vs_night=acc.day_night,
            active_days_count=active_days,
            longest_streak_days=longest,
            current_streak_days=current,
            unique_command_count=len(acc.unique),
            average_commands_per_active_day=round_half_up(total / active_days) if active_days else 0,
            busiest_day=busiest_day,
            busiest_day_count=busiest_count,
            laziest_day=laziest_day,
            laziest_day_count=laziest_count,
            peak_hour=peak_hour,
        )


#endregion
