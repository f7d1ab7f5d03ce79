#region Imports
import calendar
import logging
from datetime import datetime, timedelta
from typing import Optional

from termlytic.aggregation.analyzer import HistoryStatsAnalyzer, validate_entries
from termlytic.config.settings import TIME_RANGES
from termlytic.models.analysis import ChartData, RangeStats
from termlytic.models.history_entry import HistoryEntry
#endregion


logger = logging.getLogger(__name__)


#region Constants
WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
#endregion


#region Functions


def get_range_bounds(time_range: str, now: datetime) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Compute the inclusive window for a time range.

    Args:
        time_range: One of 'day', 'week', 'month', 'year', 'all'
        now: Current time in the bucketing timezone

    Returns:
        (start, end); both None for 'all'

    Raises:
        ValueError: If time_range is unknown
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range: {time_range}. Must be one of {', '.join(TIME_RANGES)}")

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_today = midnight.replace(hour=23, minute=59, second=59, microsecond=999999)

    if time_range == "day":
        return midnight, end_of_today
    if time_range == "week":
        return midnight - timedelta(days=6), end_of_today
    if time_range == "month":
        last_day = calendar.monthrange(now.year, now.month)[1]
        return midnight.replace(day=1), end_of_today.replace(day=last_day)
    if time_range == "year":
        return midnight.replace(month=1, day=1), end_of_today.replace(month=12, day=31)
    return None, None


def filter_entries_in_range(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    start: Optional[datetime],
    end: Optional[datetime],
) -> list[HistoryEntry]:
    """Keep entries whose local timestamp falls inside [start, end]; no bounds keeps everything."""
    if start is None or end is None:
        return list(entries)

    return [
        entry for entry in entries
        if entry.timestamp is not None and start <= analyzer.to_local(entry.timestamp) <= end
    ]


def build_chart_data(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    time_range: str,
    start: Optional[datetime],
    end: Optional[datetime],
) -> ChartData:
    """
    Bucket entries into a chart series for a time range.

    - day: 24 hourly buckets ('09:00')
    - week: the last 7 days ('3/14 (Thu)')
    - month: every day of the month ('3/14')
    - year: 12 months ('Mar')
    - all: every month with data, oldest first ('Mar 2024'); empty when no data

    Args:
        analyzer: Supplies the bucketing timezone
        entries: Entries already filtered to the range
        time_range: Range name
        start: Window start (None for 'all')
        end: Window end (None for 'all')

    Returns:
        ChartData with one value per label
    """
    counts: dict = {}
    for entry in entries:
        if not entry.has_plausible_timestamp:
            continue
        local = analyzer.to_local(entry.timestamp)
        if time_range == "day":
            key = local.hour
        elif time_range in ("week", "month"):
            key = local.date()
        else:
            key = (local.year, local.month)
        counts[key] = counts.get(key, 0) + 1

    chart = ChartData()

    if time_range == "day":
        for hour in range(24):
            chart.labels.append(f"{hour:02d}:00")
            chart.data.append(counts.get(hour, 0))

    elif time_range == "week":
        for offset in range(6, -1, -1):
            day = (end - timedelta(days=offset)).date()
            chart.labels.append(f"{day.month}/{day.day} ({WEEKDAY_NAMES[day.isoweekday() % 7]})")
            chart.data.append(counts.get(day, 0))

    elif time_range == "month":
        day = start.date()
        while day <= end.date():
            chart.labels.append(f"{day.month}/{day.day}")
            chart.data.append(counts.get(day, 0))
            day += timedelta(days=1)

    elif time_range == "year":
        for month in range(1, 13):
            chart.labels.append(MONTH_NAMES[month - 1])
            chart.data.append(counts.get((start.year, month), 0))

    else:
        for year, month in sorted(counts):
            chart.labels.append(f"{MONTH_NAMES[month - 1]} {year}")
            chart.data.append(counts[(year, month)])

    return chart


def stats_for_range(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    time_range: str,
) -> RangeStats:
    """
    Compute metrics for one time window ending now.

    Entries without a timestamp only count towards 'all'. The result is
    always fully shaped, so an empty window gives zero-filled series.

    Args:
        analyzer: Statistics engine (timezone, clock, top-N settings)
        entries: All known entries
        time_range: One of 'day', 'week', 'month', 'year', 'all'

    Returns:
        RangeStats

    Raises:
        ValueError: If time_range is unknown
    """
    start, end = get_range_bounds(time_range, analyzer.now())

    in_range = validate_entries(filter_entries_in_range(analyzer, entries, start, end))
    analysis = analyzer.analyze(in_range)
    chart = build_chart_data(analyzer, in_range, time_range, start, end)

    logger.info("Range %s: %d entries", time_range, len(in_range))

    return RangeStats(
        time_range=time_range,
        start_date=start.isoformat() if start is not None else None,
        end_date=end.isoformat() if end is not None else None,
        total_count=analysis.total_commands,
        unique_commands=analysis.unique_command_count,
        active_days=analysis.active_days_count,
        top_commands=analysis.command_frequency,
        top_main_commands=analysis.main_command_frequency,
        shells=analysis.shell_counts,
        hourly_histogram=analysis.hourly_histogram,
        weekday_histogram=analysis.weekday_histogram,
        chart_data=chart,
    )


#endregion
