#region Imports
import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from termlytic.aggregation.analyzer import HistoryStatsAnalyzer, round_half_up, top_n, validate_entries
from termlytic.models.analysis import CommandTicket, DateCommand
from termlytic.models.history_entry import HistoryEntry
#endregion


logger = logging.getLogger(__name__)


ShellFilter = Union[str, Iterable[str], None]


#region Functions


def normalize_shell_filter(shells: ShellFilter) -> Optional[set[str]]:
    """
    Turn a shell filter argument into a set.

    Args:
        shells: 'all' (or None) for no filtering, a shell name, or several names

    Returns:
        Set of shell names, or None meaning every shell
    """
    if shells is None or shells == "all":
        return None
    if isinstance(shells, str):
        return {shells}
    selected = set(shells)
    if "all" in selected:
        return None
    return selected


def _matches_shell(entry: HistoryEntry, selected: Optional[set[str]]) -> bool:
    return selected is None or entry.shell in selected


def heatmap_for_year(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    year: int,
    shells: ShellFilter = "all",
) -> list[tuple[str, int]]:
    """
    Daily command counts for every day of a year.

    Args:
        analyzer: Supplies the bucketing timezone
        entries: All known entries
        year: Calendar year
        shells: Shell filter ('all', a name, or a collection of names)

    Returns:
        One (ISO date, count) pair per calendar day, Jan 1 to Dec 31, zero-filled

    Raises:
        ValueError: If year is outside 1..9999
    """
    if not date.min.year <= year <= date.max.year:
        raise ValueError(f"Invalid year: {year}")

    selected = normalize_shell_filter(shells)

    daily: dict[date, int] = {}
    for entry in validate_entries(entries):
        if not entry.has_plausible_timestamp or not _matches_shell(entry, selected):
            continue
        day = analyzer.to_local(entry.timestamp).date()
        if day.year != year:
            continue
        daily[day] = daily.get(day, 0) + 1

    first = date(year, 1, 1)
    day_count = (date(year, 12, 31) - first).days + 1
    heatmap = []
    for offset in range(day_count):
        day = first + timedelta(days=offset)
        heatmap.append((day.isoformat(), daily.get(day, 0)))

    logger.info("Heatmap %d: %d active days, %d commands", year, len(daily), sum(daily.values()))
    return heatmap


def commands_for_date(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    date_str: str,
    shells: ShellFilter = "all",
) -> list[DateCommand]:
    """
    All commands run on a given local date.

    Args:
        analyzer: Supplies the bucketing timezone
        entries: All known entries (order is preserved)
        date_str: Date in YYYY-MM-DD format
        shells: Shell filter

    Returns:
        Commands of that day

    Raises:
        ValueError: If date_str is not a valid ISO date
    """
    try:
        target = date.fromisoformat(date_str)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date format: {date_str}")

    selected = normalize_shell_filter(shells)
    commands = []
    for entry in entries:
        if entry.timestamp is None or not _matches_shell(entry, selected):
            continue
        if analyzer.to_local(entry.timestamp).date() != target:
            continue
        commands.append(DateCommand(
            command=entry.command_info.full,
            timestamp=entry.timestamp.isoformat(),
            shell=entry.shell,
        ))
    return commands


def available_years(analyzer: HistoryStatsAnalyzer, entries: list[HistoryEntry]) -> list[int]:
    """
    Years that contain at least one plausibly timestamped entry.

    Returns:
        Years, newest first
    """
    years = {
        analyzer.to_local(entry.timestamp).year
        for entry in entries
        if entry.has_plausible_timestamp
    }
    return sorted(years, reverse=True)


def monthly_percentages(heatmap: list[tuple[str, int]]) -> list[int]:
    """
    Monthly totals scaled against the busiest month.

    Args:
        heatmap: Output of heatmap_for_year

    Returns:
        12 integers in 0-100
    """
    monthly = [0] * 12
    for day_key, count in heatmap:
        monthly[int(day_key[5:7]) - 1] += count

    peak = max(max(monthly), 1)
    return [round_half_up(value / peak * 100) for value in monthly]


def generate_ticket_number(year: int, total_commands: int) -> str:
    """Two-digit year followed by the command total modulo 10000, zero padded."""
    return f"{str(year)[-2:]}{total_commands % 10000:04d}"


def generate_command_ticket(
    analyzer: HistoryStatsAnalyzer,
    entries: list[HistoryEntry],
    year: int,
    shell_count: int,
) -> CommandTicket:
    """
    Build the yearly summary ticket.

    Args:
        analyzer: Statistics engine
        entries: All known entries
        year: Year to summarize
        shell_count: Number of shells in the overall analysis

    Returns:
        CommandTicket

    Raises:
        ValueError: If year is outside 1..9999
    """
    heatmap = heatmap_for_year(analyzer, entries, year, "all")
    total = sum(count for _, count in heatmap)
    active_days = sum(1 for _, count in heatmap if count > 0)

    main_counts: dict[str, int] = {}
    for entry in validate_entries(entries):
        if not entry.has_plausible_timestamp:
            continue
        if analyzer.to_local(entry.timestamp).year != year:
            continue
        main = entry.command_info.main
        main_counts[main] = main_counts.get(main, 0) + 1
    top_command = next(iter(top_n(main_counts, 1)), "N/A")

    return CommandTicket(
        number=generate_ticket_number(year, total),
        name=f"{year} Command Summary",
        total_commands=total,
        active_days=active_days,
        top_command=top_command,
        shell_count=shell_count,
        chart_data=monthly_percentages(heatmap),
        heatmap_data=[{"date": day_key, "count": count} for day_key, count in heatmap],
        year=year,
    )


#endregion
