#region Imports
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from termlytic.aggregation.time_range import WEEKDAY_NAMES
from termlytic.models.analysis import AnalysisResult, CommandTicket, RangeStats
#endregion


#region Constants
GREEN = "#39d353"
YELLOW = "bright_yellow"
CYAN = "cyan"
DIM = "grey50"
BAR_WIDTH = 20
TOP_ROWS = 10
#endregion


#region Functions


def _format_number(num: int) -> str:
    """
    Format a count with a short suffix.

    Args:
        num: Number to format

    Returns:
        Formatted string (e.g., "1.4M", "45.2K", "987")
    """
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    elif num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return f"{num:,}"


def _create_bar(value: int, max_value: int, width: int = BAR_WIDTH, color: str = GREEN) -> Text:
    """
    Create a simple text bar for visualization.

    Args:
        value: Current value
        max_value: Maximum value for scaling
        width: Width of bar in characters
        color: Color for the filled portion of the bar

    Returns:
        Rich Text object with colored bar
    """
    if max_value == 0:
        return Text("▬" * width, style=DIM)

    filled = int((value / max_value) * width)
    bar = Text()
    bar.append("▬" * filled, style=color)
    bar.append("▬" * (width - filled), style=DIM)
    return bar


def _frequency_table(title: str, counts: dict[str, int], limit: int = TOP_ROWS) -> Table:
    table = Table(title=title, show_header=False, box=None, padding=(0, 1), title_justify="left")
    table.add_column("Command", style=CYAN, no_wrap=True, max_width=40, overflow="ellipsis")
    table.add_column("Count", justify="right")
    table.add_column("Bar")

    rows = list(counts.items())[:limit]
    max_value = max((count for _, count in rows), default=0)
    for name, count in rows:
        table.add_row(name, _format_number(count), _create_bar(count, max_value))

    if not rows:
        table.add_row(Text("no data", style=DIM), "", "")
    return table


def _histogram_table(title: str, labels: list[str], values: list[int]) -> Table:
    table = Table(title=title, show_header=False, box=None, padding=(0, 1), title_justify="left")
    table.add_column("Bucket", style=DIM, justify="right")
    table.add_column("Bar")
    table.add_column("Count", justify="right")

    max_value = max(values, default=0)
    for label, value in zip(labels, values):
        table.add_row(label, _create_bar(value, max_value), _format_number(value))
    return table


def _create_header(analysis: AnalysisResult, subtitle: Optional[str] = None) -> Panel:
    header_text = Text()
    header_text.append("Shell History", style="bold cyan")
    if subtitle:
        header_text.append(f"  ({subtitle})", style="dim")
    header_text.append("\n")
    header_text.append("Commands: ", style="white")
    header_text.append(f"{analysis.total_commands:,}", style=f"bold {YELLOW}")
    header_text.append(" | ", style="dim")
    header_text.append("Unique: ", style="white")
    header_text.append(f"{analysis.unique_command_count:,}", style=f"bold {YELLOW}")
    header_text.append(" | ", style="dim")
    header_text.append("Active days: ", style="white")
    header_text.append(f"{analysis.active_days_count:,}", style=f"bold {YELLOW}")

    return Panel(header_text, border_style="cyan")


def _create_summary_table(analysis: AnalysisResult) -> Table:
    table = Table(title="Summary", show_header=False, box=None, padding=(0, 2), title_justify="left")
    table.add_column("Metric", style=CYAN)
    table.add_column("Value", justify="right")

    table.add_row("Avg per active day", f"{analysis.average_commands_per_active_day:,}")
    table.add_row("Longest streak", f"{analysis.longest_streak_days} days")
    table.add_row("Current streak", f"{analysis.current_streak_days} days")
    if analysis.busiest_day:
        table.add_row("Busiest day", f"{analysis.busiest_day} ({analysis.busiest_day_count:,})")
    if analysis.laziest_day:
        table.add_row("Laziest day", f"{analysis.laziest_day} ({analysis.laziest_day_count:,})")
    if analysis.peak_hour is not None:
        table.add_row("Peak hour", f"{analysis.peak_hour:02d}:00")
    table.add_row("Day / night", f"{analysis.day_vs_night.day:,} / {analysis.day_vs_night.night:,}")
    if analysis.filtered_out:
        table.add_row("Filtered out", f"{analysis.filtered_out:,}")
    return table


def _create_shell_table(analysis: AnalysisResult) -> Table:
    table = Table(title="Shells", show_header=False, box=None, padding=(0, 2), title_justify="left")
    table.add_column("Shell", style=CYAN)
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right", style=DIM)

    for shell, count in sorted(analysis.shell_counts.items(), key=lambda item: item[1], reverse=True):
        share = analysis.shell_percentages.get(shell, 0.0)
        table.add_row(shell, f"{count:,}", f"{share:.1f}%")
    return table


def render_dashboard(
    console: Console,
    analysis: AnalysisResult,
    subtitle: Optional[str] = None,
    footer: Optional[str] = None,
) -> None:
    """
    Render the full statistics dashboard.

    Args:
        console: Rich console for rendering
        analysis: Analysis to display
        subtitle: Shown next to the title (e.g. data source)
        footer: Dim line printed after the dashboard
    """
    hours = [f"{hour:02d}" for hour in range(24)]

    overview = Table.grid(padding=(0, 4))
    overview.add_column()
    overview.add_column()
    overview.add_row(_create_summary_table(analysis), _create_shell_table(analysis))

    commands = Table.grid(padding=(0, 4))
    commands.add_column()
    commands.add_column()
    commands.add_row(
        _frequency_table("Top commands", analysis.main_command_frequency),
        _frequency_table("Top subcommands", analysis.sub_command_frequency),
    )

    console.print(Group(
        _create_header(analysis, subtitle),
        Text(""),
        overview,
        Text(""),
        commands,
        Text(""),
        _histogram_table("By hour", hours, analysis.hourly_histogram),
        Text(""),
        _histogram_table("By weekday", WEEKDAY_NAMES, analysis.weekday_histogram),
    ))
    if footer:
        console.print(f"\n[dim]{footer}[/dim]")


def render_range_stats(console: Console, stats: RangeStats) -> None:
    """
    Render metrics for one time range.

    Args:
        console: Rich console for rendering
        stats: Range statistics to display
    """
    window = "all time"
    if stats.start_date and stats.end_date:
        window = f"{stats.start_date[:10]} to {stats.end_date[:10]}"

    header = Text()
    header.append(f"Range: {stats.time_range}", style="bold cyan")
    header.append(f"  ({window})", style="dim")
    header.append("\n")
    header.append(f"Commands: {stats.total_count:,}", style="white")
    header.append(" | ", style="dim")
    header.append(f"Unique: {stats.unique_commands:,}", style="white")
    header.append(" | ", style="dim")
    header.append(f"Active days: {stats.active_days:,}", style="white")

    console.print(Panel(header, border_style="cyan"))
    console.print(_histogram_table("Activity", stats.chart_data.labels, stats.chart_data.data))
    console.print()
    console.print(_frequency_table("Top commands", stats.top_main_commands))


def render_ticket(console: Console, ticket: CommandTicket) -> None:
    """
    Render the yearly command ticket.

    Args:
        console: Rich console for rendering
        ticket: Ticket to display
    """
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    details = Table(show_header=False, box=None, padding=(0, 2))
    details.add_column("Field", style=CYAN)
    details.add_column("Value")
    details.add_row("Ticket", f"#{ticket.number}")
    details.add_row("Commands", f"{ticket.total_commands:,}")
    details.add_row("Active days", f"{ticket.active_days:,}")
    details.add_row("Top command", ticket.top_command)
    details.add_row("Shells", str(ticket.shell_count))

    console.print(Panel(
        Group(details, Text(""), _histogram_table("Monthly (% of busiest month)", months, ticket.chart_data)),
        title=f"[bold]{ticket.name}",
        border_style=GREEN,
        expand=False,
    ))


#endregion
