#region Imports
from datetime import date
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
#endregion


#region Constants
DARK_GREY_RGB = (60, 60, 58)      # #3C3C3A, past days without commands
GREEN_RGB = (57, 211, 83)         # #39D353, busiest day
FUTURE_COLOR = "#6B6B68"

LEGEND_COLORS = [
    "#3C3C3A",
    "#3A5A3F",
    "#3B7A48",
    "#3A9A50",
    "#39B95A",
    "#39D353",
]

DAYS_OF_WEEK = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
#endregion


#region Functions


def build_weeks(heatmap: list[tuple[str, int]]) -> list[list[tuple[Optional[date], int]]]:
    """
    Arrange a year of daily counts into Sunday-first week columns.

    Args:
        heatmap: (ISO date, count) pairs covering a full year

    Returns:
        List of weeks; each week holds 7 (date, count) cells, padded with (None, 0)
    """
    weeks: list[list[tuple[Optional[date], int]]] = []
    current_week: list[tuple[Optional[date], int]] = []

    if heatmap:
        first_day = date.fromisoformat(heatmap[0][0])
        # weekday() returns 0=Monday; shift so Sunday=0
        for _ in range((first_day.weekday() + 1) % 7):
            current_week.append((None, 0))

    for day_key, count in heatmap:
        current_week.append((date.fromisoformat(day_key), count))
        if len(current_week) == 7:
            weeks.append(current_week)
            current_week = []

    if current_week:
        while len(current_week) < 7:
            current_week.append((None, 0))
        weeks.append(current_week)

    return weeks


def get_count_style(count: int, max_count: int, day: date, today: date) -> str:
    """
    Rich color for one heatmap cell.

    Args:
        count: Commands on the day
        max_count: Commands on the busiest day of the year
        day: The date of this cell
        today: Today's date

    Returns:
        Rich color style string
    """
    if day > today:
        return FUTURE_COLOR

    if count == 0:
        return LEGEND_COLORS[0]

    ratio = count / max_count if max_count > 0 else 0
    # Non-linear scaling keeps light days visible next to very busy ones
    ratio = ratio ** 0.5

    r = int(DARK_GREY_RGB[0] + (GREEN_RGB[0] - DARK_GREY_RGB[0]) * ratio)
    g = int(DARK_GREY_RGB[1] + (GREEN_RGB[1] - DARK_GREY_RGB[1]) * ratio)
    b = int(DARK_GREY_RGB[2] + (GREEN_RGB[2] - DARK_GREY_RGB[2]) * ratio)

    return f"#{r:02x}{g:02x}{b:02x}"


def create_heatmap_panel(
    year: int,
    heatmap: list[tuple[str, int]],
    today: date,
    title: Optional[str] = None,
) -> Panel:
    """
    Build a GitHub-style year heatmap panel.

    Args:
        year: Displayed year
        heatmap: (ISO date, count) pairs for every day of the year
        today: Today's date (later days are drawn as future)
        title: Panel title (defaults to 'Commands in <year>')

    Returns:
        Rich Panel
    """
    weeks = build_weeks(heatmap)
    max_count = max((count for _, count in heatmap), default=0)

    table = Table(
        show_header=True,
        box=None,
        padding=(0, 0),
        collapse_padding=True,
    )
    table.add_column("", style="dim", width=3, justify="right")

    last_month = None
    for week in weeks:
        month_label = ""
        for day, _ in week:
            if day is not None:
                if day.month != last_month:
                    month_label = str(day.month)
                    last_month = day.month
                break
        table.add_column(month_label, style="dim", width=2, justify="center")

    for day_idx in range(7):
        row_cells = [DAYS_OF_WEEK[day_idx]]
        for week in weeks:
            day, count = week[day_idx]
            if day is None:
                row_cells.append(Text("  ", style=""))
            else:
                row_cells.append(Text("  ", style=f"on {get_count_style(count, max_count, day, today)}"))
        table.add_row(*row_cells)

    legend = Text()
    legend.append("Less ", style="dim")
    for color in LEGEND_COLORS:
        legend.append("■", style=color)
    legend.append(" More", style="dim")

    total = sum(count for _, count in heatmap)
    active_days = sum(1 for _, count in heatmap if count > 0)
    summary = Text(f"{total:,} commands across {active_days} active days", style="dim")

    return Panel(
        Group(table, Text(""), legend, summary),
        title=f"[bold]{title or f'Commands in {year}'}",
        border_style="white",
        expand=True,
    )


def render_heatmap(
    console: Console,
    year: int,
    heatmap: list[tuple[str, int]],
    today: date,
    title: Optional[str] = None,
) -> None:
    """Print the year heatmap panel."""
    console.print(create_heatmap_panel(year, heatmap, today, title))


#endregion
