#region Imports
from dataclasses import asdict, dataclass, field
from typing import Optional
#endregion


#region Data Classes


@dataclass
class DayNightSplit:
    """Commands run inside vs. outside the configured daytime window."""

    day: int = 0
    night: int = 0


@dataclass
class AnalysisResult:
    """
    Statistical profile of a batch of history entries.

    Always recomputed from its source entries; never edited in place.

    Attributes:
        total_commands: Entries that passed validation and dedupe
        original_total: Entries handed to the analyzer
        filtered_out: original_total - total_commands
        shell_counts: Valid entries per shell
        shell_percentages: Share of valid entries per shell (0-100, one decimal)
        command_frequency: Top-N full command lines
        main_command_frequency: Top-N main commands ('git')
        sub_command_frequency: Top-N main+sub pairs ('git commit')
        commands_by_shell: Top-N main commands per shell
        hourly_histogram: 24 buckets, local hour of day
        weekday_histogram: 7 buckets, 0 = Sunday
        daily_counts: Commands per local ISO date, ascending by date
        weekly_counts: Commands per ISO week ('2024-W05')
        monthly_counts: Commands per month ('2024-02')
        yearly_counts: Commands per year ('2024')
        day_vs_night: Daytime/nighttime split
        active_days_count: Distinct dates with at least one command
        longest_streak_days: Longest run of consecutive active days
        current_streak_days: Run of active days ending today
        unique_command_count: Distinct full command lines
        average_commands_per_active_day: round(total_commands / active days)
        busiest_day: Date with the most commands (None without timestamps)
        busiest_day_count: Command count on busiest_day
        laziest_day: Active date with the fewest commands
        laziest_day_count: Command count on laziest_day
        peak_hour: Hour of day with the most commands (None without timestamps)
    """

    total_commands: int = 0
    original_total: int = 0
    filtered_out: int = 0
    shell_counts: dict[str, int] = field(default_factory=dict)
    shell_percentages: dict[str, float] = field(default_factory=dict)
    command_frequency: dict[str, int] = field(default_factory=dict)
    main_command_frequency: dict[str, int] = field(default_factory=dict)
    sub_command_frequency: dict[str, int] = field(default_factory=dict)
    commands_by_shell: dict[str, dict[str, int]] = field(default_factory=dict)
    hourly_histogram: list[int] = field(default_factory=lambda: [0] * 24)
    weekday_histogram: list[int] = field(default_factory=lambda: [0] * 7)
    daily_counts: dict[str, int] = field(default_factory=dict)
    weekly_counts: dict[str, int] = field(default_factory=dict)
    monthly_counts: dict[str, int] = field(default_factory=dict)
    yearly_counts: dict[str, int] = field(default_factory=dict)
    day_vs_night: DayNightSplit = field(default_factory=DayNightSplit)
    active_days_count: int = 0
    longest_streak_days: int = 0
    current_streak_days: int = 0
    unique_command_count: int = 0
    average_commands_per_active_day: int = 0
    busiest_day: Optional[str] = None
    busiest_day_count: int = 0
    laziest_day: Optional[str] = None
    laziest_day_count: int = 0
    peak_hour: Optional[int] = None

    @property
    def top_main_command(self) -> Optional[str]:
        """Most used main command, or None for an empty analysis."""
        return next(iter(self.main_command_frequency), None)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        """
        Rebuild an analysis from its serialized form.

        Unknown keys are ignored so older cache files still load.
        """
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        split = values.get("day_vs_night")
        if isinstance(split, dict):
            values["day_vs_night"] = DayNightSplit(**split)
        return cls(**values)


@dataclass
class ChartData:
    """Chart-ready series: one label per bucket, one count per label."""

    labels: list[str] = field(default_factory=list)
    data: list[int] = field(default_factory=list)


@dataclass
class RangeStats:
    """
    Metrics scoped to a time window (day/week/month/year/all).

    Every field is always populated; an empty window yields zero-filled
    histograms and a zero-filled chart series.
    """

    time_range: str
    start_date: Optional[str]
    end_date: Optional[str]
    total_count: int
    unique_commands: int
    active_days: int
    top_commands: dict[str, int]
    top_main_commands: dict[str, int]
    shells: dict[str, int]
    hourly_histogram: list[int]
    weekday_histogram: list[int]
    chart_data: ChartData

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DateCommand:
    """A single command shown in a day's drill-down list."""

    command: str
    timestamp: Optional[str]
    shell: str


@dataclass
class CommandTicket:
    """
    Yearly summary card.

    Attributes:
        number: Ticket number, two-digit year followed by total mod 10000
        name: Display title
        total_commands: Commands with a timestamp in the year
        active_days: Days of the year with at least one command
        top_command: Most used main command of the year ('N/A' if none)
        shell_count: Number of shells seen in the overall analysis
        chart_data: 12 monthly values as percentage of the busiest month
        heatmap_data: One {'date', 'count'} record per day of the year
        year: The summarized year
    """

    number: str
    name: str
    total_commands: int
    active_days: int
    top_command: str
    shell_count: int
    chart_data: list[int]
    heatmap_data: list[dict]
    year: int

    def to_dict(self) -> dict:
        return asdict(self)
#endregion
