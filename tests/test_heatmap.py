"""Tests for aggregation/heatmap.py - yearly heatmap, date drill-down and tickets."""

from datetime import datetime, timezone

import pytest

from termlytic.aggregation.heatmap import (
    available_years,
    commands_for_date,
    generate_command_ticket,
    generate_ticket_number,
    heatmap_for_year,
    monthly_percentages,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def mixed_entries(make_entry):
    return [
        make_entry("git status", ts=utc(2024, 3, 14, 9), shell="zsh"),
        make_entry("ls", ts=utc(2024, 3, 14, 10), shell="fish"),
        make_entry("git push", ts=utc(2024, 3, 15, 9), shell="zsh"),
        make_entry("make", ts=utc(2023, 7, 1, 12), shell="zsh"),
        make_entry("pwd", shell="bash"),
    ]


class TestHeatmapForYear:
    """Test heatmap_for_year."""

    def test_leap_year_has_366_days(self, stats_analyzer):
        heatmap = heatmap_for_year(stats_analyzer, [], 2024)

        assert len(heatmap) == 366
        assert heatmap[0] == ("2024-01-01", 0)
        assert heatmap[-1] == ("2024-12-31", 0)

    def test_common_year_has_365_days(self, stats_analyzer):
        assert len(heatmap_for_year(stats_analyzer, [], 2023)) == 365

    def test_counts_and_year_filter(self, stats_analyzer, mixed_entries):
        counts = dict(heatmap_for_year(stats_analyzer, mixed_entries, 2024))

        assert counts["2024-03-14"] == 2
        assert counts["2024-03-15"] == 1
        assert sum(counts.values()) == 3

    @pytest.mark.parametrize("year", [0, -1, 10000])
    def test_invalid_year(self, stats_analyzer, year):
        with pytest.raises(ValueError, match="Invalid year"):
            heatmap_for_year(stats_analyzer, [], year)

    def test_last_supported_year(self, stats_analyzer):
        heatmap = heatmap_for_year(stats_analyzer, [], 9999)
        assert heatmap[-1] == ("9999-12-31", 0)

    @pytest.mark.parametrize(
        "shells,expected",
        [("all", 2), ("zsh", 1), (["fish"], 1), (["zsh", "fish"], 2), (["bash"], 0)],
    )
    def test_shell_filter(self, stats_analyzer, mixed_entries, shells, expected):
        counts = dict(heatmap_for_year(stats_analyzer, mixed_entries, 2024, shells))
        assert counts["2024-03-14"] == expected


class TestCommandsForDate:
    """Test commands_for_date."""

    def test_commands_of_a_day(self, stats_analyzer, mixed_entries):
        commands = commands_for_date(stats_analyzer, mixed_entries, "2024-03-14")

        assert [c.command for c in commands] == ["git status", "ls"]
        assert commands[1].shell == "fish"
        assert commands[0].timestamp.startswith("2024-03-14T09:00:00")

    def test_shell_filter(self, stats_analyzer, mixed_entries):
        commands = commands_for_date(stats_analyzer, mixed_entries, "2024-03-14", ["zsh"])
        assert [c.command for c in commands] == ["git status"]

    @pytest.mark.parametrize("bad", ["2024-13-45", "yesterday", ""])
    def test_invalid_date(self, stats_analyzer, bad):
        with pytest.raises(ValueError):
            commands_for_date(stats_analyzer, [], bad)


class TestAvailableYears:
    """Test available_years."""

    def test_newest_first_and_plausible_only(self, stats_analyzer, mixed_entries, make_entry):
        entries = mixed_entries + [make_entry("old", ts=utc(1985, 1, 1))]
        assert available_years(stats_analyzer, entries) == [2024, 2023]

    def test_no_timestamps(self, stats_analyzer, make_entry):
        assert available_years(stats_analyzer, [make_entry("ls", shell="bash")]) == []


class TestCommandTicket:
    """Test ticket generation."""

    def test_ticket_number(self):
        assert generate_ticket_number(2024, 3) == "240003"
        assert generate_ticket_number(2024, 12345) == "242345"

    def test_monthly_percentages(self):
        heatmap = [("2024-01-01", 3), ("2024-01-02", 0), ("2024-02-01", 1)]
        assert monthly_percentages(heatmap) == [100, 33] + [0] * 10

    def test_ticket_for_year(self, stats_analyzer, mixed_entries):
        ticket = generate_command_ticket(stats_analyzer, mixed_entries, 2024, shell_count=3)

        assert ticket.number == "240003"
        assert ticket.total_commands == 3
        assert ticket.active_days == 2
        assert ticket.top_command == "git"
        assert ticket.shell_count == 3
        assert ticket.chart_data[2] == 100
        assert len(ticket.chart_data) == 12
        assert len(ticket.heatmap_data) == 366
        assert ticket.heatmap_data[0] == {"date": "2024-01-01", "count": 0}

    def test_empty_year(self, stats_analyzer):
        ticket = generate_command_ticket(stats_analyzer, [], 2022, shell_count=0)

        assert ticket.number == "220000"
        assert ticket.top_command == "N/A"
        assert ticket.chart_data == [0] * 12
