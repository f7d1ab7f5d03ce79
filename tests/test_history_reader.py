"""Tests for data/history_reader.py - full and incremental reads."""

from datetime import datetime, timezone

import pytest

from termlytic.data import history_reader
from termlytic.data.history_reader import (
    HistoryReader,
    ShellReadStats,
    parse_history_lines,
    sort_entries,
    split_history_lines,
)
from termlytic.data.path_resolver import HistoryPathResolver


class TestLineSplitting:
    """Test split_history_lines."""

    def test_drops_blank_and_comment_lines(self):
        content = "#1700000000\nls\n\n   \n  # note\r\ngit status\r\n"
        assert split_history_lines(content) == ["ls", "git status"]

    def test_keeps_indentation(self):
        content = "- cmd: ls\n  when: 1700000000\n"
        assert split_history_lines(content) == ["- cmd: ls", "  when: 1700000000"]


class TestParseHistoryLines:
    """Test parse_history_lines error handling."""

    def test_bad_line_is_skipped(self, monkeypatch):
        original = history_reader.parse_shell_entry

        def flaky(shell, line, lines, index):
            if line == "boom":
                raise ValueError("cannot parse")
            return original(shell, line, lines, index)

        monkeypatch.setattr(history_reader, "parse_shell_entry", flaky)
        stats = ShellReadStats()
        entries = parse_history_lines("bash", ["ls", "boom", "pwd"], stats)

        assert [e.command for e in entries] == ["ls", "pwd"]
        assert stats.parse_errors == 1
        assert stats.skipped == 1
        assert stats.entries == 2

    def test_fish_records_consumed_atomically(self):
        lines = ["- cmd: ls", "  when: 1700000000", "- cmd: pwd", "  when: 1700000100"]
        entries = parse_history_lines("fish", lines)
        assert [e.command for e in entries] == ["ls", "pwd"]
        assert all(e.timestamp is not None for e in entries)


class TestReadHistory:
    """Test HistoryReader.read_history."""

    def test_bash_file(self, home):
        (home / ".bash_history").write_text("ls -la\ngit status\nls -la\n")
        reader = HistoryReader(HistoryPathResolver(home=home, environ={"SHELL": "/bin/bash"}))

        entries = reader.read_history("bash")

        assert [e.command for e in entries] == ["ls -la", "git status", "ls -la"]
        assert all(e.timestamp is None for e in entries)
        assert all(e.shell == "bash" for e in entries)

    def test_missing_file_yields_nothing(self, resolver):
        assert HistoryReader(resolver).read_history("bash") == []

    def test_empty_file_yields_nothing(self, home, resolver):
        (home / ".zsh_history").write_text("")
        assert HistoryReader(resolver).read_history("zsh") == []

    def test_unsupported_shell(self, resolver):
        with pytest.raises(ValueError):
            HistoryReader(resolver).read_history("tcsh")

    def test_incremental_read_from_offset(self, home, resolver):
        path = home / ".zsh_history"
        path.write_text(": 1700000000:0;ls\n: 1700000060:0;pwd\n")
        old_size = path.stat().st_size
        with open(path, "a") as f:
            f.write(": 1700000120:0;git status\n: 1700000180:0;make\n")

        entries = HistoryReader(resolver).read_history("zsh", since_byte=old_size)

        assert [e.command for e in entries] == ["git status", "make"]

    def test_offset_is_clamped(self, home, resolver):
        path = home / ".zsh_history"
        path.write_text(": 1700000000:0;ls\n")
        reader = HistoryReader(resolver)

        assert reader.read_history("zsh", since_byte=10_000) == []
        assert len(reader.read_history("zsh", since_byte=-5)) == 1

    def test_invalid_utf8_does_not_fail(self, home, resolver):
        (home / ".zsh_history").write_bytes(b": 1700000000:0;echo \xff\xfe\n: 1700000060:0;ls\n")
        entries = HistoryReader(resolver).read_history("zsh")
        assert len(entries) == 2

    def test_override_path_wins(self, home, tmp_path):
        custom = tmp_path / "custom_history"
        custom.write_text("htop\n")
        (home / ".bash_history").write_text("ls\n")
        resolver = HistoryPathResolver(home=home, environ={}, overrides={"bash": str(custom)})

        entries = HistoryReader(resolver).read_history("bash")

        assert [e.command for e in entries] == ["htop"]


class TestReadAllHistories:
    """Test HistoryReader.read_all_histories."""

    def test_combines_and_sorts_newest_first(self, home, resolver):
        (home / ".bash_history").write_text("ls\n")
        (home / ".zsh_history").write_text(": 1700000000:0;older\n: 1700000600:0;newer\n")
        fish_dir = home / ".local" / "share" / "fish"
        fish_dir.mkdir(parents=True)
        (fish_dir / "fish_history").write_text("- cmd: middle\n  when: 1700000300\n")

        result = HistoryReader(resolver).read_all_histories()

        assert [e.command for e in result.entries] == ["newer", "middle", "older", "ls"]
        assert result.shell_counts == {"zsh": 2, "bash": 1, "fish": 1}
        assert result.diagnostics["zsh"]["detectedAsCurrent"] is True
        assert result.diagnostics["bash"]["hasValidEntries"] is True

    def test_current_shell_read_first(self, resolver):
        result = HistoryReader(resolver).read_all_histories()
        assert list(result.shell_counts) == ["zsh", "bash", "fish"]
        assert result.entries == []


class TestSortEntries:
    """Test sort_entries ordering."""

    def test_null_timestamps_sink_and_keep_order(self, make_entry):
        entries = [
            make_entry("a"),
            make_entry("b", ts=datetime(2024, 1, 1, tzinfo=timezone.utc)),
            make_entry("c"),
            make_entry("d", ts=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        ]
        assert [e.command for e in sort_entries(entries)] == ["d", "b", "a", "c"]
