"""Shared test fixtures for termlytic tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from termlytic.aggregation.analyzer import HistoryStatsAnalyzer
from termlytic.data.history_reader import HistoryReader
from termlytic.data.path_resolver import HistoryPathResolver
from termlytic.models.history_entry import CommandInfo, HistoryEntry
from termlytic.services.history_analyzer import ShellHistoryAnalyzer
from termlytic.storage.cache_store import CacheStore

# Friday 2024-01-05 12:00 UTC
FIXED_NOW = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the user config file at a temporary location."""
    config_path = tmp_path / "config" / "termlytic.json"
    monkeypatch.setattr("termlytic.config.user_config.CONFIG_PATH", config_path)
    monkeypatch.delenv("TERMLYTIC_DATA_DIR", raising=False)
    return config_path


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def stats_analyzer():
    """Statistics engine bucketing in UTC with a frozen clock."""
    return HistoryStatsAnalyzer(tz=timezone.utc, clock=lambda: FIXED_NOW)


@pytest.fixture
def home(tmp_path):
    """Empty home directory for synthetic history files."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def resolver(home):
    return HistoryPathResolver(home=home, environ={"SHELL": "/bin/zsh"})


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def make_analyzer(home, data_dir, stats_analyzer):
    """Factory for orchestrators sharing the temporary home and data dir."""

    def _make(result_cap: int = 10000, data_path: Path = None) -> ShellHistoryAnalyzer:
        resolver = HistoryPathResolver(home=home, environ={"SHELL": "/bin/zsh"})
        return ShellHistoryAnalyzer(
            reader=HistoryReader(resolver),
            store=CacheStore(data_path or data_dir),
            stats=stats_analyzer,
            result_cap=result_cap,
        )

    return _make


@pytest.fixture
def make_entry():
    """Factory for HistoryEntry objects; ts is epoch seconds or a datetime."""

    def _make(command: str, ts=None, shell: str = "zsh", duration: int = 0) -> HistoryEntry:
        if isinstance(ts, (int, float)):
            ts = datetime.fromtimestamp(ts, tz=timezone.utc)
        return HistoryEntry(
            command=command,
            timestamp=ts,
            duration_seconds=duration,
            shell=shell,
            command_info=CommandInfo.from_command(command),
        )

    return _make


def zsh_line(ts: datetime, command: str, duration: int = 0) -> str:
    return f": {int(ts.timestamp())}:{duration};{command}"


@pytest.fixture
def write_zsh(home):
    """Write (datetime, command) pairs as zsh extended history."""

    def _write(records, append: bool = False) -> Path:
        path = home / ".zsh_history"
        content = "".join(zsh_line(ts, command) + "\n" for ts, command in records)
        with open(path, "a" if append else "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return _write


@pytest.fixture
def zsh_records():
    """A few days of zsh activity leading up to FIXED_NOW."""
    return [
        (datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc), "git status"),
        (datetime(2024, 1, 3, 9, 5, tzinfo=timezone.utc), "git commit -m wip"),
        (datetime(2024, 1, 4, 20, 0, tzinfo=timezone.utc), "ls -la"),
        (datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc), "vim notes.md"),
        (datetime(2024, 1, 5, 11, 0, tzinfo=timezone.utc), "git push"),
    ]
