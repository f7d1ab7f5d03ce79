"""Tests for utils/file_watcher.py event filtering and debounce."""

import pytest
from watchdog.events import DirCreatedEvent, FileModifiedEvent, FileMovedEvent

from termlytic.utils.file_watcher import HistoryFileHandler, HistoryFileWatcher


@pytest.fixture
def calls():
    return []


@pytest.fixture
def handler(home, calls):
    return HistoryFileHandler([home / ".zsh_history"], lambda: calls.append(1), debounce_seconds=60)


class TestHistoryFileHandler:
    """Test which events reach the callback."""

    def test_watched_file_triggers(self, handler, home, calls):
        handler.on_modified(FileModifiedEvent(str(home / ".zsh_history")))
        assert calls == [1]

    def test_other_files_are_ignored(self, handler, home, calls):
        handler.on_modified(FileModifiedEvent(str(home / ".viminfo")))
        assert calls == []

    def test_directories_are_ignored(self, handler, home, calls):
        handler.on_created(DirCreatedEvent(str(home / ".zsh_history")))
        assert calls == []

    def test_rename_over_history_triggers(self, handler, home, calls):
        handler.on_moved(FileMovedEvent(str(home / ".zsh_history.tmp"), str(home / ".zsh_history")))
        assert calls == [1]

    def test_debounce(self, handler, home, calls):
        event = FileModifiedEvent(str(home / ".zsh_history"))
        handler.on_modified(event)
        handler.on_modified(event)
        assert calls == [1]


class TestHistoryFileWatcher:
    def test_watched_directories_skip_missing(self, home, tmp_path):
        watcher = HistoryFileWatcher(
            [home / ".zsh_history", home / ".bash_history", tmp_path / "missing" / "fish_history"],
            callback=lambda: None,
        )
        assert watcher.watched_directories() == [home]

    def test_start_without_directories(self, tmp_path):
        watcher = HistoryFileWatcher([tmp_path / "missing" / "history"], callback=lambda: None)
        with pytest.raises(FileNotFoundError):
            watcher.start()
