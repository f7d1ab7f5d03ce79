"""Tests for services/history_analyzer.py - cache, incremental and full paths."""

import os
import threading
from datetime import datetime, timezone

import pytest

from termlytic.errors import CacheWriteError


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


NEW_RECORDS = [
    (utc(2024, 1, 5, 11, 30), "docker ps"),
    (utc(2024, 1, 5, 11, 45), "git status"),
]


class TestAnalysisPaths:
    """Test the cache / incremental / full decision."""

    def test_first_run_is_full(self, make_analyzer, write_zsh, zsh_records, data_dir):
        write_zsh(zsh_records)

        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "full"
        assert not response.from_cache
        assert response.error is None
        assert response.analysis.total_commands == 5
        assert response.metadata.files["zsh"]["exists"] is True
        assert (data_dir / "history_data.json").exists()
        assert (data_dir / "metadata.json").exists()

    def test_unchanged_files_hit_cache(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        first = make_analyzer().analyze()

        second = make_analyzer().analyze()

        assert second.metadata.analysis_type == "cache"
        assert second.from_cache
        assert second.analysis == first.analysis
        assert second.entries == first.entries

    def test_appended_lines_are_read_incrementally(self, make_analyzer, write_zsh, zsh_records, tmp_path):
        write_zsh(zsh_records)
        make_analyzer().analyze()
        write_zsh(NEW_RECORDS, append=True)

        incremental = make_analyzer().analyze()
        full = make_analyzer(data_path=tmp_path / "fresh").analyze()

        assert incremental.metadata.analysis_type == "incremental"
        assert full.metadata.analysis_type == "full"
        assert incremental.analysis.to_dict() == full.analysis.to_dict()
        assert incremental.entries == full.entries
        assert incremental.analysis.total_commands == 7

    def test_incremental_reads_only_new_bytes(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        analyzer.analyze()
        write_zsh(NEW_RECORDS, append=True)

        analyzer.analyze()

        assert analyzer.reader.last_stats["zsh"].entries == 2

    def test_shrunk_file_is_reread(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        make_analyzer().analyze()
        write_zsh(zsh_records[:2])

        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "incremental"
        assert response.analysis.total_commands == 2
        assert [e.command for e in response.entries] == ["git commit -m wip", "git status"]

    def test_touched_file_does_not_duplicate(self, make_analyzer, write_zsh, zsh_records):
        path = write_zsh(zsh_records)
        make_analyzer().analyze()
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))

        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "incremental"
        assert response.metadata.total_entries == 5

    def test_new_shell_file_is_picked_up(self, make_analyzer, write_zsh, zsh_records, home):
        write_zsh(zsh_records)
        make_analyzer().analyze()
        (home / ".bash_history").write_text("make\nmake test\n")

        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "incremental"
        assert response.analysis.shell_counts == {"zsh": 5, "bash": 2}

    def test_disappeared_file_keeps_cached_entries(self, make_analyzer, write_zsh, zsh_records):
        path = write_zsh(zsh_records)
        make_analyzer().analyze()
        path.unlink()

        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "cache"
        assert response.analysis.total_commands == 5

    def test_no_history_at_all(self, make_analyzer):
        response = make_analyzer().analyze()

        assert response.metadata.analysis_type == "full"
        assert response.metadata.total_entries == 0
        assert response.analysis.hourly_histogram == [0] * 24

    def test_force_refresh_rescans(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        analyzer.analyze()

        response = analyzer.force_refresh()

        assert response.metadata.analysis_type == "full"
        assert response.analysis.total_commands == 5

    def test_result_cap(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)

        response = make_analyzer(result_cap=2).analyze()

        assert len(response.entries) == 2
        assert response.metadata.total_entries == 5
        assert response.analysis.total_commands == 5
        assert [e.command for e in response.entries] == ["git push", "vim notes.md"]


class TestFailureHandling:
    """analyze() never raises."""

    def test_failure_serves_last_good_cache(self, make_analyzer, write_zsh, zsh_records, monkeypatch):
        write_zsh(zsh_records)
        good = make_analyzer().analyze()
        write_zsh(NEW_RECORDS, append=True)
        analyzer = make_analyzer()

        def broken(entries):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(analyzer.stats, "analyze", broken)
        response = analyzer.analyze()

        assert response.from_cache
        assert "disk on fire" in response.error
        assert response.analysis == good.analysis

    def test_failure_without_cache_is_empty(self, make_analyzer, write_zsh, zsh_records, monkeypatch):
        write_zsh(zsh_records)
        analyzer = make_analyzer()

        def broken(entries):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(analyzer.stats, "analyze", broken)
        response = analyzer.analyze()

        assert response.error
        assert response.entries == []
        assert response.analysis.total_commands == 0
        assert response.metadata.analysis_type == "empty"

    def test_cache_write_failure_still_returns_result(self, make_analyzer, write_zsh, zsh_records, monkeypatch):
        write_zsh(zsh_records)
        analyzer = make_analyzer()

        def failing_save(entries, analysis, fingerprints):
            raise CacheWriteError("Failed to save cache", {"reason": "read-only"})

        monkeypatch.setattr(analyzer.store, "save", failing_save)
        response = analyzer.analyze()

        assert response.error is None
        assert "read-only" in response.cache_write_error
        assert response.analysis.total_commands == 5

    def test_force_refresh_survives_undeletable_cache_file(self, make_analyzer, write_zsh, zsh_records, data_dir):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        analyzer.analyze()
        meta_file = data_dir / "metadata.json"
        meta_file.unlink()
        meta_file.mkdir()

        response = analyzer.force_refresh()

        assert response.error is None
        assert response.metadata.analysis_type == "full"
        assert response.analysis.total_commands == 5
        assert response.cache_write_error

    def test_force_refresh_falls_back_when_clear_raises(self, make_analyzer, write_zsh, zsh_records, monkeypatch):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        good = analyzer.analyze()

        def broken_clear():
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr(analyzer.store, "clear", broken_clear)
        response = analyzer.force_refresh()

        assert response.from_cache
        assert "read-only filesystem" in response.error
        assert response.analysis == good.analysis

    def test_concurrent_calls_are_serialized(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        results = []

        threads = [threading.Thread(target=lambda: results.append(analyzer.analyze())) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert [r.metadata.analysis_type for r in results].count("full") == 1
        assert all(r.analysis.total_commands == 5 for r in results)


class TestQueries:
    """Operations served from the in-memory entry set."""

    def test_queries_analyze_lazily(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()

        assert analyzer.available_years() == [2024]
        assert analyzer.stats_for_range("week").total_count == 5
        assert dict(analyzer.heatmap_for_year(2024))["2024-01-03"] == 2
        assert [c.command for c in analyzer.commands_for_date("2024-01-05")] == ["git push", "vim notes.md"]

    def test_ticket_defaults_to_current_year(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)

        ticket = make_analyzer().generate_ticket()

        assert ticket.year == 2024
        assert ticket.number == "240005"
        assert ticket.top_command == "git"
        assert ticket.shell_count == 1

    def test_history_page(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()

        page = analyzer.history_page(page=3, limit=2)

        assert page["total"] == 5
        assert page["total_pages"] == 3
        assert len(page["entries"]) == 1
        assert page["has_more"] is False
        assert page["entries"][0]["command"] == "git status"

    def test_history_page_rejects_bad_arguments(self, make_analyzer):
        with pytest.raises(ValueError):
            make_analyzer().history_page(page=0)

    def test_clear_cache(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()
        analyzer.analyze()

        result = analyzer.clear_cache()

        assert result.success and result.data_deleted
        assert not analyzer.get_cache_info().has_cache
        assert analyzer.analyze().metadata.analysis_type == "full"

    def test_file_status_and_diagnosis(self, make_analyzer, write_zsh, zsh_records):
        write_zsh(zsh_records)
        analyzer = make_analyzer()

        status = analyzer.get_file_status()
        diagnosis = analyzer.diagnose()

        assert status["configured"]["zsh"]["exists"] is True
        assert status["summary"]["existingFiles"] == 1
        assert diagnosis["environment"]["detectedShell"] == "zsh"
        assert any("1 history file" in r for r in diagnosis["recommendations"])
