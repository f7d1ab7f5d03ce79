"""Tests for storage/cache_store.py - persistence and change detection."""

import json

import pytest

from termlytic.errors import CacheWriteError
from termlytic.models.file_fingerprint import FileFingerprint
from termlytic.storage import cache_store
from termlytic.storage.cache_store import CacheStore, compute_current_fingerprints, needs_update


@pytest.fixture
def store(data_dir):
    return CacheStore(data_dir)


@pytest.fixture
def sample(make_entry, stats_analyzer):
    entries = [
        make_entry("git status", ts=1704445200),
        make_entry("ls -la", ts=1704358800, shell="fish"),
        make_entry("make test", shell="bash"),
    ]
    analysis = stats_analyzer.analyze(entries)
    fingerprints = {
        "zsh": FileFingerprint(exists=True, size_bytes=120, modified_at_millis=1704445200123),
        "bash": FileFingerprint(),
    }
    return entries, analysis, fingerprints


class TestSaveAndLoad:
    """Test CacheStore.save and the load methods."""

    def test_round_trip(self, store, sample):
        entries, analysis, fingerprints = sample
        last_update = store.save(entries, analysis, fingerprints)

        record = store.load_cached_entries()

        assert record.exists
        assert record.entries == entries
        assert record.analysis == analysis
        assert record.fingerprints == fingerprints
        assert record.last_update == last_update
        assert store.load_fingerprints() == fingerprints

    def test_file_layout(self, store, sample):
        entries, analysis, fingerprints = sample
        store.save(entries, analysis, fingerprints)

        data = json.loads(store.data_file.read_text())
        metadata = json.loads(store.meta_file.read_text())

        assert set(data) == {"entries", "analysis", "metadata", "savedAt"}
        assert data["metadata"]["totalEntries"] == 3
        assert metadata["version"] == "1.0"
        assert metadata["files"]["zsh"] == {"exists": True, "size": 120, "mtime": 1704445200123}

    def test_missing_record_is_empty(self, store):
        record = store.load_cached_entries()
        assert not record.exists
        assert record.entries == []
        assert store.load_fingerprints() == {}

    def test_corrupt_data_is_treated_as_absent(self, store, data_dir):
        data_dir.mkdir()
        store.data_file.write_text("{not json")
        assert not store.load_cached_entries().exists

    def test_wrong_shape_is_treated_as_absent(self, store, data_dir):
        data_dir.mkdir()
        store.data_file.write_text(json.dumps({"entries": 5}))
        assert not store.load_cached_entries().exists

    def test_corrupt_metadata_yields_no_fingerprints(self, store, data_dir):
        data_dir.mkdir()
        store.meta_file.write_text("[]")
        assert store.load_fingerprints() == {}


class TestWriteFailures:
    """Test that failed writes surface and keep the previous record."""

    def test_unwritable_directory_raises(self, tmp_path, sample):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = CacheStore(blocker / "data")

        with pytest.raises(CacheWriteError):
            store.save(*sample)

    def test_previous_record_survives(self, store, sample, monkeypatch, make_entry, stats_analyzer):
        store.save(*sample)
        _, _, fingerprints = sample

        def boom(*args, **kwargs):
            raise TypeError("not serializable")

        newer = [make_entry("rm -rf build")]
        with monkeypatch.context() as m:
            m.setattr(cache_store.json, "dump", boom)
            with pytest.raises(CacheWriteError):
                store.save(newer, stats_analyzer.analyze(newer), fingerprints)

        record = store.load_cached_entries()
        assert len(record.entries) == 3
        assert list(store.data_dir.glob("*.tmp")) == []


class TestClear:
    """Test clear and clear_all_data."""

    def test_clear_is_idempotent(self, store, sample):
        store.save(*sample)
        store.clear()
        store.clear()

        assert not store.data_file.exists()
        assert not store.meta_file.exists()

    def test_clear_does_not_raise_on_undeletable_file(self, store, sample):
        store.save(*sample)
        store.meta_file.unlink()
        store.meta_file.mkdir()

        store.clear()

        assert not store.data_file.exists()
        assert store.meta_file.is_dir()

    def test_clear_all_data_reports(self, store, sample):
        store.save(*sample)

        first = store.clear_all_data()
        second = store.clear_all_data()

        assert first.success and first.data_deleted and first.metadata_deleted
        assert second.success
        assert not second.data_deleted and not second.metadata_deleted


class TestCacheInfo:
    """Test get_cache_info."""

    def test_without_cache(self, store):
        info = store.get_cache_info()
        assert not info.has_cache
        assert info.entries == 0
        assert info.size == 0

    def test_with_cache(self, store, sample):
        last_update = store.save(*sample)
        info = store.get_cache_info()

        assert info.has_cache
        assert info.entries == 3
        assert info.size > 0
        assert info.last_update == last_update
        assert info.files["zsh"]["size"] == 120


class TestChangeDetection:
    """Test compute_current_fingerprints and needs_update."""

    def test_fingerprints_of_real_and_missing_files(self, tmp_path):
        path = tmp_path / "history"
        path.write_text("ls\n")

        current = compute_current_fingerprints({"bash": path, "zsh": tmp_path / "missing", "fish": None})

        assert current["bash"].exists
        assert current["bash"].size_bytes == 3
        assert current["zsh"] == FileFingerprint()
        assert current["fish"] == FileFingerprint()

    def test_unchanged(self):
        fp = FileFingerprint(True, 10, 1000)
        assert not needs_update({"zsh": fp}, {"zsh": fp})

    def test_grown_file(self):
        assert needs_update({"zsh": FileFingerprint(True, 20, 2000)}, {"zsh": FileFingerprint(True, 10, 1000)})

    def test_touched_file(self):
        assert needs_update({"zsh": FileFingerprint(True, 10, 2000)}, {"zsh": FileFingerprint(True, 10, 1000)})

    def test_new_file(self):
        assert needs_update({"bash": FileFingerprint(True, 5, 1000)}, {})

    def test_disappeared_file_is_not_a_trigger(self):
        assert not needs_update({"zsh": FileFingerprint()}, {"zsh": FileFingerprint(True, 10, 1000)})
