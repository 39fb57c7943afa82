"""Tests for the local control state: layout, tree primitives, ledgers, locks.

All tests use tmp_path fixtures; nothing touches the network.
"""

from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

from vcgit.config import load_settings
from vcgit.core.fsutil import (
    DirectoryEntry,
    FileEntry,
    clear_directory,
    copy_tree,
    iter_files,
    list_entries,
    relative_files,
    reset_directory,
)
from vcgit.core.ledger import Ledger, rebuild_commit_ledger
from vcgit.core.locking import RepoLock
from vcgit.core.state import ControlState
from vcgit.errors import (
    ConfigError,
    CorruptLedgerError,
    LockTimeoutError,
    MissingWorkingTreeError,
    NotInitializedError,
)
from vcgit.models.records import CommitRecord


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _make_tree(root: Path) -> Path:
    """Create a small nested tree under *root*."""
    _write(root / "a.txt", "alpha")
    _write(root / "docs" / "readme.md", "# readme")
    _write(root / "docs" / "guide" / "intro.md", "intro")
    return root


# ---------------------------------------------------------------------------
# Tree primitives
# ---------------------------------------------------------------------------


class TestListEntries:
    def test_tags_files_and_directories(self, tmp_path: Path):
        _make_tree(tmp_path)
        entries = list_entries(tmp_path)

        assert [e.name for e in entries] == ["a.txt", "docs"]
        assert isinstance(entries[0], FileEntry)
        assert isinstance(entries[1], DirectoryEntry)

    def test_skips_broken_symlink(self, tmp_path: Path):
        _write(tmp_path / "real.txt")
        (tmp_path / "dangling").symlink_to(tmp_path / "missing")

        names = [e.name for e in list_entries(tmp_path)]
        assert names == ["real.txt"]

    def test_iter_files_is_recursive(self, tmp_path: Path):
        _make_tree(tmp_path)
        names = [e.name for e in iter_files(tmp_path)]
        assert sorted(names) == ["a.txt", "intro.md", "readme.md"]

    def test_relative_files_posix(self, tmp_path: Path):
        _make_tree(tmp_path)
        assert relative_files(tmp_path) == [
            "a.txt",
            "docs/guide/intro.md",
            "docs/readme.md",
        ]


class TestCopyTree:
    def test_preserves_structure(self, tmp_path: Path):
        src = _make_tree(tmp_path / "src")
        dest = tmp_path / "dest"

        report = copy_tree(src, dest)

        assert report.ok
        assert sorted(report.copied) == relative_files(src)
        assert relative_files(dest) == relative_files(src)
        assert (dest / "docs" / "guide" / "intro.md").read_text() == "intro"

    def test_relative_to_keeps_outer_path(self, tmp_path: Path):
        root = _make_tree(tmp_path / "root")
        dest = tmp_path / "dest"

        copy_tree(root / "docs", dest, relative_to=root)

        assert relative_files(dest) == ["docs/guide/intro.md", "docs/readme.md"]

    def test_skip(self, tmp_path: Path):
        src = _make_tree(tmp_path / "src")
        dest = tmp_path / "dest"

        copy_tree(src, dest, skip={"a.txt"})

        assert "a.txt" not in relative_files(dest)
        assert "docs/readme.md" in relative_files(dest)

    def test_empty_source(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        report = copy_tree(src, tmp_path / "dest")
        assert report.copied == []
        assert report.ok


class TestClearDirectory:
    def test_removes_everything_keeps_dir(self, tmp_path: Path):
        target = _make_tree(tmp_path / "wt")

        removed = clear_directory(target)

        assert removed == 2
        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_creates_missing_directory(self, tmp_path: Path):
        target = tmp_path / "missing"
        assert clear_directory(target) == 0
        assert target.is_dir()

    def test_reset_directory(self, tmp_path: Path):
        target = _make_tree(tmp_path / "staging")
        reset_directory(target)
        assert target.is_dir()
        assert list(target.iterdir()) == []


# ---------------------------------------------------------------------------
# ControlState
# ---------------------------------------------------------------------------


class TestControlState:
    def test_initialize_creates_layout(self, tmp_path: Path):
        state = ControlState(tmp_path)
        root = state.initialize("s3://bucket")

        assert root == tmp_path.resolve() / ".VCGit"
        assert state.commits.is_dir()
        assert state.staging.is_dir()
        assert state.working_tree.is_dir()
        assert json.loads(state.config_path.read_text()) == {"bucket": "s3://bucket"}

    def test_initialize_clears_staging_keeps_commits(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize()
        _write(state.staging / "old.txt")
        _write(state.commits / "abc" / "commit.json", "{}")

        state.initialize()

        assert list(state.staging.iterdir()) == []
        assert (state.commits / "abc" / "commit.json").is_file()

    def test_require_initialized(self, tmp_path: Path):
        state = ControlState(tmp_path)
        with pytest.raises(NotInitializedError):
            state.require_initialized()

    def test_require_working_tree(self, tmp_path: Path):
        state = ControlState(tmp_path)
        with pytest.raises(MissingWorkingTreeError):
            state.require_working_tree()

    def test_custom_working_tree(self, tmp_path: Path):
        state = ControlState(tmp_path / "proj", working_tree=tmp_path / "elsewhere")
        state.initialize()
        assert (tmp_path / "elsewhere").is_dir()

    def test_read_config(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize("memory://x")
        assert state.read_config().remote_bucket_identifier == "memory://x"

    def test_read_config_accepts_long_key(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize()
        state.config_path.write_text(json.dumps({"remoteBucketIdentifier": "b1"}))
        assert state.read_config().remote_bucket_identifier == "b1"

    def test_read_config_malformed(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize()
        state.config_path.write_text("not json")
        with pytest.raises(ConfigError):
            state.read_config()

    def test_list_snapshot_ids(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize()
        (state.commits / "b").mkdir()
        (state.commits / "a").mkdir()
        _write(state.commit_ledger_path, "[]")
        assert state.list_snapshot_ids() == ["a", "b"]


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class TestLedger:
    def test_missing_file_is_empty(self, tmp_path: Path):
        ledger = Ledger(tmp_path / "allCommits.json")
        assert ledger.read() == []
        assert ledger.latest() is None

    def test_append_preserves_order(self, tmp_path: Path):
        ledger = Ledger(tmp_path / "allCommits.json")
        first = CommitRecord(message="first")
        second = CommitRecord(message="second")
        ledger.append(first)
        ledger.append(second)

        records = ledger.read()
        assert [r.message for r in records] == ["first", "second"]
        assert ledger.latest().commit_id == second.commit_id
        assert len(ledger) == 2

    def test_on_disk_format(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        record = CommitRecord(message="hello")
        Ledger(path).append(record)

        data = json.loads(path.read_text())
        assert isinstance(data, list)
        assert data[0]["commitID"] == record.commit_id
        assert data[0]["message"] == "hello"
        assert "date" in data[0]

    def test_latest_is_last_not_newest(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text(json.dumps([
            {"message": "late", "commitID": "1", "date": "2030-01-01T00:00:00+00:00"},
            {"message": "early", "commitID": "2", "date": "2020-01-01T00:00:00+00:00"},
        ]))
        assert Ledger(path).latest().commit_id == "2"

    def test_find(self, tmp_path: Path):
        ledger = Ledger(tmp_path / "l.json")
        record = CommitRecord(message="m")
        ledger.append(record)
        found = ledger.find(record.commit_id)
        assert found is not None
        assert found.message == "m"
        assert found.timestamp == record.timestamp
        assert ledger.find("nope") is None

    def test_corrupt_treated_as_empty(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text("{not valid json")
        assert Ledger(path).read() == []

    def test_non_array_treated_as_empty(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text(json.dumps({"commitID": "x"}))
        assert Ledger(path).read() == []

    def test_corrupt_file_moved_aside_on_append(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text("garbage")

        Ledger(path).append(CommitRecord(message="fresh"))

        backups = list(tmp_path.glob("allCommits.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "garbage"
        assert [r.message for r in Ledger(path).read()] == ["fresh"]

    def test_strict_raises(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text("garbage")
        with pytest.raises(CorruptLedgerError):
            Ledger(path, strict=True).read()

    def test_timestamp_alias_accepted(self, tmp_path: Path):
        path = tmp_path / "allCommits.json"
        path.write_text(json.dumps([
            {"message": "m", "commitID": "c1", "timestamp": "2024-05-01T10:00:00+00:00"},
        ]))
        record = Ledger(path).latest()
        assert record.commit_id == "c1"
        assert record.timestamp.year == 2024


class TestRebuildLedger:
    def test_rebuild_from_snapshots(self, tmp_path: Path):
        state = ControlState(tmp_path)
        state.initialize()
        older = CommitRecord(message="older", commitID="c-old", date="2024-01-01T00:00:00+00:00")
        newer = CommitRecord(message="newer", commitID="c-new", date="2024-06-01T00:00:00+00:00")
        for record in (newer, older):
            _write(
                state.snapshot_metadata_path(record.commit_id),
                json.dumps(record.to_json_dict()),
            )
        (state.commits / "broken").mkdir()
        state.commit_ledger_path.write_text("garbage")

        records = rebuild_commit_ledger(state)

        assert [r.commit_id for r in records] == ["c-old", "c-new"]
        assert [r.commit_id for r in Ledger(state.commit_ledger_path).read()] == ["c-old", "c-new"]
        assert list(state.commits.glob("allCommits.json.corrupt-*"))


# ---------------------------------------------------------------------------
# RepoLock
# ---------------------------------------------------------------------------


class TestRepoLock:
    def test_acquire_and_release(self, tmp_path: Path):
        lock_path = tmp_path / ".lock"
        lock = RepoLock(lock_path, operation="commit")

        with lock:
            assert lock.held
            assert lock_path.is_file()
            info = lock.read()
            assert info is not None
            assert info.operation == "commit"

        assert not lock.held
        assert not lock_path.exists()

    def test_second_holder_times_out(self, tmp_path: Path):
        lock_path = tmp_path / ".lock"
        with RepoLock(lock_path, operation="push"):
            with pytest.raises(LockTimeoutError) as exc_info:
                RepoLock(lock_path, timeout=0.1).acquire()
        assert "push" in str(exc_info.value)

    def test_stale_lock_is_broken(self, tmp_path: Path):
        lock_path = tmp_path / ".lock"
        lock_path.write_text(json.dumps({
            "owner": "ghost", "pid": 1, "operation": "push", "timestamp": time.time() - 10_000,
        }))

        lock = RepoLock(lock_path, timeout=0.1, stale_after=60)
        lock.acquire()
        try:
            assert lock.read().owner != "ghost"
        finally:
            lock.release()

    def test_released_on_exception(self, tmp_path: Path):
        lock_path = tmp_path / ".lock"
        with pytest.raises(RuntimeError):
            with RepoLock(lock_path):
                raise RuntimeError("boom")
        assert not lock_path.exists()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        for key in ("VCGIT_BUCKET", "S3_BUCKET", "VCGIT_LOG_LEVEL", "VCGIT_STRICT_LEDGER", "VCGIT_LOCK_TIMEOUT"):
            monkeypatch.delenv(key, raising=False)
        settings = load_settings(tmp_path)
        assert settings.bucket == ""
        assert settings.log_level == "INFO"
        assert settings.strict_ledger is False

    def test_config_json_then_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("VCGIT_BUCKET", raising=False)
        monkeypatch.delenv("S3_BUCKET", raising=False)
        ControlState(tmp_path).initialize("from-config")
        assert load_settings(tmp_path).bucket == "from-config"

        monkeypatch.setenv("VCGIT_BUCKET", "from-env")
        assert load_settings(tmp_path).bucket == "from-env"

    def test_s3_bucket_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("VCGIT_BUCKET", raising=False)
        monkeypatch.setenv("S3_BUCKET", "legacy")
        assert load_settings(tmp_path).bucket == "legacy"

    def test_flags(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("VCGIT_STRICT_LEDGER", "yes")
        monkeypatch.setenv("VCGIT_LOG_LEVEL", "debug")
        monkeypatch.setenv("VCGIT_LOCK_TIMEOUT", "not-a-number")
        settings = load_settings(tmp_path)
        assert settings.strict_ledger is True
        assert settings.log_level == "DEBUG"
        assert settings.lock_timeout == 30.0
