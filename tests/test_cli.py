"""Tests for the ``vcgit`` command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest

from vcgit.cli import build_parser, main


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in ("VCGIT_BUCKET", "S3_BUCKET", "VCGIT_STRICT_LEDGER", "VCGIT_LOCK_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


def _vcgit(root: Path, *args: str) -> int:
    return main(["-C", str(root), *args])


def _init(root: Path, bucket: Path) -> None:
    assert _vcgit(root, "init", f"file://{bucket}") == 0
    work = root / "Project"
    (work / "docs").mkdir(parents=True, exist_ok=True)
    (work / "a.txt").write_text("alpha")
    (work / "docs" / "readme.md").write_text("# readme")


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestParser:
    def test_commands(self):
        parser = build_parser()
        args = parser.parse_args(["push", "alice/demo"])
        assert args.command == "push"
        assert args.path == "alice/demo"
        assert args.project_root == "."

    def test_help_lists_environment(self):
        text = build_parser().format_help()
        for key in ("VCGIT_BUCKET", "VCGIT_LOG_LEVEL", "VCGIT_STRICT_LEDGER", "VCGIT_LOCK_TIMEOUT"):
            assert key in text
        assert "Seconds to wait for the repository lock" in text

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_init(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        assert _vcgit(tmp_path, "init", "memory://cli") == 0
        assert (tmp_path / ".VCGit" / "config.json").is_file()
        assert "Repository initialized" in capsys.readouterr().out

    def test_full_workflow(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        project = tmp_path / "proj"
        _init(project, tmp_path / "bucket")

        assert _vcgit(project, "add", "a.txt", "docs") == 0
        assert _vcgit(project, "commit", "first") == 0
        out = capsys.readouterr().out
        assert "staged  a.txt" in out
        commit_id = out.strip().splitlines()[-1]

        assert _vcgit(project, "push", "alice/demo") == 0
        assert (tmp_path / "bucket" / "commits" / "alice" / "demo" / "docs" / "readme.md").is_file()

        (project / "Project" / "a.txt").write_text("changed")
        assert _vcgit(project, "pull", "alice/demo") == 0
        assert (project / "Project" / "a.txt").read_text() == "alpha"

        capsys.readouterr()
        assert _vcgit(project, "log") == 0
        assert commit_id in capsys.readouterr().out

        assert _vcgit(project, "show", commit_id) == 0
        out = capsys.readouterr().out
        assert "pushed  yes" in out
        assert "docs/readme.md" in out

        assert _vcgit(project, "ls-remote", "alice/demo") == 0
        assert "file      a.txt" in capsys.readouterr().out

        (project / "Project" / "a.txt").write_text("changed again")
        assert _vcgit(project, "revert", commit_id) == 0
        assert (project / "Project" / "a.txt").read_text() == "alpha"

        assert _vcgit(project, "rebuild-ledger") == 0
        assert "1 commits" in capsys.readouterr().out

    def test_error_exit_status(self, tmp_path: Path):
        assert _vcgit(tmp_path, "add", "a.txt") == 1

    def test_push_without_commits(self, tmp_path: Path):
        _init(tmp_path, tmp_path / "bucket")
        assert _vcgit(tmp_path, "push", "alice/demo") == 1

    def test_invalid_target(self, tmp_path: Path):
        _init(tmp_path, tmp_path / "bucket")
        assert _vcgit(tmp_path, "pull", "alice") == 1
