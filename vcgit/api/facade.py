"""VCGit — the single entry point for vcgit operations.

Usage::

    from vcgit import VCGit

    vc = VCGit("/path/to/project")
    vc.init("s3://my-bucket")
    vc.add(["src/a.txt", "docs"])
    commit_id = vc.commit("first")
    vc.push("alice/demo")
    vc.pull("alice/demo")
    vc.revert(commit_id)
    vc.log()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from vcgit.config import Settings, load_settings
from vcgit.core.fsutil import CopyReport
from vcgit.core.ledger import rebuild_commit_ledger
from vcgit.core.state import ControlState
from vcgit.models.records import CommitRecord, RepositoryContentEntry
from vcgit.remote.base import ObjectStore
from vcgit.remote.browse import list_repository_files
from vcgit.remote.factory import open_object_store
from vcgit.remote.namespace import parse_target
from vcgit.sync.pull import PullResult, pull
from vcgit.sync.push import PushResult, push
from vcgit.vcs.commits import commit
from vcgit.vcs.history import CommitDetails, get_log, get_pushed, show_commit
from vcgit.vcs.revert import revert
from vcgit.vcs.staging import AddResult, add

logger = logging.getLogger(__name__)


class VCGit:
    """The public interface for one vcgit project.

    Parameters
    ----------
    project_root:
        Directory holding ``.VCGit/`` and the ``Project/`` working tree.
    store:
        Remote object store.  If omitted, it is opened lazily from the
        configured bucket identifier on the first push or pull.
    working_tree:
        Override for the working tree location.
    settings:
        Explicit settings; loaded from ``config.json`` and the environment
        when omitted.
    """

    def __init__(
        self,
        project_root: str | Path = ".",
        *,
        store: ObjectStore | None = None,
        working_tree: str | Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.state = ControlState(project_root, working_tree=working_tree)
        self.settings = settings if settings is not None else load_settings(self.state.project_root)
        self._store = store

    @property
    def project_root(self) -> Path:
        return self.state.project_root

    @property
    def store(self) -> ObjectStore:
        """The remote object store, opened on first use."""
        if self._store is None:
            bucket = self.settings.bucket
            if not bucket and self.state.config_path.is_file():
                bucket = self.state.read_config().remote_bucket_identifier
            self._store = open_object_store(bucket)
        return self._store

    # -- Local operations -----------------------------------------------------

    def init(self, bucket: str | None = None) -> Path:
        """Create the control directories.  Returns the control root."""
        if bucket is None:
            bucket = self.settings.bucket
        root = self.state.initialize(bucket)
        self.settings = self.settings.model_copy(update={"bucket": bucket})
        return root

    def add(self, paths: Iterable[str | Path]) -> AddResult:
        return add(self.state, paths, lock_timeout=self.settings.lock_timeout)

    def commit(self, message: str) -> str:
        return commit(
            self.state,
            message,
            strict_ledger=self.settings.strict_ledger,
            lock_timeout=self.settings.lock_timeout,
        )

    def revert(self, commit_id: str) -> CopyReport:
        return revert(self.state, commit_id, lock_timeout=self.settings.lock_timeout)

    def log(self, limit: int | None = None) -> list[CommitRecord]:
        """Commit history, newest first."""
        return get_log(self.state, limit, strict_ledger=self.settings.strict_ledger)

    def pushed(self) -> list[CommitRecord]:
        """Push history, oldest first."""
        return get_pushed(self.state, strict_ledger=self.settings.strict_ledger)

    def show(self, commit_id: str) -> CommitDetails:
        return show_commit(self.state, commit_id)

    def rebuild_ledger(self) -> list[CommitRecord]:
        """Rebuild ``allCommits.json`` from the snapshot directories."""
        self.state.require_initialized()
        with self.state.lock("rebuild-ledger", self.settings.lock_timeout):
            return rebuild_commit_ledger(self.state)

    # -- Remote operations ----------------------------------------------------

    def push(self, target: str | tuple[str, str]) -> PushResult:
        # Reject a bad target before opening the store
        parse_target(target)
        return push(
            self.state,
            self.store,
            target,
            strict_ledger=self.settings.strict_ledger,
            lock_timeout=self.settings.lock_timeout,
        )

    def pull(self, target: str | tuple[str, str]) -> PullResult:
        parse_target(target)
        return pull(
            self.state,
            self.store,
            target,
            strict_ledger=self.settings.strict_ledger,
            lock_timeout=self.settings.lock_timeout,
        )

    def list_remote_files(self, target: str | tuple[str, str]) -> list[RepositoryContentEntry]:
        parsed = parse_target(target)
        return list_repository_files(self.store, parsed.owner, parsed.repo)

    def __repr__(self) -> str:
        return f"VCGit(project_root={self.state.project_root})"
