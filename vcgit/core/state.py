"""ControlState — the on-disk layout shared by every vcgit operation.

::

    <project-root>/
      Project/                    working tree
      .VCGit/
        config.json               {"bucket": ...}
        staging/
        commits/
          allCommits.json
          allPush.json
          <commitID>/commit.json + snapshot files
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from vcgit.config import (
    COMMIT_LEDGER_NAME,
    COMMIT_METADATA_NAME,
    COMMITS_DIR_NAME,
    CONFIG_FILE_NAME,
    CONTROL_DIR_NAME,
    DEFAULT_LOCK_TIMEOUT,
    LOCK_FILE_NAME,
    PUSH_LEDGER_NAME,
    STAGING_DIR_NAME,
    WORKING_TREE_NAME,
)
from vcgit.core.fsutil import reset_directory
from vcgit.core.locking import RepoLock
from vcgit.errors import (
    ConfigError,
    MissingWorkingTreeError,
    NotInitializedError,
)
from vcgit.models.records import RepositoryConfig

logger = logging.getLogger(__name__)


class ControlState:
    """Resolve and validate the paths of one vcgit project.

    Parameters
    ----------
    project_root:
        Directory holding the control directory and the working tree.
    working_tree:
        Override for the working tree location.  Defaults to
        ``<project_root>/Project``.
    """

    def __init__(
        self,
        project_root: str | Path,
        *,
        working_tree: str | Path | None = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.control_root = self.project_root / CONTROL_DIR_NAME
        self.staging = self.control_root / STAGING_DIR_NAME
        self.commits = self.control_root / COMMITS_DIR_NAME
        self.config_path = self.control_root / CONFIG_FILE_NAME
        self.commit_ledger_path = self.commits / COMMIT_LEDGER_NAME
        self.push_ledger_path = self.commits / PUSH_LEDGER_NAME
        self.lock_path = self.control_root / LOCK_FILE_NAME
        if working_tree is None:
            self.working_tree = self.project_root / WORKING_TREE_NAME
        else:
            self.working_tree = Path(working_tree).resolve()

    # -- Initialisation -------------------------------------------------------

    def initialize(self, bucket: str = "") -> Path:
        """Create the control directories and write ``config.json``.

        Directories are created only when missing; the staging area is
        always emptied.  The working tree is created if absent.

        Returns the control root.
        """
        self.control_root.mkdir(parents=True, exist_ok=True)
        self.commits.mkdir(parents=True, exist_ok=True)
        reset_directory(self.staging)
        self.working_tree.mkdir(parents=True, exist_ok=True)

        config = RepositoryConfig(remote_bucket_identifier=bucket)
        self.config_path.write_text(
            json.dumps(config.model_dump(by_alias=True)), encoding="utf-8",
        )

        logger.info("Repository initialized at %s", self.control_root)
        return self.control_root

    # -- Queries --------------------------------------------------------------

    def is_initialized(self) -> bool:
        return self.control_root.is_dir()

    def require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError(str(self.control_root))

    def require_working_tree(self) -> None:
        if not self.working_tree.is_dir():
            raise MissingWorkingTreeError(str(self.working_tree))

    def snapshot_dir(self, commit_id: str) -> Path:
        """Return the snapshot directory path for *commit_id*."""
        return self.commits / commit_id

    def snapshot_metadata_path(self, commit_id: str) -> Path:
        return self.snapshot_dir(commit_id) / COMMIT_METADATA_NAME

    def list_snapshot_ids(self) -> list[str]:
        """Return the names of every snapshot directory, sorted."""
        if not self.commits.is_dir():
            return []
        return sorted(p.name for p in self.commits.iterdir() if p.is_dir())

    def lock(self, operation: str, timeout: float = DEFAULT_LOCK_TIMEOUT) -> RepoLock:
        """Return the repository lock for *operation* (not yet acquired)."""
        return RepoLock(self.lock_path, operation=operation, timeout=timeout)

    def read_config(self) -> RepositoryConfig:
        """Load ``config.json``.

        Raises
        ------
        NotInitializedError
            If the control directory is missing.
        ConfigError
            If the file is missing or malformed.
        """
        self.require_initialized()
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
            return RepositoryConfig.model_validate(data)
        except FileNotFoundError as exc:
            raise ConfigError(f"Missing {self.config_path}") from exc
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            raise ConfigError(f"Unreadable {self.config_path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"ControlState(project_root={self.project_root})"
