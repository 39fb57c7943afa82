"""Commit engine — turn the staging area into an immutable snapshot.

Each commit is a directory ``commits/<commitID>/`` holding a verbatim copy
of the staging area plus ``commit.json``.  The ledger append is the last
step, so a failed copy can leave an orphan snapshot directory but never a
ledger entry without a snapshot.
"""

from __future__ import annotations

import json
import logging

from vcgit.config import DEFAULT_LOCK_TIMEOUT
from vcgit.core.fsutil import copy_tree, list_entries
from vcgit.core.ledger import Ledger
from vcgit.core.state import ControlState
from vcgit.errors import NoStagingAreaError, VCGitError
from vcgit.models.records import CommitRecord

logger = logging.getLogger(__name__)


def commit(
    state: ControlState,
    message: str,
    *,
    strict_ledger: bool = False,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> str:
    """Snapshot the staging area and append it to ``allCommits.json``.

    An empty staging area is allowed and produces a metadata-only commit.

    Returns the new commit ID (UUID4 string).

    Raises
    ------
    NoStagingAreaError
        If the staging directory does not exist.
    CorruptLedgerError
        In strict mode, if ``allCommits.json`` cannot be parsed.
    """
    if not state.staging.is_dir():
        raise NoStagingAreaError(str(state.staging))

    ledger = Ledger(state.commit_ledger_path, strict=strict_ledger)

    with state.lock("commit", lock_timeout):
        record = CommitRecord(message=message)
        commit_dir = state.snapshot_dir(record.commit_id)
        commit_dir.mkdir(parents=True)

        if not list_entries(state.staging):
            logger.info("Staging area is empty, creating commit with metadata only")

        report = copy_tree(state.staging, commit_dir)
        if not report.ok:
            raise VCGitError(
                f"Commit {record.commit_id} aborted: failed to copy "
                f"{len(report.failed)} staged file(s)"
            )

        state.snapshot_metadata_path(record.commit_id).write_text(
            json.dumps(record.to_json_dict(), indent=2), encoding="utf-8",
        )

        ledger.append(record)

    logger.info(
        "Commit %s created with message: %s (%d files)",
        record.commit_id, message, len(report.copied),
    )
    return record.commit_id


def read_commit(state: ControlState, commit_id: str) -> CommitRecord | None:
    """Load ``commit.json`` from a snapshot, or *None* if unavailable."""
    meta_path = state.snapshot_metadata_path(commit_id)
    if not meta_path.is_file():
        return None
    try:
        return CommitRecord.model_validate_json(meta_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.debug("Could not read %s", meta_path, exc_info=True)
        return None
