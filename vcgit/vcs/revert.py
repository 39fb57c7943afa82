"""Revert — restore the working tree from a local snapshot."""

from __future__ import annotations

import logging

from vcgit.config import DEFAULT_LOCK_TIMEOUT
from vcgit.core.fsutil import CopyReport, clear_directory, copy_tree
from vcgit.core.state import ControlState
from vcgit.errors import UnknownCommitError

logger = logging.getLogger(__name__)


def revert(
    state: ControlState,
    commit_id: str,
    *,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> CopyReport:
    """Replace the working tree with the contents of snapshot *commit_id*.

    Everything in the working tree is deleted first, including uncommitted
    work.  The whole snapshot directory is copied, so the snapshot's
    ``commit.json`` lands at the working tree root.  Neither ledger and
    nothing remote is touched.

    Raises
    ------
    UnknownCommitError
        If no snapshot directory named *commit_id* exists.
    """
    commit_dir = state.snapshot_dir(commit_id)
    # Reject ids like "../staging" that resolve outside the commits root
    if commit_dir.resolve().parent != state.commits or not commit_dir.is_dir():
        raise UnknownCommitError(commit_id)

    with state.lock("revert", lock_timeout):
        removed = clear_directory(state.working_tree)
        logger.debug("Removed %d entries from %s", removed, state.working_tree)
        report = copy_tree(commit_dir, state.working_tree)

    logger.info("Commit %s reverted successfully to %s", commit_id, state.working_tree)
    return report
