"""History queries over the commit and push ledgers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vcgit.config import COMMIT_METADATA_NAME
from vcgit.core.fsutil import relative_files
from vcgit.core.ledger import Ledger
from vcgit.core.state import ControlState
from vcgit.errors import UnknownCommitError
from vcgit.models.records import CommitRecord
from vcgit.vcs.commits import read_commit

logger = logging.getLogger(__name__)


@dataclass
class CommitDetails:
    """A snapshot's metadata plus the files it contains."""

    record: CommitRecord
    files: list[str] = field(default_factory=list)
    pushed: bool = False


def get_log(
    state: ControlState,
    limit: int | None = None,
    *,
    strict_ledger: bool = False,
) -> list[CommitRecord]:
    """Return commit ledger records, newest first."""
    records = Ledger(state.commit_ledger_path, strict=strict_ledger).read()
    records.reverse()
    if limit is not None:
        records = records[:limit]
    return records


def get_pushed(state: ControlState, *, strict_ledger: bool = False) -> list[CommitRecord]:
    """Return push ledger records in push order."""
    return Ledger(state.push_ledger_path, strict=strict_ledger).read()


def show_commit(state: ControlState, commit_id: str) -> CommitDetails:
    """Describe snapshot *commit_id*.

    The record comes from the snapshot's ``commit.json``, falling back to
    the ledger entry if the metadata file is unreadable.

    Raises
    ------
    UnknownCommitError
        If the snapshot directory does not exist, or it has no readable
        metadata and no ledger entry.
    """
    commit_dir = state.snapshot_dir(commit_id)
    if not commit_dir.is_dir():
        raise UnknownCommitError(commit_id)

    record = read_commit(state, commit_id)
    if record is None:
        record = Ledger(state.commit_ledger_path).find(commit_id)
    if record is None:
        raise UnknownCommitError(commit_id)

    files = [f for f in relative_files(commit_dir) if f != COMMIT_METADATA_NAME]
    pushed = any(r.commit_id == commit_id for r in get_pushed(state))
    return CommitDetails(record=record, files=files, pushed=pushed)
