"""Push — mirror the latest local commit into the remote namespace.

The namespace ``commits/{owner}/{repo}/`` is replaced, not merged: every
existing object is deleted before the snapshot directory, including its
``commit.json``, is uploaded.

A failure between the delete and the end of the upload leaves the
namespace partially populated; the next successful push repairs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vcgit.config import DEFAULT_LOCK_TIMEOUT, MAX_DELETE_BATCH
from vcgit.core.fsutil import iter_files
from vcgit.core.ledger import Ledger
from vcgit.core.state import ControlState
from vcgit.errors import CorruptLedgerError, MissingSnapshotError, NoCommitsError
from vcgit.models.records import CommitRecord
from vcgit.remote.base import ObjectStore
from vcgit.remote.namespace import Target, parse_target

logger = logging.getLogger(__name__)


@dataclass
class PushResult:
    """Outcome of :func:`push`."""

    record: CommitRecord
    target: Target
    uploaded: list[str] = field(default_factory=list)
    """Object keys written, in upload order."""

    deleted: int = 0
    ledger_updated: bool = True


def clear_namespace(store: ObjectStore, prefix: str) -> int:
    """Delete every object under *prefix*.  Returns the number deleted.

    Lists the first page, deletes it, and repeats until a listing comes
    back empty or untruncated.  Each round re-lists from the start since
    deleted keys may invalidate continuation tokens.
    """
    deleted = 0
    while True:
        page = store.list_objects(prefix, max_keys=MAX_DELETE_BATCH)
        keys = [obj.key for obj in page.contents]
        if not keys:
            break
        store.delete_objects(keys)
        deleted += len(keys)
        logger.debug("Deleted %d objects from %s", len(keys), prefix)
        if not page.is_truncated:
            break

    if deleted:
        logger.info("Cleared %d objects under %s", deleted, prefix)
    else:
        logger.info("No files found to delete under %s", prefix)
    return deleted


def push(
    state: ControlState,
    store: ObjectStore,
    target: str | tuple[str, str],
    *,
    strict_ledger: bool = False,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> PushResult:
    """Replace the remote namespace with the latest local commit.

    Parameters
    ----------
    state:
        The project's control state.
    store:
        Remote object store.
    target:
        ``"owner/repo"`` or ``(owner, repo)``.

    Raises
    ------
    InvalidTargetError
        If *target* is not two non-empty segments.
    NoCommitsError
        If the commit ledger is empty or unreadable.  No remote call is
        made in that case.
    MissingSnapshotError
        If the latest commit's snapshot directory is missing.
    RemoteStoreError
        If a delete or upload fails.
    """
    parsed = parse_target(target)
    state.require_initialized()

    with state.lock("push", lock_timeout):
        try:
            latest = Ledger(state.commit_ledger_path, strict=strict_ledger).latest()
        except (CorruptLedgerError, OSError) as exc:
            raise NoCommitsError(f"Error reading {state.commit_ledger_path.name}: {exc}") from exc
        if latest is None:
            raise NoCommitsError(f"No commits found in {state.commit_ledger_path.name}")

        commit_dir = state.snapshot_dir(latest.commit_id)
        if not commit_dir.is_dir():
            raise MissingSnapshotError(latest.commit_id)

        result = PushResult(record=latest, target=parsed)
        result.deleted = clear_namespace(store, parsed.prefix)

        for entry in iter_files(commit_dir):
            key = parsed.prefix + entry.path.relative_to(commit_dir).as_posix()
            store.put_object(key, entry.path.read_bytes())
            result.uploaded.append(key)
            logger.debug("Uploaded %s", key)

        try:
            Ledger(state.push_ledger_path).append(latest)
            logger.info("Latest commit %s added to %s", latest.commit_id, state.push_ledger_path.name)
        except OSError as exc:
            result.ledger_updated = False
            logger.warning("Failed to update %s: %s", state.push_ledger_path.name, exc)

    logger.info(
        "Commit %s pushed to %s (%d objects)",
        latest.commit_id, parsed, len(result.uploaded),
    )
    return result
