"""Pull — replace the working tree with the remote namespace contents.

Objects are always read live from the remote namespace.  The push ledger
only names the commit being reported as pulled.  Uncommitted working tree
content is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from vcgit.config import DEFAULT_LOCK_TIMEOUT
from vcgit.core.fsutil import clear_directory
from vcgit.core.ledger import Ledger
from vcgit.core.state import ControlState
from vcgit.errors import CorruptLedgerError, NoPushedCommitsError, RemoteStoreError
from vcgit.models.records import CommitRecord
from vcgit.remote.base import ObjectStore
from vcgit.remote.namespace import Target, parse_target

logger = logging.getLogger(__name__)


@dataclass
class PullResult:
    """Outcome of :func:`pull`."""

    record: CommitRecord
    target: Target
    written: list[str] = field(default_factory=list)
    """Working-tree relative paths written, in download order."""

    @property
    def empty(self) -> bool:
        return not self.written


def pull(
    state: ControlState,
    store: ObjectStore,
    target: str | tuple[str, str],
    *,
    strict_ledger: bool = False,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> PullResult:
    """Download the namespace of *target* into a cleared working tree.

    Raises
    ------
    InvalidTargetError
        If *target* is not two non-empty segments.
    NoPushedCommitsError
        If the push ledger is empty or unreadable.
    RemoteStoreError
        If listing or downloading fails.
    """
    parsed = parse_target(target)
    state.require_initialized()

    with state.lock("pull", lock_timeout):
        state.working_tree.mkdir(parents=True, exist_ok=True)

        try:
            latest = Ledger(state.push_ledger_path, strict=strict_ledger).latest()
        except (CorruptLedgerError, OSError) as exc:
            raise NoPushedCommitsError(f"Error reading {state.push_ledger_path.name}: {exc}") from exc
        if latest is None:
            raise NoPushedCommitsError(f"No commits found in {state.push_ledger_path.name}")

        clear_directory(state.working_tree)
        result = PullResult(record=latest, target=parsed)

        objects = list(store.iter_objects(parsed.prefix))
        if not objects:
            logger.info("No files found in remote for %s; nothing to pull", parsed.prefix)
            return result

        for obj in objects:
            relative = obj.key[len(parsed.prefix):]
            # Directory markers carry no content
            if not relative or relative.endswith("/"):
                continue
            local_path = _local_path(state, obj.key, relative)
            local_path.parent.mkdir(parents=True, exist_ok=True)
            local_path.write_bytes(store.get_object(obj.key))
            result.written.append(relative)
            logger.debug("Downloaded %s -> %s", obj.key, local_path)

    logger.info(
        "Successfully pulled commit %s from %s to %s (%d files)",
        latest.commit_id, parsed, state.working_tree, len(result.written),
    )
    return result


def _local_path(state: ControlState, key: str, relative: str) -> Path:
    """Map a namespace-relative key into the working tree.

    Raises :class:`RemoteStoreError` for absolute or ``..`` keys and for
    any key that would resolve outside the working tree.
    """
    rel = PurePosixPath(relative)
    if rel.is_absolute() or ".." in rel.parts:
        raise RemoteStoreError("get", key, ValueError("key escapes the namespace"))

    local_path = state.working_tree.joinpath(*rel.parts)
    if not local_path.resolve().is_relative_to(state.working_tree.resolve()):
        raise RemoteStoreError("get", key, ValueError("key escapes the working tree"))
    return local_path
