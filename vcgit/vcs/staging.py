"""Staging — copy selected working-tree entries into a clean staging area.

The staging area is emptied at the start of every :func:`add`, so it
always reflects exactly the most recent invocation.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from vcgit.config import COMMIT_METADATA_NAME, DEFAULT_LOCK_TIMEOUT
from vcgit.core.fsutil import copy_tree, reset_directory
from vcgit.core.state import ControlState

logger = logging.getLogger(__name__)


@dataclass
class AddResult:
    """Outcome of :func:`add`."""

    staged: list[str] = field(default_factory=list)
    """Paths written into staging, relative to the staging root."""

    skipped: list[str] = field(default_factory=list)
    """Arguments that were missing, outside the working tree, or failed."""


def add(
    state: ControlState,
    paths: Iterable[str | Path],
    *,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> AddResult:
    """Replace the staging area with the given working-tree paths.

    Parameters
    ----------
    state:
        The project's control state.
    paths:
        Paths relative to the working tree root.  A file is staged under
        its base name; a directory is staged recursively with every file
        keeping its path relative to the working tree root.  Anything that
        would land on ``commit.json`` at the staging root is skipped, since
        the commit writes its metadata there.

    Raises
    ------
    NotInitializedError
        If the control directory does not exist.
    MissingWorkingTreeError
        If the working tree directory does not exist.
    """
    state.require_initialized()
    state.require_working_tree()

    result = AddResult()
    with state.lock("add", lock_timeout):
        reset_directory(state.staging)
        logger.info("Cleared all contents from staging directory")

        paths = list(paths)
        if not paths:
            logger.warning("No file paths provided.")
            return result

        for raw in paths:
            try:
                _stage_one(state, str(raw), result)
            except OSError as exc:
                logger.error("Error processing %s: %s", raw, exc)
                result.skipped.append(str(raw))

    return result


def _stage_one(state: ControlState, raw: str, result: AddResult) -> None:
    source = (state.working_tree / raw).resolve()
    if not source.is_relative_to(state.working_tree):
        logger.warning("Skipping %s: outside the working tree", raw)
        result.skipped.append(raw)
        return

    if not source.exists():
        logger.warning("Skipping %s: does not exist in %s", raw, state.working_tree)
        result.skipped.append(raw)
        return

    if source.is_file():
        if source.name == COMMIT_METADATA_NAME:
            logger.warning("Skipping %s: %s is reserved for commit metadata", raw, COMMIT_METADATA_NAME)
            result.skipped.append(raw)
            return
        shutil.copy2(source, state.staging / source.name)
        result.staged.append(source.name)
        logger.info("File %s added to the staging area", source.name)
    elif source.is_dir():
        if source == state.working_tree and (source / COMMIT_METADATA_NAME).is_file():
            logger.warning("Skipping %s: reserved for commit metadata", COMMIT_METADATA_NAME)
            result.skipped.append(COMMIT_METADATA_NAME)
        report = copy_tree(source, state.staging, relative_to=state.working_tree, skip={COMMIT_METADATA_NAME})
        result.staged.extend(report.copied)
        if report.failed:
            result.skipped.extend(report.failed)
        logger.info(
            "Directory %s added to the staging area (%d files)",
            raw, len(report.copied),
        )
    else:
        logger.warning("Skipping %s: not a file or directory", raw)
        result.skipped.append(raw)
