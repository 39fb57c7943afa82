"""Directory traversal, tree copy, and clearing primitives.

Every recursive walk in vcgit goes through :func:`list_entries`, which
tags each child as a :class:`FileEntry` or :class:`DirectoryEntry`.
Anything else (sockets, broken symlinks, devices) is reported and skipped.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Container, Iterator, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """A regular file found during traversal."""

    path: Path
    name: str


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory found during traversal."""

    path: Path
    name: str


Entry = Union[FileEntry, DirectoryEntry]


@dataclass
class CopyReport:
    """Outcome of a tree copy."""

    copied: list[str] = field(default_factory=list)
    """Destination paths relative to the destination root, POSIX style."""

    failed: list[str] = field(default_factory=list)
    """Source paths that could not be copied."""

    @property
    def ok(self) -> bool:
        return not self.failed


def list_entries(directory: Path) -> list[Entry]:
    """Return the children of *directory* as tagged entries, sorted by name."""
    entries: list[Entry] = []
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.is_file():
            entries.append(FileEntry(child, child.name))
        elif child.is_dir():
            entries.append(DirectoryEntry(child, child.name))
        else:
            logger.warning("Skipping %s: not a file or directory", child)
    return entries


def iter_files(root: Path) -> Iterator[FileEntry]:
    """Yield every regular file below *root*, depth first, in name order."""
    for entry in list_entries(root):
        if isinstance(entry, FileEntry):
            yield entry
        else:
            yield from iter_files(entry.path)


def relative_files(root: Path) -> list[str]:
    """Return every file below *root* as a sorted POSIX relative path."""
    return sorted(entry.path.relative_to(root).as_posix() for entry in iter_files(root))


def copy_tree(
    src: Path,
    dest: Path,
    *,
    relative_to: Path | None = None,
    skip: Container[str] = (),
    report: CopyReport | None = None,
) -> CopyReport:
    """Copy every file under *src* into *dest*, preserving structure.

    Destination paths are computed relative to *relative_to* (default:
    *src* itself).  Staging passes the working tree root here so that a
    directory argument keeps its full working-tree-relative path.  Files
    whose relative POSIX path is in *skip* are not copied.

    A file that fails to copy is logged and recorded in the report; the
    rest of the tree is still copied.
    """
    base = relative_to if relative_to is not None else src
    if report is None:
        report = CopyReport()

    for entry in list_entries(src):
        if isinstance(entry, DirectoryEntry):
            copy_tree(entry.path, dest, relative_to=base, skip=skip, report=report)
            continue

        rel = entry.path.relative_to(base)
        if rel.as_posix() in skip:
            continue
        target = dest / rel
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry.path, target)
        except OSError as exc:
            logger.error("Failed to copy %s: %s", entry.path, exc)
            report.failed.append(str(entry.path))
            continue
        report.copied.append(rel.as_posix())
        logger.debug("Copied %s -> %s", entry.path, target)

    return report


def clear_directory(directory: Path) -> int:
    """Remove every entry inside *directory*, keeping the directory itself.

    Creates *directory* if it is missing.  Returns the number of top-level
    entries removed.  Failures propagate: a half-cleared tree must not be
    treated as clean.
    """
    directory.mkdir(parents=True, exist_ok=True)
    removed = 0
    for child in directory.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
        removed += 1
    return removed


def reset_directory(directory: Path) -> None:
    """Delete *directory* recursively (if present) and recreate it empty."""
    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True, exist_ok=True)
