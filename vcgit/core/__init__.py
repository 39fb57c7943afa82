"""Local control state: layout, ledgers, tree primitives, and locking."""

from vcgit.core.fsutil import (
    CopyReport,
    DirectoryEntry,
    FileEntry,
    clear_directory,
    copy_tree,
    list_entries,
    relative_files,
)
from vcgit.core.ledger import Ledger, rebuild_commit_ledger
from vcgit.core.locking import LockInfo, RepoLock
from vcgit.core.state import ControlState

__all__ = [
    "ControlState",
    "CopyReport",
    "DirectoryEntry",
    "FileEntry",
    "Ledger",
    "LockInfo",
    "RepoLock",
    "clear_directory",
    "copy_tree",
    "list_entries",
    "rebuild_commit_ledger",
    "relative_files",
]
