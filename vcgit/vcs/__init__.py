"""Local version control — staging, commits, revert, and history."""

from vcgit.vcs.commits import commit, read_commit
from vcgit.vcs.history import CommitDetails, get_log, get_pushed, show_commit
from vcgit.vcs.revert import revert
from vcgit.vcs.staging import AddResult, add

__all__ = [
    "AddResult",
    "CommitDetails",
    "add",
    "commit",
    "get_log",
    "get_pushed",
    "read_commit",
    "revert",
    "show_commit",
]
