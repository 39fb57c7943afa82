"""Data models shared across vcgit."""

from vcgit.models.records import (
    CommitRecord,
    RepositoryConfig,
    RepositoryContentEntry,
    new_commit_id,
)

__all__ = [
    "CommitRecord",
    "RepositoryConfig",
    "RepositoryContentEntry",
    "new_commit_id",
]
