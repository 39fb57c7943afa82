"""vcgit — snapshot-based version tracking with object-store sync."""

__version__ = "1.0.0"

from vcgit.api.facade import VCGit
from vcgit.core.ledger import Ledger
from vcgit.core.state import ControlState
from vcgit.errors import (
    ConfigError,
    CorruptLedgerError,
    InvalidTargetError,
    LockTimeoutError,
    MissingSnapshotError,
    MissingWorkingTreeError,
    NoCommitsError,
    NoPushedCommitsError,
    NoStagingAreaError,
    NotInitializedError,
    RemoteObjectNotFoundError,
    RemoteStoreError,
    UnknownCommitError,
    VCGitError,
)
from vcgit.models.records import CommitRecord, RepositoryConfig, RepositoryContentEntry
from vcgit.remote.base import ObjectStore
from vcgit.remote.local import LocalObjectStore
from vcgit.remote.memory import InMemoryObjectStore

__all__ = [
    "__version__",
    # Facade
    "VCGit",
    # State
    "CommitRecord",
    "ControlState",
    "Ledger",
    "RepositoryConfig",
    "RepositoryContentEntry",
    # Remote
    "InMemoryObjectStore",
    "LocalObjectStore",
    "ObjectStore",
    # Errors
    "ConfigError",
    "CorruptLedgerError",
    "InvalidTargetError",
    "LockTimeoutError",
    "MissingSnapshotError",
    "MissingWorkingTreeError",
    "NoCommitsError",
    "NoPushedCommitsError",
    "NoStagingAreaError",
    "NotInitializedError",
    "RemoteObjectNotFoundError",
    "RemoteStoreError",
    "UnknownCommitError",
    "VCGitError",
]
