"""Exception hierarchy for vcgit operations.

Precondition failures abort the whole operation and are raised to the
caller.  Per-item failures (one path of an ``add``, one file of a tree
copy) are logged and skipped instead.
"""

from __future__ import annotations


class VCGitError(Exception):
    """Base class for all vcgit errors."""


class ConfigError(VCGitError):
    """Raised when repository configuration is missing or unusable."""


class NotInitializedError(VCGitError):
    """Raised when the control directory does not exist."""

    def __init__(self, control_root: str) -> None:
        self.control_root = control_root
        super().__init__(
            f"Repository not initialized at {control_root}. Run 'init' first."
        )


class MissingWorkingTreeError(VCGitError):
    """Raised when the working tree directory does not exist."""

    def __init__(self, working_tree: str) -> None:
        self.working_tree = working_tree
        super().__init__(f"Working tree does not exist: {working_tree}")


class NoStagingAreaError(VCGitError):
    """Raised when committing without a staging directory."""

    def __init__(self, staging: str) -> None:
        self.staging = staging
        super().__init__(f"Staging area does not exist: {staging}")


class InvalidTargetError(VCGitError):
    """Raised when a push/pull target is not ``owner/repo``."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(
            f"Invalid target {target!r}. Expected format: username/reponame"
        )


class NoCommitsError(VCGitError):
    """Raised when pushing with an empty or unreadable commit ledger."""


class MissingSnapshotError(VCGitError):
    """Raised when the latest ledger entry has no snapshot directory."""

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Commit directory {commit_id} does not exist")


class NoPushedCommitsError(VCGitError):
    """Raised when pulling with an empty or unreadable push ledger."""


class UnknownCommitError(VCGitError):
    """Raised when reverting to a commit that has no local snapshot."""

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Commit directory {commit_id} does not exist")


class CorruptLedgerError(VCGitError):
    """Raised in strict mode when a ledger file cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt ledger {path}: {reason}")


class LockTimeoutError(VCGitError):
    """Raised when the repository lock cannot be acquired in time."""

    def __init__(self, lock_path: str, timeout: float, holder: str | None = None) -> None:
        self.lock_path = lock_path
        self.timeout = timeout
        self.holder = holder
        msg = f"Could not acquire {lock_path} within {timeout:.1f}s"
        if holder:
            msg += f" (held by {holder})"
        super().__init__(msg)


class RemoteStoreError(VCGitError):
    """Raised when a remote object store call fails."""

    def __init__(self, operation: str, key: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        msg = f"Remote {operation} failed for {key}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class RemoteObjectNotFoundError(RemoteStoreError):
    """Raised when a remote object does not exist."""

    def __init__(self, key: str) -> None:
        self.operation = "get"
        self.key = key
        self.cause = None
        VCGitError.__init__(self, f"Remote object not found: {key}")
