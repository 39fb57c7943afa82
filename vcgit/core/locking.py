"""Exclusive per-repository lock held across mutating operations."""

from __future__ import annotations

import json
import logging
import os
import socket
import time
from dataclasses import dataclass
from pathlib import Path

from vcgit.config import DEFAULT_LOCK_STALE_AFTER, DEFAULT_LOCK_TIMEOUT
from vcgit.errors import LockTimeoutError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


@dataclass
class LockInfo:
    """Contents of the lock file."""

    owner: str
    pid: int
    operation: str
    timestamp: float

    def age(self) -> float:
        return time.time() - self.timestamp

    def to_dict(self) -> dict:
        return {
            "owner": self.owner,
            "pid": self.pid,
            "operation": self.operation,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LockInfo:
        return cls(
            owner=data["owner"],
            pid=int(data.get("pid", 0)),
            operation=data.get("operation", ""),
            timestamp=float(data.get("timestamp", 0)),
        )


class RepoLock:
    """File lock at ``<control-root>/.lock``, created with ``O_EXCL``.

    Use as a context manager around any read-modify-write of a ledger or
    the delete+upload sequence of a push::

        with RepoLock(state.lock_path, operation="commit"):
            ...

    A lock older than *stale_after* seconds is assumed abandoned and
    broken.  Not re-entrant.

    Parameters
    ----------
    lock_path:
        Lock file location.
    operation:
        Label recorded in the lock file for diagnostics.
    timeout:
        Seconds to wait for a competing holder before giving up.
    stale_after:
        Age in seconds after which an existing lock is broken.
    """

    def __init__(
        self,
        lock_path: str | Path,
        *,
        operation: str = "",
        timeout: float = DEFAULT_LOCK_TIMEOUT,
        stale_after: float = DEFAULT_LOCK_STALE_AFTER,
    ) -> None:
        self.lock_path = Path(lock_path)
        self.operation = operation
        self.timeout = timeout
        self.stale_after = stale_after
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> LockInfo:
        """Create the lock file, waiting up to :attr:`timeout` seconds."""
        info = LockInfo(
            owner=socket.gethostname(),
            pid=os.getpid(),
            operation=self.operation,
            timestamp=time.time(),
        )
        payload = json.dumps(info.to_dict()).encode("utf-8")
        deadline = time.monotonic() + self.timeout

        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                existing = self.read()
                age = self._age(existing)
                if age is not None and age > self.stale_after:
                    logger.warning("Breaking stale lock %s (age %.0fs)", self.lock_path, age)
                    self.lock_path.unlink(missing_ok=True)
                    continue
                if time.monotonic() >= deadline:
                    holder = None
                    if existing is not None:
                        holder = f"{existing.owner}:{existing.pid} ({existing.operation})"
                    raise LockTimeoutError(str(self.lock_path), self.timeout, holder)
                time.sleep(_POLL_INTERVAL)
                continue

            try:
                os.write(fd, payload)
            finally:
                os.close(fd)
            self._held = True
            logger.debug("Acquired %s for %s", self.lock_path, self.operation)
            return info

    def release(self) -> None:
        if not self._held:
            return
        self.lock_path.unlink(missing_ok=True)
        self._held = False
        logger.debug("Released %s", self.lock_path)

    def read(self) -> LockInfo | None:
        """Return the current holder, or *None* if unlocked or unreadable.

        An unreadable lock file (mid-write by another process) reports as
        *None* but is left in place.
        """
        try:
            data = json.loads(self.lock_path.read_text(encoding="utf-8"))
            return LockInfo.from_dict(data)
        except (FileNotFoundError, json.JSONDecodeError, KeyError, TypeError, ValueError):
            return None

    def _age(self, info: LockInfo | None) -> float | None:
        if info is not None:
            return info.age()
        try:
            return time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return None

    def __enter__(self) -> RepoLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
