"""Remote namespace naming: ``owner/repo`` targets and key prefixes."""

from __future__ import annotations

from typing import NamedTuple

from vcgit.config import REMOTE_ROOT_PREFIX
from vcgit.errors import InvalidTargetError


class Target(NamedTuple):
    """A parsed ``owner/repo`` push or pull target."""

    owner: str
    repo: str

    @property
    def prefix(self) -> str:
        return namespace_prefix(self.owner, self.repo)

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_target(target: str | tuple[str, str]) -> Target:
    """Parse ``"owner/repo"`` (or an ``(owner, repo)`` pair).

    Raises
    ------
    InvalidTargetError
        Unless the target splits into exactly two non-empty segments.
    """
    if isinstance(target, tuple):
        parts = [str(p) for p in target]
        raw = "/".join(parts)
    else:
        raw = target or ""
        parts = raw.split("/")

    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise InvalidTargetError(raw)
    if any(p in (".", "..") for p in parts):
        raise InvalidTargetError(raw)
    return Target(parts[0], parts[1])


def namespace_prefix(owner: str, repo: str) -> str:
    """Return the key prefix ``commits/{owner}/{repo}/``."""
    return f"{REMOTE_ROOT_PREFIX}/{owner}/{repo}/"
