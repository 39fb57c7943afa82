"""Python API — the :class:`VCGit` facade."""

from vcgit.api.facade import VCGit

__all__ = ["VCGit"]
