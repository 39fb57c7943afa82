"""Build an :class:`ObjectStore` from a bucket identifier.

Supported identifiers:

- ``s3://bucket`` or a bare ``bucket`` name — :class:`S3ObjectStore`
- ``file:///abs/path`` or ``file://rel/path`` — :class:`LocalObjectStore`
- ``memory://name`` — a process-wide :class:`InMemoryObjectStore`
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from vcgit.errors import ConfigError
from vcgit.remote.base import ObjectStore
from vcgit.remote.local import LocalObjectStore
from vcgit.remote.memory import InMemoryObjectStore

logger = logging.getLogger(__name__)

# Keeps memory:// buckets alive across facade instances in one process
_MEMORY_STORES: dict[str, InMemoryObjectStore] = {}


def open_object_store(identifier: str) -> ObjectStore:
    """Return the object store named by *identifier*.

    Raises
    ------
    ConfigError
        If *identifier* is empty or uses an unknown scheme.
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise ConfigError(
            "No remote bucket configured. Pass a bucket to 'init' or set VCGIT_BUCKET."
        )

    if "://" not in identifier:
        return _open_s3(identifier)

    parsed = urlparse(identifier)
    scheme = parsed.scheme.lower()

    if scheme == "s3":
        return _open_s3(parsed.netloc)
    if scheme == "file":
        path = unquote(parsed.netloc + parsed.path)
        logger.debug("Using local object store at %s", path)
        return LocalObjectStore(Path(path))
    if scheme == "memory":
        name = parsed.netloc or "default"
        if name not in _MEMORY_STORES:
            _MEMORY_STORES[name] = InMemoryObjectStore(name)
        return _MEMORY_STORES[name]

    raise ConfigError(f"Unsupported bucket identifier: {identifier}")


def _open_s3(bucket: str) -> ObjectStore:
    if not bucket:
        raise ConfigError("S3 bucket identifier has no bucket name")
    from vcgit.remote.s3 import S3ObjectStore

    return S3ObjectStore(bucket)
