"""LocalObjectStore — a directory used as a bucket.

Useful for sharing snapshots through a mounted network drive, and for
end-to-end tests that want a store surviving across facade instances.
Keys map directly to relative file paths under the bucket root.
"""

from __future__ import annotations

import bisect
import logging
import time
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Iterable

from vcgit.config import DEFAULT_PAGE_SIZE, DEFAULT_SIGNED_URL_TTL
from vcgit.errors import RemoteObjectNotFoundError, RemoteStoreError
from vcgit.remote.base import ObjectInfo, ObjectPage, ObjectStore

logger = logging.getLogger(__name__)


class LocalObjectStore(ObjectStore):
    """Filesystem-backed object store rooted at *root*."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not key or key.endswith("/") or key.startswith("/") or ".." in parts:
            raise RemoteStoreError("resolve", key, ValueError("unsupported key"))
        return self.root.joinpath(*parts)

    def _all_keys(self) -> list[str]:
        return sorted(p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ObjectPage:
        keys = [k for k in self._all_keys() if k.startswith(prefix)]
        start = 0
        if continuation_token is not None:
            start = bisect.bisect_right(keys, continuation_token)

        limit = max(1, max_keys)
        chunk = keys[start:start + limit]
        truncated = start + limit < len(keys)

        contents: list[ObjectInfo] = []
        for key in chunk:
            stat = (self.root / key).stat()
            contents.append(ObjectInfo(
                key=key,
                size=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return ObjectPage(
            contents=contents,
            is_truncated=truncated,
            next_continuation_token=chunk[-1] if truncated else None,
        )

    def get_object(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise RemoteObjectNotFoundError(key) from None
        except OSError as exc:
            raise RemoteStoreError("get", key, exc) from exc

    def put_object(self, key: str, body: bytes) -> None:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(body)
        except OSError as exc:
            raise RemoteStoreError("put", key, exc) from exc

    def delete_objects(self, keys: Iterable[str]) -> None:
        for key in keys:
            path = self._path_for(key)
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise RemoteStoreError("delete", key, exc) from exc
            self._prune_empty_parents(path.parent)

    def _prune_empty_parents(self, directory: Path) -> None:
        while directory != self.root and directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
            directory = directory.parent

    def signed_read_url(self, key: str, ttl: int = DEFAULT_SIGNED_URL_TTL) -> str:
        expires = int(time.time()) + ttl
        return f"{self._path_for(key).as_uri()}?expires={expires}"

    def __repr__(self) -> str:
        return f"LocalObjectStore(root={self.root})"
