"""In-memory object store — for tests and ``memory://`` buckets."""

from __future__ import annotations

import bisect
import logging
from datetime import datetime, timezone
from typing import Iterable
from urllib.parse import quote

from vcgit.config import DEFAULT_PAGE_SIZE, DEFAULT_SIGNED_URL_TTL
from vcgit.errors import RemoteObjectNotFoundError
from vcgit.remote.base import ObjectInfo, ObjectPage, ObjectStore

logger = logging.getLogger(__name__)


class InMemoryObjectStore(ObjectStore):
    """Dict-backed store with S3-like pagination.

    Parameters
    ----------
    bucket:
        Name used in signed URLs.
    page_size:
        Upper bound on keys per listing page, applied on top of the
        caller's ``max_keys``.  Set it low to exercise pagination.
    """

    def __init__(self, bucket: str = "memory", *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.bucket = bucket
        self.page_size = page_size
        self._objects: dict[str, tuple[bytes, datetime]] = {}
        self._calls: list[tuple[str, str]] = []

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ObjectPage:
        self._calls.append(("list", prefix))
        keys = sorted(k for k in self._objects if k.startswith(prefix))
        start = 0
        if continuation_token is not None:
            start = bisect.bisect_right(keys, continuation_token)

        limit = max(1, min(max_keys, self.page_size))
        chunk = keys[start:start + limit]
        truncated = start + limit < len(keys)
        contents = [
            ObjectInfo(key=k, size=len(self._objects[k][0]), last_modified=self._objects[k][1])
            for k in chunk
        ]
        return ObjectPage(
            contents=contents,
            is_truncated=truncated,
            next_continuation_token=chunk[-1] if truncated else None,
        )

    def get_object(self, key: str) -> bytes:
        self._calls.append(("get", key))
        try:
            return self._objects[key][0]
        except KeyError:
            raise RemoteObjectNotFoundError(key) from None

    def put_object(self, key: str, body: bytes) -> None:
        self._calls.append(("put", key))
        self._objects[key] = (bytes(body), datetime.now(timezone.utc))

    def delete_objects(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._calls.append(("delete", key))
            self._objects.pop(key, None)

    def signed_read_url(self, key: str, ttl: int = DEFAULT_SIGNED_URL_TTL) -> str:
        return f"memory://{self.bucket}/{quote(key)}?expires={ttl}"

    # -- Test helpers ---------------------------------------------------------

    @property
    def calls(self) -> list[tuple[str, str]]:
        """Every operation performed, as ``(operation, key_or_prefix)``."""
        return list(self._calls)

    def keys(self) -> list[str]:
        return sorted(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __repr__(self) -> str:
        return f"InMemoryObjectStore(bucket={self.bucket!r}, objects={len(self._objects)})"
