"""Abstract remote object store interface."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator

from vcgit.config import DEFAULT_PAGE_SIZE, DEFAULT_SIGNED_URL_TTL
from vcgit.errors import RemoteStoreError


@dataclass(frozen=True)
class ObjectInfo:
    """One listed object."""

    key: str
    size: int = 0
    last_modified: datetime | None = None


@dataclass
class ObjectPage:
    """One page of a paginated listing."""

    contents: list[ObjectInfo] = field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: str | None = None


class ObjectStore(abc.ABC):
    """Flat key/value blob store addressed by string keys.

    Implementations must override the five primitive operations.  Listing
    is paginated: callers that need every key must follow
    ``next_continuation_token`` until ``is_truncated`` is false, which
    :meth:`iter_objects` does.
    """

    @abc.abstractmethod
    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ObjectPage:
        """Return one page of objects whose key starts with *prefix*.

        Keys are returned in lexicographic order.
        """

    @abc.abstractmethod
    def get_object(self, key: str) -> bytes:
        """Return the body of *key*.

        Raises :class:`~vcgit.errors.RemoteObjectNotFoundError` if absent.
        """

    @abc.abstractmethod
    def put_object(self, key: str, body: bytes) -> None:
        """Create or overwrite *key*."""

    @abc.abstractmethod
    def delete_objects(self, keys: Iterable[str]) -> None:
        """Delete every key in *keys*.  Missing keys are ignored."""

    @abc.abstractmethod
    def signed_read_url(self, key: str, ttl: int = DEFAULT_SIGNED_URL_TTL) -> str:
        """Return a URL granting read access to *key* for *ttl* seconds."""

    def iter_objects(self, prefix: str, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[ObjectInfo]:
        """Yield every object under *prefix*, draining all pages."""
        token: str | None = None
        while True:
            page = self.list_objects(prefix, continuation_token=token, max_keys=page_size)
            yield from page.contents
            if not page.is_truncated:
                return
            token = page.next_continuation_token
            if not token:
                raise RemoteStoreError(
                    "list", prefix, ValueError("truncated page without a continuation token"),
                )

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
