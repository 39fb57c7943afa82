"""Repository file listing for the metadata service.

The repository metadata service (create/list/update/delete of repository
records) lives outside vcgit.  Its one read path that touches the object
store lists the files of the most recent push with signed download URLs;
that listing is implemented here.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from vcgit.config import DEFAULT_SIGNED_URL_TTL
from vcgit.models.records import RepositoryContentEntry
from vcgit.remote.base import ObjectStore
from vcgit.remote.namespace import namespace_prefix

logger = logging.getLogger(__name__)


def list_repository_files(
    store: ObjectStore,
    username: str,
    reponame: str,
    *,
    ttl: int = DEFAULT_SIGNED_URL_TTL,
) -> list[RepositoryContentEntry]:
    """List every object pushed for ``username/reponame``.

    Keys ending in ``/`` are directory markers and get no URL; every other
    key is a file with a read URL valid for *ttl* seconds.  Paths are
    relative to the repository namespace.
    """
    prefix = namespace_prefix(username, reponame)
    entries: list[RepositoryContentEntry] = []

    for obj in store.iter_objects(prefix):
        relative = obj.key[len(prefix):]
        if not relative:
            continue
        if relative.endswith("/"):
            name = PurePosixPath(relative.rstrip("/")).name
            entries.append(RepositoryContentEntry(
                name=name, type="directory", path=relative, url=None,
            ))
        else:
            entries.append(RepositoryContentEntry(
                name=PurePosixPath(relative).name,
                type="file",
                path=relative,
                url=store.signed_read_url(obj.key, ttl),
            ))

    logger.debug("Listed %d entries under %s", len(entries), prefix)
    return entries
