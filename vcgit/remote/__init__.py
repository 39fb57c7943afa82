"""Remote object stores and repository namespaces."""

from vcgit.remote.base import ObjectInfo, ObjectPage, ObjectStore
from vcgit.remote.browse import list_repository_files
from vcgit.remote.factory import open_object_store
from vcgit.remote.local import LocalObjectStore
from vcgit.remote.memory import InMemoryObjectStore
from vcgit.remote.namespace import Target, namespace_prefix, parse_target

__all__ = [
    "InMemoryObjectStore",
    "LocalObjectStore",
    "ObjectInfo",
    "ObjectPage",
    "ObjectStore",
    "Target",
    "list_repository_files",
    "namespace_prefix",
    "open_object_store",
    "parse_target",
]
