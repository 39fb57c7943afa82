"""Pydantic models for ledger records and repository configuration."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_commit_id() -> str:
    """Return a fresh UUID4 commit identifier."""
    return str(uuid.uuid4())


class CommitRecord(BaseModel):
    """One commit as stored in ``commit.json`` and in both ledgers.

    On disk the timestamp key is ``date`` (ISO-8601).
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    commit_id: str = Field(default_factory=new_commit_id, alias="commitID")
    timestamp: datetime = Field(default_factory=_utc_now, alias="date")

    def to_json_dict(self) -> dict[str, str]:
        """Serialise with the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


class RepositoryConfig(BaseModel):
    """Contents of ``<control-root>/config.json``."""

    model_config = ConfigDict(populate_by_name=True)

    remote_bucket_identifier: str = Field(
        default="",
        validation_alias=AliasChoices("bucket", "remoteBucketIdentifier", "remote_bucket_identifier"),
        serialization_alias="bucket",
    )


class RepositoryContentEntry(BaseModel):
    """A file or directory listed under a repository's remote namespace."""

    name: str
    type: Literal["file", "directory"]
    path: str
    url: Optional[str] = None
