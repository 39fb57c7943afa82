"""Amazon S3 object store via boto3.  Optional (``pip install vcgit[s3]``)."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from vcgit.config import DEFAULT_PAGE_SIZE, DEFAULT_SIGNED_URL_TTL, MAX_DELETE_BATCH
from vcgit.errors import RemoteObjectNotFoundError, RemoteStoreError
from vcgit.remote.base import ObjectInfo, ObjectPage, ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(exc: Exception) -> str:
    response = getattr(exc, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


class S3ObjectStore(ObjectStore):
    """Object store backed by one S3 bucket.

    Parameters
    ----------
    bucket:
        Bucket name.
    client:
        A boto3 S3 client.  Created with ``boto3.client("s3")`` when
        omitted, so credentials and region come from the usual AWS
        environment variables and config files.
    """

    def __init__(self, bucket: str, *, client: Any | None = None, **client_kwargs: Any) -> None:
        if not bucket:
            raise ValueError("S3ObjectStore requires a bucket name")
        self.bucket = bucket
        if client is None:
            import boto3

            client = boto3.client("s3", **client_kwargs)
        self._client = client

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ObjectPage:
        params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix, "MaxKeys": max_keys}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        try:
            response = self._client.list_objects_v2(**params)
        except Exception as exc:
            raise RemoteStoreError("list", prefix, exc) from exc

        contents = [
            ObjectInfo(key=obj["Key"], size=obj.get("Size", 0), last_modified=obj.get("LastModified"))
            for obj in response.get("Contents", [])
        ]
        return ObjectPage(
            contents=contents,
            is_truncated=bool(response.get("IsTruncated", False)),
            next_continuation_token=response.get("NextContinuationToken"),
        )

    def get_object(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except Exception as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                raise RemoteObjectNotFoundError(key) from exc
            raise RemoteStoreError("get", key, exc) from exc

    def put_object(self, key: str, body: bytes) -> None:
        try:
            self._client.put_object(Bucket=self.bucket, Key=key, Body=body)
        except Exception as exc:
            raise RemoteStoreError("put", key, exc) from exc

    def delete_objects(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        for start in range(0, len(keys), MAX_DELETE_BATCH):
            batch = keys[start:start + MAX_DELETE_BATCH]
            try:
                response = self._client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except Exception as exc:
                raise RemoteStoreError("delete", batch[0], exc) from exc

            errors = (response or {}).get("Errors") or []
            if errors:
                first = errors[0]
                raise RemoteStoreError(
                    "delete",
                    first.get("Key", ""),
                    RuntimeError(f"{len(errors)} object(s) not deleted: {first.get('Message', '')}"),
                )

    def signed_read_url(self, key: str, ttl: int = DEFAULT_SIGNED_URL_TTL) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=ttl,
            )
        except Exception as exc:
            raise RemoteStoreError("sign", key, exc) from exc

    def __repr__(self) -> str:
        return f"S3ObjectStore(bucket={self.bucket!r})"
