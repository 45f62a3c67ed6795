"""
S3 object store for project files and cached artifacts.

Async facade over the blocking boto3 client: every call runs in the
threadpool. Keys are sanitized before use, and listings hide chunk-cache
artifacts unless explicitly requested.

Dependencies: boto3, botocore, fastapi.concurrency
System role: Storage boundary for raw files and derived artifacts
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError
from fastapi.concurrency import run_in_threadpool

from paperdesk.core.exceptions import NotFoundError
from paperdesk.models.document import ObjectEntry, ObjectStat

logger = logging.getLogger(__name__)

INTERNAL_SUFFIXES = (".chunks.json",)
MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def sanitize_key(key: str) -> str:
    """Remove parent-directory segments and leading slashes from a key."""
    return key.replace("../", "").lstrip("/")


def is_internal(key: str) -> bool:
    """True for artifacts that listings hide by default."""
    return key.endswith(INTERNAL_SUFFIXES)


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in MISSING_CODES


class S3ObjectStore:
    """Async S3 client scoped to one bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1", client: Any = None) -> None:
        """
        Initialize S3 object store.

        Args:
            bucket: S3 bucket name
            region: AWS region for the bucket
            client: Optional pre-built boto3 S3 client (tests pass a mock)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    async def write(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """
        Store bytes under key, overwriting any existing object.

        Args:
            key: Object key
            data: Raw bytes to store
            content_type: Optional MIME type
        """
        key = sanitize_key(key)
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        await run_in_threadpool(self._s3_client.put_object, **params)
        logger.debug(f"{__name__}:write - Stored {key}", extra={"key": key, "size": len(data)})

    async def read(self, key: str) -> bytes:
        """
        Read an object's bytes.

        Raises:
            NotFoundError: If the key does not exist
        """
        key = sanitize_key(key)
        try:
            response = await run_in_threadpool(
                self._s3_client.get_object, Bucket=self._bucket, Key=key
            )
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError(key) from e
            raise
        return await run_in_threadpool(response["Body"].read)

    async def stat(self, key: str) -> ObjectStat:
        """
        Fetch object metadata with a HEAD request.

        Raises:
            NotFoundError: If the key does not exist
        """
        key = sanitize_key(key)
        try:
            head = await run_in_threadpool(
                self._s3_client.head_object, Bucket=self._bucket, Key=key
            )
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError(key) from e
            raise
        return ObjectStat(
            key=key,
            size=head.get("ContentLength", 0),
            last_modified=head.get("LastModified"),
            content_type=head.get("ContentType"),
        )

    async def exists(self, key: str) -> bool:
        try:
            await self.stat(key)
            return True
        except NotFoundError:
            return False

    async def delete(self, key: str) -> None:
        """Delete an object; S3 treats a missing key as success."""
        key = sanitize_key(key)
        await run_in_threadpool(self._s3_client.delete_object, Bucket=self._bucket, Key=key)
        logger.debug(f"{__name__}:delete - Deleted {key}", extra={"key": key})

    async def list_dir(self, prefix: str = "", include_internal: bool = False) -> list[ObjectEntry]:
        """
        List one directory level under prefix.

        Args:
            prefix: Directory prefix, with or without trailing slash
            include_internal: Also return chunk-cache artifacts

        Returns:
            list[ObjectEntry]: Directories first, then files, paths relative to prefix
        """
        prefix = sanitize_key(prefix)
        if prefix and not prefix.endswith("/"):
            prefix += "/"

        entries: list[ObjectEntry] = []
        for page in await run_in_threadpool(self._pages, prefix, "/"):
            for common in page.get("CommonPrefixes", []):
                entries.append(ObjectEntry(path=common["Prefix"][len(prefix):].rstrip("/"), is_dir=True))
            for obj in page.get("Contents", []):
                key = obj["Key"]
                if key == prefix or (not include_internal and is_internal(key)):
                    continue
                entries.append(ObjectEntry(path=key[len(prefix):], size=obj.get("Size")))
        return entries

    async def list_recursive(self, prefix: str = "", include_internal: bool = False) -> list[str]:
        """
        List every key under prefix.

        Args:
            prefix: Key prefix
            include_internal: Also return chunk-cache artifacts

        Returns:
            list[str]: Full object keys
        """
        prefix = sanitize_key(prefix)
        keys: list[str] = []
        for page in await run_in_threadpool(self._pages, prefix, None):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                if not include_internal and is_internal(key):
                    continue
                keys.append(key)
        return keys

    def _pages(self, prefix: str, delimiter: str | None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        paginator = self._s3_client.get_paginator("list_objects_v2")
        return list(paginator.paginate(**params))
