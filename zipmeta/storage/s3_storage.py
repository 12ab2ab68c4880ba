"""S3-compatible storage backend.

Supports AWS S3, MinIO, and other S3-compatible object stores.
"""

import asyncio

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from zipmeta.exceptions import StorageError
from zipmeta.utils.logger import get_logger

from .base import BaseStorage

logger = get_logger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3Storage(BaseStorage):
    """Reads archives from and writes sidecars to an S3 bucket.

    Args:
        bucket: S3 bucket name.
        prefix: Key prefix for all objects (e.g. ``"incoming/"``).
        region: AWS region (optional, uses the boto3 default if not set).
        endpoint_url: Custom endpoint for MinIO/compatible storage.
        client: Optional preconfigured boto3 S3 client.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: str | None = None,
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        if client is None:
            kwargs: dict = {}
            if region:
                kwargs["region_name"] = region
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)

        self._s3 = client
        self._bucket = bucket
        self._prefix = prefix.rstrip("/") + "/" if prefix else ""

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _list(self, prefix: str) -> list[str]:
        paginator = self._s3.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=self._full_key(prefix)):
            for obj in page.get("Contents", []):
                key = obj["Key"][len(self._prefix):]
                if key and not key.endswith("/"):
                    keys.append(key)
        return sorted(keys)

    async def list_keys(self, prefix: str = "") -> list[str]:
        try:
            return await asyncio.to_thread(self._list, prefix)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Cannot list s3://{self._bucket}/{self._prefix}: {exc}") from exc

    def _get(self, key: str) -> bytes:
        response = self._s3.get_object(Bucket=self._bucket, Key=self._full_key(key))
        return response["Body"].read()

    async def get(self, key: str) -> bytes:
        try:
            return await asyncio.to_thread(self._get, key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Cannot download {key}: {exc}") from exc

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        full_key = self._full_key(key)
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=self._bucket,
                Key=full_key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Cannot upload {key}: {exc}") from exc
        logger.debug("S3 write: s3://%s/%s (%d bytes)", self._bucket, full_key, len(data))

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(
                self._s3.head_object, Bucket=self._bucket, Key=self._full_key(key)
            )
        except ClientError as exc:
            if str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES:
                return False
            raise StorageError(f"Cannot check {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Cannot check {key}: {exc}") from exc
        return True
