"""
S3 client for the document bucket.

Uploads, downloads and deletes document blobs and issues time-limited read
URLs. boto3 is blocking, so every call runs in a worker thread and is a
suspension point for the event loop.

Dependencies: boto3
System role: Object store adapter for document blobs
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from respondo.configs.storage import StorageSettings
from respondo.core.exceptions import StorageError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3ObjectStore:
    """Async facade over a boto3 S3 client scoped to one bucket."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        """
        Initialize S3 client for the document bucket.

        Args:
            bucket: Bucket name for document storage
            region: Bucket region
            endpoint_url: S3-compatible endpoint (None uses AWS)
            client: Pre-built boto3 S3 client (tests inject a stub)
        """
        self._bucket = bucket
        self._s3_client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
        )

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "S3ObjectStore":
        return cls(
            bucket=settings.bucket,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> None:
        """
        Store a blob.

        Args:
            path: Object key
            data: File content
            content_type: MIME type recorded on the object

        Raises:
            StorageError: When the store rejects the upload
        """
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"{__name__}:upload - {type(e).__name__}: {e}",
                extra={"path": path, "size": len(data)},
            )
            raise StorageError(f"Failed to upload object: {e}", operation="upload", path=path) from e

        logger.info(
            f"{__name__}:upload - Object stored",
            extra={"path": path, "size": len(data)},
        )

    async def download(self, path: str) -> bytes:
        """
        Read a blob.

        Args:
            path: Object key

        Returns:
            bytes: Object content

        Raises:
            StorageError: When the object is missing or unreadable
        """
        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object,
                Bucket=self._bucket,
                Key=path,
            )
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise StorageError(
                    f"Object not found: {path}", operation="download", path=path
                ) from e
            raise StorageError(
                f"Failed to download object: {e}", operation="download", path=path
            ) from e
        except BotoCoreError as e:
            raise StorageError(
                f"Failed to download object: {e}", operation="download", path=path
            ) from e

    async def delete(self, paths: Iterable[str]) -> None:
        """
        Remove blobs. Missing keys are not an error.

        Args:
            paths: Object keys to delete

        Raises:
            StorageError: When the store reports a failure
        """
        keys = [{"Key": path} for path in paths]
        if not keys:
            return
        try:
            response = await asyncio.to_thread(
                self._s3_client.delete_objects,
                Bucket=self._bucket,
                Delete={"Objects": keys, "Quiet": True},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete objects: {e}", operation="delete") from e

        errors = response.get("Errors") or []
        if errors:
            raise StorageError(
                "Failed to delete objects",
                operation="delete",
                path=errors[0].get("Key"),
                details={"errors": len(errors)},
            )

    async def create_signed_url(
        self,
        path: str,
        expires_in: int = 3600,
    ) -> tuple[str, datetime]:
        """
        Generate a presigned URL for viewing an object.

        Args:
            path: Object key
            expires_in: URL expiry in seconds (default 1 hour)

        Returns:
            tuple[str, datetime]: (signed_url, expires_at)

        Raises:
            StorageError: If URL generation fails
        """
        try:
            url = await asyncio.to_thread(
                self._s3_client.generate_presigned_url,
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to sign URL: {e}", operation="sign", path=path) from e

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return url, expires_at

    async def exists(self, path: str) -> bool:
        """
        Check if an object exists.

        Args:
            path: Object key to check

        Returns:
            bool: True if the object exists, False otherwise
        """
        try:
            await asyncio.to_thread(self._s3_client.head_object, Bucket=self._bucket, Key=path)
            return True
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise StorageError(f"Failed to stat object: {e}", operation="head", path=path) from e
