"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from blobstore.infra.storage.client import NoSuchBlobError, Readable, StorageError

if TYPE_CHECKING:
    from blobstore.common.config import Settings

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def is_not_found(exc: ClientError) -> bool:
    """Tell whether a botocore error is the backend's "object not found"."""
    response = exc.response or {}
    code = str(response.get("Error", {}).get("Code", ""))
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return status == 404 or code in NOT_FOUND_CODES


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    The underlying boto3 client is safe to share between threads, so one
    instance serves every concurrent upload, download and delete.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Settings containing S3 configuration.

        Raises:
            StorageError: If boto3 rejects the endpoint or credentials.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        addressing_style = (settings.S3_ADDRESSING_STYLE or "path").strip().lower()
        config = Config(s3={"addressing_style": addressing_style})

        try:
            return boto3.client(
                "s3",
                endpoint_url=settings.endpoint_url,
                region_name=settings.S3_REGION,
                aws_access_key_id=settings.S3_ACCESS_KEY,
                aws_secret_access_key=settings.S3_SECRET_KEY,
                use_ssl=bool(settings.S3_SECURE),
                config=config,
            )
        except ValueError as exc:
            raise StorageError(f"Failed to create S3 client: {exc}") from exc

    def put_object(self, *, bucket: str, object_key: str, body: Readable) -> None:
        """Stream ``body`` into one object; its length is discovered at EOF."""
        self._client.upload_fileobj(body, bucket, object_key)

    def get_object(self, *, bucket: str, object_key: str) -> BinaryIO:
        """Return the object's lazy streaming body."""
        try:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
        except ClientError as exc:
            if is_not_found(exc):
                raise NoSuchBlobError(object_key) from exc
            raise
        return response["Body"]

    def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object from storage."""
        self._client.delete_object(Bucket=bucket, Key=object_key)
