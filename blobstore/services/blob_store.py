"""Key-addressed blob store on top of an S3-compatible backend.

The store prefixes every caller key with its configured object prefix and
exposes three operations: ``create`` (streaming write, then commit),
``open`` (lazy read) and ``delete_many`` (best-effort batch delete).
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterable

from blobstore.common.config import Settings, get_settings
from blobstore.infra.storage.client import StorageClient, StorageError
from blobstore.infra.storage.s3_client import S3StorageClient
from blobstore.services.base import BaseService, ConfigurationError
from blobstore.services.blob_handle import BlobHandle

logger = logging.getLogger(__name__)

STORE_TYPE = "storage.blob.s3"


class BlobStore(BaseService):
    """Blob storage backed by one bucket of an object storage service.

    A store is immutable after construction and safe to share between
    threads; each ``BlobHandle`` it creates is owned by a single caller.
    """

    def __init__(
        self,
        storage_client: StorageClient,
        *,
        bucket: str,
        object_prefix: str = "",
        instance_name: str = "default",
    ) -> None:
        if not bucket:
            raise ConfigurationError("bucket is required")
        super().__init__(
            storage_client, bucket=bucket, object_prefix=object_prefix, logger=logger
        )
        self._instance_name = instance_name

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        instance_name: str = "default",
        storage_client: StorageClient | None = None,
    ) -> "BlobStore":
        """Build a store, failing fast on incomplete configuration.

        Raises:
            ConfigurationError: If a required setting is missing or the
                backend client cannot be created.
        """
        settings = settings or get_settings()
        missing = settings.missing_required()
        if missing:
            raise ConfigurationError(
                f"{STORE_TYPE}: missing required settings: {', '.join(missing)}"
            )
        if storage_client is None:
            try:
                storage_client = S3StorageClient(settings=settings)
            except StorageError as exc:
                raise ConfigurationError(f"{STORE_TYPE}: {exc}") from exc

        store = cls(
            storage_client,
            bucket=settings.S3_BUCKET,
            object_prefix=settings.S3_OBJECT_PREFIX,
            instance_name=instance_name,
        )
        logger.info(
            "blob_store_initialized instance=%s endpoint=%s bucket=%s prefix=%s",
            instance_name,
            settings.endpoint_url,
            settings.S3_BUCKET,
            settings.S3_OBJECT_PREFIX,
            extra={
                "extra": {
                    "instance": instance_name,
                    "endpoint": settings.endpoint_url,
                    "bucket": settings.S3_BUCKET,
                    "prefix": settings.S3_OBJECT_PREFIX,
                }
            },
        )
        return store

    @property
    def name(self) -> str:
        return STORE_TYPE

    @property
    def instance_name(self) -> str:
        return self._instance_name

    def create(self, key: str) -> BlobHandle:
        """Start a streaming upload for ``key``.

        The upload runs in the background; backend failures surface from
        ``BlobHandle.commit()``, never from this call.
        """
        return BlobHandle(
            self._storage,
            bucket=self._bucket,
            object_key=self._object_key(key),
            key=key,
        )

    def open(self, key: str) -> BinaryIO:
        """Open ``key`` for reading; content is fetched as it is read.

        Raises:
            NoSuchBlobError: If no blob is stored under ``key``.
        """
        return self._storage.get_object(
            bucket=self._bucket, object_key=self._object_key(key)
        )

    def delete_many(self, keys: Iterable[str]) -> None:
        """Delete every key, continuing past failures.

        Each failure is logged as it happens; once all keys were attempted
        the last failure is raised. Earlier failures are visible only in
        the log.
        """
        last_error: Exception | None = None
        for key in keys:
            object_key = self._object_key(key)
            try:
                self._storage.delete_object(bucket=self._bucket, object_key=object_key)
            except Exception as exc:
                last_error = exc
                self._logger.error(
                    "blob_delete_failed instance=%s object_key=%s error=%s",
                    self._instance_name,
                    object_key,
                    exc,
                    extra={
                        "extra": {
                            "instance": self._instance_name,
                            "object_key": object_key,
                            "error": str(exc),
                        }
                    },
                )
        if last_error is not None:
            raise last_error
