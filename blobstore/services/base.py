from __future__ import annotations

import logging

from blobstore.infra.storage.client import StorageClient


class ServiceError(Exception):
    """Base class for blob store service level exceptions."""


class ConfigurationError(ServiceError):
    """Raised when the store cannot be built from the given settings."""


class HandleMisuseError(ServiceError):
    """Raised when a blob handle is used outside its lifecycle.

    Committing twice, or writing after commit or close, is a caller bug;
    it is reported as an exception rather than ignored.
    """


class BaseService:
    """Holds the storage client and target shared by blob store operations."""

    def __init__(
        self,
        storage_client: StorageClient,
        *,
        bucket: str,
        object_prefix: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._storage = storage_client
        self._bucket = bucket
        self._prefix = object_prefix
        self._logger = logger or logging.getLogger(type(self).__module__)

    @property
    def storage(self) -> StorageClient:
        return self._storage

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def object_prefix(self) -> str:
        return self._prefix

    def _object_key(self, key: str) -> str:
        return f"{self._prefix}{key}"
