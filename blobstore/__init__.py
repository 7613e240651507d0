"""Streaming key-addressed blob storage on S3-compatible object stores."""

from blobstore.common.config import Settings, get_settings
from blobstore.infra.storage.client import (
    NoSuchBlobError,
    StorageError,
    UploadFailedError,
)
from blobstore.services import (
    BlobHandle,
    BlobStore,
    ConfigurationError,
    HandleMisuseError,
    HandleState,
    ServiceError,
)

__all__ = [
    "BlobHandle",
    "BlobStore",
    "ConfigurationError",
    "HandleMisuseError",
    "HandleState",
    "NoSuchBlobError",
    "ServiceError",
    "Settings",
    "StorageError",
    "UploadFailedError",
    "get_settings",
]
