from .base import BaseService, ConfigurationError, HandleMisuseError, ServiceError
from .blob_handle import AbandonedUploadError, BlobHandle, HandleState
from .blob_store import BlobStore

__all__ = [
    "AbandonedUploadError",
    "BaseService",
    "BlobHandle",
    "BlobStore",
    "ConfigurationError",
    "HandleMisuseError",
    "HandleState",
    "ServiceError",
]
