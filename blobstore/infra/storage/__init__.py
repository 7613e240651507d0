"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for S3, MinIO, and other S3-compatible services, plus the
in-memory pipe used to stream uploads into them.
"""

from .client import (
    NoSuchBlobError,
    StorageClient,
    StorageError,
    UploadFailedError,
)
from .pipe import PipeReader, PipeWriter, pipe

__all__ = [
    "NoSuchBlobError",
    "PipeReader",
    "PipeWriter",
    "StorageClient",
    "StorageError",
    "UploadFailedError",
    "pipe",
]
