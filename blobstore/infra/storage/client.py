"""Storage client protocol and error types.

This module defines the abstract interface the blob store uses to talk to
an object storage backend: streaming upload, lazy download and delete,
all addressed by bucket and object key.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class NoSuchBlobError(StorageError):
    """Raised when the requested object does not exist in the backend."""

    def __init__(self, object_key: str) -> None:
        super().__init__(f"No such blob: {object_key}")
        self.object_key = object_key


class UploadFailedError(StorageError):
    """Raised at commit time when the streaming upload of a blob failed."""

    def __init__(self, object_key: str, cause: BaseException) -> None:
        super().__init__(f"Upload of blob {object_key!r} failed: {cause}")
        self.object_key = object_key
        self.cause = cause


class Readable(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Backend errors other than a missing object propagate unchanged;
    implementations must not retry.
    """

    def put_object(self, *, bucket: str, object_key: str, body: Readable) -> None:
        """Upload one object, streaming from ``body`` until it reports EOF.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            body: File-like source of unknown length.

        Raises:
            Whatever the backend raises; a truncated or aborted ``body``
            must never produce a stored object.
        """
        ...

    def get_object(self, *, bucket: str, object_key: str) -> BinaryIO:
        """Open an object for streaming reads.

        Args:
            bucket: Source bucket name.
            object_key: Object key (path) in the bucket.

        Returns:
            File-like object producing the content on demand.

        Raises:
            NoSuchBlobError: If the object does not exist.
        """
        ...

    def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object from storage.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) to delete.
        """
        ...
