"""Write handle for a single streaming blob upload.

A handle pairs the write end of a pipe with a background thread that runs
one ``put_object`` call over the read end. Bytes written to the handle are
streamed to the backend as they are produced; ``commit`` closes the stream
and waits for the upload's outcome.
"""

from __future__ import annotations

import logging
import queue
import threading
import weakref
from enum import Enum

from blobstore.infra.storage.client import StorageClient, StorageError, UploadFailedError
from blobstore.infra.storage.pipe import PipeReader, pipe
from blobstore.services.base import HandleMisuseError

logger = logging.getLogger(__name__)


class HandleState(str, Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ABANDONED = "abandoned"


class AbandonedUploadError(StorageError):
    """Ends the upload stream of a handle closed without commit."""

    def __init__(self, key: str) -> None:
        super().__init__(f"blob handle for {key!r} closed without commit")
        self.key = key


def _run_upload(
    storage: StorageClient,
    *,
    bucket: str,
    object_key: str,
    key: str,
    reader: PipeReader,
    outcome: "queue.Queue[BaseException | None]",
) -> None:
    error: BaseException | None = None
    try:
        storage.put_object(bucket=bucket, object_key=object_key, body=reader)
    except BaseException as exc:  # handed to commit() through the outcome queue
        error = exc
        broken = BrokenPipeError(f"upload of blob {key!r} stopped: {exc}")
        broken.__cause__ = exc
        reader.close_with_error(broken)
        if isinstance(exc, AbandonedUploadError):
            logger.debug(
                "blob_handle_abandoned key=%s object_key=%s",
                key,
                object_key,
                extra={"extra": {"key": key, "object_key": object_key}},
            )
        else:
            logger.warning(
                "blob_upload_failed key=%s object_key=%s error=%s",
                key,
                object_key,
                exc,
                extra={
                    "extra": {
                        "key": key,
                        "object_key": object_key,
                        "error": str(exc),
                    }
                },
            )
    else:
        reader.close()
    finally:
        outcome.put_nowait(error)


class BlobHandle:
    """Caller-facing side of one create-and-commit operation.

    Lifecycle: ``OPEN`` accepts writes; ``commit()`` moves to ``COMMITTED``
    and ``close()`` before commit moves to ``ABANDONED``. A handle belongs
    to the thread that created it and must not be shared.

    Dropping an uncommitted handle without closing it has the same effect
    as ``close()`` once it is garbage collected.
    """

    def __init__(
        self,
        storage: StorageClient,
        *,
        bucket: str,
        object_key: str,
        key: str,
    ) -> None:
        self._key = key
        self._object_key = object_key
        self._state = HandleState.OPEN
        reader, self._writer = pipe()
        self._outcome: "queue.Queue[BaseException | None]" = queue.Queue(maxsize=1)
        self._abandon = weakref.finalize(
            self, self._writer.close_with_error, AbandonedUploadError(key)
        )
        self._thread = threading.Thread(
            target=_run_upload,
            args=(storage,),
            kwargs={
                "bucket": bucket,
                "object_key": object_key,
                "key": key,
                "reader": reader,
                "outcome": self._outcome,
            },
            name=f"blob-upload:{object_key}",
            daemon=True,
        )
        self._thread.start()

    @property
    def key(self) -> str:
        return self._key

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def committed(self) -> bool:
        return self._state is HandleState.COMMITTED

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Stream ``data`` to the upload; blocks until the upload consumed it.

        Raises:
            HandleMisuseError: If the handle was committed or closed.
            BrokenPipeError: If the upload has already stopped.
        """
        if self._state is not HandleState.OPEN:
            raise HandleMisuseError(
                f"write on {self._state.value} blob handle for {self._key!r}"
            )
        return self._writer.write(data)

    def commit(self) -> None:
        """Finish the blob and wait for the upload to complete.

        Can be called only once.

        Raises:
            UploadFailedError: If the backend rejected or aborted the upload.
            HandleMisuseError: If the handle was already committed or closed.
        """
        if self._state is HandleState.COMMITTED:
            raise HandleMisuseError(
                f"commit called twice for blob handle {self._key!r}"
            )
        if self._state is HandleState.ABANDONED:
            raise HandleMisuseError(
                f"commit called on closed blob handle {self._key!r}"
            )
        self._abandon.detach()
        self._state = HandleState.COMMITTED
        self._writer.close()
        error = self._outcome.get()
        self._thread.join()
        if error is not None:
            raise UploadFailedError(self._key, error) from error

    def close(self) -> None:
        """Release the handle; aborts the upload unless already committed."""
        if self._state is not HandleState.OPEN:
            return
        self._state = HandleState.ABANDONED
        self._abandon()

    def __enter__(self) -> "BlobHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<BlobHandle key={self._key!r} state={self._state.value}>"
