"""Tests for BlobHandle."""

from __future__ import annotations

import gc
import logging

import pytest

from blobstore.infra.storage.client import UploadFailedError
from blobstore.services.base import HandleMisuseError
from blobstore.services.blob_handle import AbandonedUploadError, BlobHandle, HandleState

TIMEOUT = 5


def _handle(storage, key="report.csv") -> BlobHandle:
    return BlobHandle(storage, bucket="test-bucket", object_key=f"p/{key}", key=key)


class TestCommit:
    @pytest.mark.parametrize(
        "chunks",
        [
            [],
            [b""],
            [b"single write"],
            [b"a", b"bc", b"", b"def"],
            [bytes([i % 256]) * 1000 for i in range(20)],
        ],
    )
    def test_committed_bytes_are_stored(self, mock_storage, chunks):
        handle = _handle(mock_storage)

        for chunk in chunks:
            assert handle.write(chunk) == len(chunk)
        handle.commit()

        assert handle.committed
        assert handle.state is HandleState.COMMITTED
        assert mock_storage.objects["test-bucket/p/report.csv"] == b"".join(chunks)

    def test_commit_twice_is_rejected(self, mock_storage):
        handle = _handle(mock_storage)
        handle.write(b"data")
        handle.commit()

        with pytest.raises(HandleMisuseError, match="commit called twice"):
            handle.commit()

    def test_write_after_commit_is_rejected(self, mock_storage):
        handle = _handle(mock_storage)
        handle.commit()

        with pytest.raises(HandleMisuseError, match="committed"):
            handle.write(b"late")

    def test_upload_failure_surfaces_at_commit(self, mock_storage):
        cause = RuntimeError("backend exploded")
        mock_storage.put_error = cause
        handle = _handle(mock_storage)
        handle.write(b"data")

        with pytest.raises(UploadFailedError, match="report.csv") as exc_info:
            handle.commit()

        assert exc_info.value.object_key == "report.csv"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert "test-bucket/p/report.csv" not in mock_storage.objects

    def test_upload_failure_is_logged(self, mock_storage, caplog):
        mock_storage.put_error = RuntimeError("backend exploded")
        handle = _handle(mock_storage)

        with caplog.at_level(logging.WARNING, logger="blobstore.services.blob_handle"):
            with pytest.raises(UploadFailedError):
                handle.commit()

        assert any("blob_upload_failed" in r.getMessage() for r in caplog.records)

    def test_write_after_backend_failure_breaks_pipe(self, mock_storage):
        cause = PermissionError("access denied")
        mock_storage.reject_put = cause
        handle = _handle(mock_storage)

        with pytest.raises(BrokenPipeError) as exc_info:
            handle.write(b"data")

        assert exc_info.value.__cause__ is cause
        with pytest.raises(UploadFailedError) as commit_info:
            handle.commit()
        assert commit_info.value.cause is cause


class TestClose:
    def test_close_before_commit_aborts_upload(self, mock_storage):
        handle = _handle(mock_storage)
        handle.write(b"partial")
        thread = handle._thread

        handle.close()

        thread.join(TIMEOUT)
        assert not thread.is_alive()
        assert handle.state is HandleState.ABANDONED
        assert mock_storage.objects == {}
        outcome = handle._outcome.get_nowait()
        assert isinstance(outcome, AbandonedUploadError)
        assert "closed without commit" in str(outcome)

    def test_close_after_zero_writes_stores_nothing(self, mock_storage):
        handle = _handle(mock_storage)
        thread = handle._thread

        handle.close()

        thread.join(TIMEOUT)
        assert not thread.is_alive()
        assert mock_storage.objects == {}

    def test_close_after_commit_is_noop(self, mock_storage):
        handle = _handle(mock_storage)
        handle.write(b"data")
        handle.commit()

        handle.close()

        assert handle.state is HandleState.COMMITTED
        assert mock_storage.objects["test-bucket/p/report.csv"] == b"data"

    def test_close_twice_is_noop(self, mock_storage):
        handle = _handle(mock_storage)
        handle.close()
        handle.close()

        assert handle.state is HandleState.ABANDONED

    def test_commit_after_close_is_rejected(self, mock_storage):
        handle = _handle(mock_storage)
        handle.close()

        with pytest.raises(HandleMisuseError, match="closed blob handle"):
            handle.commit()

    def test_write_after_close_is_rejected(self, mock_storage):
        handle = _handle(mock_storage)
        handle.close()

        with pytest.raises(HandleMisuseError, match="abandoned"):
            handle.write(b"data")

    def test_context_manager_without_commit_aborts(self, mock_storage):
        with _handle(mock_storage) as handle:
            handle.write(b"data")
            thread = handle._thread

        thread.join(TIMEOUT)
        assert not thread.is_alive()
        assert handle.state is HandleState.ABANDONED
        assert mock_storage.objects == {}

    def test_context_manager_with_commit_keeps_object(self, mock_storage):
        with _handle(mock_storage) as handle:
            handle.write(b"data")
            handle.commit()

        assert mock_storage.objects["test-bucket/p/report.csv"] == b"data"

    def test_dropped_handle_releases_upload_thread(self, mock_storage):
        handle = _handle(mock_storage)
        handle.write(b"data")
        thread = handle._thread

        del handle
        gc.collect()

        thread.join(TIMEOUT)
        assert not thread.is_alive()
        assert mock_storage.objects == {}
