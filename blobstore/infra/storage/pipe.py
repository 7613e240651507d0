"""Synchronous in-memory pipe used to stream uploads.

``pipe()`` returns a connected reader/writer pair. A write blocks until the
reader has taken every byte of it, so the producer can never run ahead of
the consumer and nothing beyond the bytes of the current write is held in
memory. Either end may be closed with an error: the other side then sees
that error instead of a clean EOF (reader) or a broken pipe (writer).

The pair is meant for exactly one producer thread and one consumer thread.
"""

from __future__ import annotations

import threading


class _PipeState:
    def __init__(self) -> None:
        self.cond = threading.Condition()
        self.pending = memoryview(b"")
        self.writer_closed = False
        self.writer_error: BaseException | None = None
        self.reader_closed = False
        self.reader_error: BaseException | None = None


class PipeReader:
    """Read end of a pipe; a non-seekable, read-only file object."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.reader_closed

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def seekable(self) -> bool:
        return False

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes, blocking until they arrive.

        Like a buffered file, a result shorter than ``size`` means the
        writer closed the pipe; ``b""`` is EOF. A negative or ``None`` size
        reads until EOF.

        Raises:
            BaseException: The error the writer closed the pipe with.
            ValueError: If this end is already closed.
        """
        if size is None:
            size = -1
        state = self._state
        buf = bytearray()
        with state.cond:
            while size < 0 or len(buf) < size:
                if state.reader_closed:
                    raise ValueError("read from closed pipe")
                if state.writer_error is not None:
                    raise state.writer_error
                if state.pending:
                    take = len(state.pending)
                    if size >= 0:
                        take = min(take, size - len(buf))
                    buf += state.pending[:take]
                    state.pending = state.pending[take:]
                    if not state.pending:
                        state.cond.notify_all()
                    continue
                if state.writer_closed:
                    break
                state.cond.wait()
        return bytes(buf)

    def close(self) -> None:
        self.close_with_error(None)

    def close_with_error(self, error: BaseException | None) -> None:
        """Close the read end; blocked and later writes fail with ``error``.

        With no error, writers get ``BrokenPipeError``. Only the first close
        has an effect.
        """
        state = self._state
        with state.cond:
            if state.reader_closed:
                return
            state.reader_closed = True
            state.reader_error = error
            state.cond.notify_all()

    def __enter__(self) -> "PipeReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PipeWriter:
    """Write end of a pipe."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.writer_closed

    def writable(self) -> bool:
        return True

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Hand ``data`` to the reader and block until all of it is consumed.

        Raises:
            BaseException: The error the reader closed the pipe with.
            BrokenPipeError: If the reader closed the pipe without an error.
            ValueError: If this end is already closed.
        """
        state = self._state
        view = memoryview(data).cast("B")
        with state.cond:
            if state.writer_closed:
                raise ValueError("write to closed pipe")
            self._raise_if_reader_gone()
            if not view:
                return 0
            state.pending = view
            state.cond.notify_all()
            while state.pending:
                if state.reader_closed:
                    state.pending = memoryview(b"")
                    self._raise_if_reader_gone()
                if state.writer_closed:
                    state.pending = memoryview(b"")
                    raise ValueError("pipe closed during write")
                state.cond.wait()
        return len(view)

    def _raise_if_reader_gone(self) -> None:
        state = self._state
        if not state.reader_closed:
            return
        if state.reader_error is not None:
            raise state.reader_error
        raise BrokenPipeError("write to pipe with closed reader")

    def close(self) -> None:
        """Close the write end; the reader sees EOF after the data already written."""
        self.close_with_error(None)

    def close_with_error(self, error: BaseException | None) -> None:
        """Close the write end so that reads fail with ``error`` instead of EOF.

        Only the first close has an effect.
        """
        state = self._state
        with state.cond:
            if state.writer_closed:
                return
            state.writer_closed = True
            state.writer_error = error
            state.cond.notify_all()


def pipe() -> tuple[PipeReader, PipeWriter]:
    """Create a connected ``(reader, writer)`` pair."""
    state = _PipeState()
    return PipeReader(state), PipeWriter(state)
