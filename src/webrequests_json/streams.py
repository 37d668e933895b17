"""Stream wrappers that make ownership of a borrowed stream explicit."""
from __future__ import annotations

import io
from enum import Enum
from typing import BinaryIO


class Ownership(Enum):
    """Whether closing a wrapper also closes the stream it wraps."""

    NONE = "none"
    OWNS = "owns"


class WrappingStream(io.RawIOBase):
    """Read-only view over another binary stream.

    Readers layered on top (``io.BufferedReader``, ``io.TextIOWrapper``) close
    the stream beneath them when they are closed. Wrapping a borrowed stream
    with ``Ownership.NONE`` lets those readers be released normally while the
    borrowed stream stays open for its owner.
    """

    def __init__(self, stream: BinaryIO, ownership: Ownership = Ownership.NONE) -> None:
        super().__init__()
        self._stream = stream
        self._ownership = ownership
        # bytes returned by the wrapped stream beyond what the last caller asked for
        self._pending = b""

    @property
    def wrapped(self) -> BinaryIO:
        return self._stream

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    def readable(self) -> bool:
        self._check_open()
        return self._stream.readable()

    def readinto(self, buffer) -> int:  # type: ignore[override]
        self._check_open()
        if not self._pending:
            self._pending = self._stream.read(len(buffer)) or b""
        chunk = self._pending[: len(buffer)]
        self._pending = self._pending[len(chunk) :]
        buffer[: len(chunk)] = chunk
        return len(chunk)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._ownership is Ownership.OWNS:
                self._stream.close()
        finally:
            super().close()

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed stream.")


def closed_stream() -> BinaryIO:
    """Return an already-closed stream standing in for a body that can no longer be read."""
    stream = io.BytesIO()
    stream.close()
    return stream


def is_readable(stream: BinaryIO) -> bool:
    """Return True if ``stream`` is open and reports itself readable."""
    if stream.closed:
        return False
    return stream.readable()
