from __future__ import annotations

import io

import pytest

from webrequests_json.streams import Ownership, WrappingStream, closed_stream, is_readable


def test_closing_reader_does_not_close_borrowed_stream() -> None:
    inner = io.BytesIO("héllo".encode("utf-8"))

    with io.TextIOWrapper(io.BufferedReader(WrappingStream(inner)), encoding="utf-8") as reader:
        assert reader.read() == "héllo"

    assert not inner.closed


def test_owning_wrapper_closes_inner_stream() -> None:
    inner = io.BytesIO(b"data")
    wrapper = WrappingStream(inner, Ownership.OWNS)

    wrapper.close()

    assert wrapper.closed
    assert inner.closed


def test_wrapper_reads_in_chunks() -> None:
    wrapper = WrappingStream(io.BytesIO(b"abcdef"))

    assert wrapper.read(4) == b"abcd"
    assert wrapper.read(4) == b"ef"
    assert wrapper.read(4) == b""


def test_closed_wrapper_rejects_reads() -> None:
    wrapper = WrappingStream(io.BytesIO(b"abc"))
    wrapper.close()

    with pytest.raises(ValueError):
        wrapper.read(1)


def test_is_readable() -> None:
    assert is_readable(io.BytesIO(b"{}"))
    assert not is_readable(closed_stream())


class _OversizedReads(io.BytesIO):
    """Ignores the requested size, like some socket-backed readers."""

    def read(self, size: int = -1) -> bytes:
        return super().read(-1)


def test_wrapper_keeps_bytes_beyond_requested_size() -> None:
    wrapper = WrappingStream(_OversizedReads(b"abcdef"))

    assert wrapper.read(2) == b"ab"
    assert wrapper.read(2) == b"cd"
    assert wrapper.read(4) == b"ef"
    assert wrapper.read(4) == b""


def test_buffered_text_reader_over_oversized_reads() -> None:
    data = '{"name": "héllo"}' * 2000
    inner = _OversizedReads(data.encode("utf-8"))

    with io.TextIOWrapper(io.BufferedReader(WrappingStream(inner), buffer_size=16), encoding="utf-8") as reader:
        assert reader.read() == data
