"""HTTP response capabilities and JSON content classification.

The decoding helpers never depend on a concrete HTTP client. They accept any
object exposing the small capability set described by :class:`WebResponse`
(or :class:`AsyncWebResponse`), and this module ships adapters for the two
clients used in practice: ``requests`` and ``httpx``.
"""
from __future__ import annotations

import io
from typing import BinaryIO, Optional, Protocol, runtime_checkable

import httpx
import requests

from .streams import closed_stream

JSON_CONTENT_TYPE = "application/json"

_TOKEN_TERMINATORS = frozenset("; \t")

# upper bound on UTF-8 bytes per character when bounding preview reads
_MAX_BYTES_PER_CHAR = 4


@runtime_checkable
class ResponseContent(Protocol):
    """Headers and identity of a completed response."""

    @property
    def status_code(self) -> Optional[int]: ...

    @property
    def url(self) -> Optional[str]: ...

    @property
    def content_type(self) -> Optional[str]: ...

    @property
    def content_length(self) -> Optional[int]: ...

    @property
    def has_content(self) -> bool: ...


@runtime_checkable
class WebResponse(ResponseContent, Protocol):
    """A response whose body can be opened synchronously."""

    def open_stream(self) -> BinaryIO: ...

    def read_preview(self, limit: int) -> str: ...


@runtime_checkable
class AsyncWebResponse(ResponseContent, Protocol):
    """A response whose body is acquired with awaitable I/O."""

    async def aopen_stream(self) -> BinaryIO: ...

    async def aread_preview(self, limit: int) -> str: ...


def has_json(response: ResponseContent) -> bool:
    """Return True if the response declares non-empty ``application/json`` content.

    A missing content length is allowed; a length of exactly zero is not. The
    content type must start with the media type token after trimming
    whitespace, compared case-sensitively, and the token must end there or be
    followed by parameters (``application/json; charset=utf-8``).
    """

    if not response.has_content:
        return False

    has_length = response.content_length != 0
    content_type = response.content_type
    has_type = (
        content_type is not None
        and len(content_type) >= len(JSON_CONTENT_TYPE)
        and _starts_with_token(content_type.strip(), JSON_CONTENT_TYPE)
    )
    return has_length and has_type


def _starts_with_token(value: str, token: str) -> bool:
    if not value.startswith(token):
        return False
    rest = value[len(token):]
    return not rest or rest[0] in _TOKEN_TERMINATORS


def _decode_preview(data: bytes, encoding: Optional[str], limit: int) -> str:
    data = data[: limit * _MAX_BYTES_PER_CHAR]
    try:
        text = data.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        text = data.decode("utf-8", errors="replace")
    return text[:limit]


def _parse_content_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


class RequestsResponse:
    """Expose a ``requests.Response`` through the :class:`WebResponse` capabilities.

    Buffered responses (the ``requests`` default) are opened as an in-memory
    stream. Responses fetched with ``stream=True`` hand out the underlying raw
    stream, so their body can be decoded only once.
    """

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    @property
    def response(self) -> requests.Response:
        return self._response

    @property
    def status_code(self) -> Optional[int]:
        return self._response.status_code

    @property
    def url(self) -> Optional[str]:
        if self._response.url:
            return self._response.url
        request = self._response.request
        return request.url if request is not None else None

    @property
    def content_type(self) -> Optional[str]:
        return self._response.headers.get("Content-Type")

    @property
    def content_length(self) -> Optional[int]:
        declared = _parse_content_length(self._response.headers.get("Content-Length"))
        if declared is not None:
            return declared
        buffered = self._buffered_content()
        return len(buffered) if buffered is not None else None

    @property
    def has_content(self) -> bool:
        return True

    def _buffered_content(self) -> Optional[bytes]:
        # requests keeps ``False`` here until the body has been read
        content = getattr(self._response, "_content", False)
        return content if isinstance(content, bytes) else None

    def _raw_stream(self) -> Optional[BinaryIO]:
        raw = self._response.raw
        if raw is not None and hasattr(raw, "decode_content"):
            # requests leaves transfer decoding to iter_content; raw reads must do it
            raw.decode_content = True
        return raw

    def open_stream(self) -> BinaryIO:
        buffered = self._buffered_content()
        if buffered is not None:
            return io.BytesIO(buffered)
        raw = self._raw_stream()
        return raw if raw is not None else closed_stream()

    def read_preview(self, limit: int) -> str:
        data = self._buffered_content()
        if data is None:
            raw = self._raw_stream()
            data = raw.read(limit * _MAX_BYTES_PER_CHAR) if raw is not None else b""
        return _decode_preview(data, self._response.encoding, limit)


class HttpxResponse:
    """Expose an ``httpx.Response`` through both the sync and async capabilities."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def status_code(self) -> Optional[int]:
        return self._response.status_code

    @property
    def url(self) -> Optional[str]:
        try:
            return str(self._response.url)
        except RuntimeError:
            # httpx raises when the response was built without a request
            return None

    @property
    def content_type(self) -> Optional[str]:
        return self._response.headers.get("Content-Type")

    @property
    def content_length(self) -> Optional[int]:
        declared = _parse_content_length(self._response.headers.get("Content-Length"))
        if declared is not None:
            return declared
        buffered = self._buffered_content()
        return len(buffered) if buffered is not None else None

    @property
    def has_content(self) -> bool:
        return True

    def _buffered_content(self) -> Optional[bytes]:
        try:
            return self._response.content
        except httpx.ResponseNotRead:
            return None

    def open_stream(self) -> BinaryIO:
        try:
            return io.BytesIO(self._response.read())
        except httpx.StreamError:
            return closed_stream()

    async def aopen_stream(self) -> BinaryIO:
        try:
            return io.BytesIO(await self._response.aread())
        except httpx.StreamError:
            return closed_stream()

    def read_preview(self, limit: int) -> str:
        data = self._buffered_content()
        if data is None:
            wanted = limit * _MAX_BYTES_PER_CHAR
            collected = bytearray()
            chunks = self._response.iter_bytes()
            try:
                for chunk in chunks:
                    collected.extend(chunk)
                    if len(collected) >= wanted:
                        break
            finally:
                chunks.close()
            data = bytes(collected)
        return _decode_preview(data, self._response.charset_encoding, limit)

    async def aread_preview(self, limit: int) -> str:
        data = self._buffered_content()
        if data is None:
            wanted = limit * _MAX_BYTES_PER_CHAR
            collected = bytearray()
            chunks = self._response.aiter_bytes()
            try:
                async for chunk in chunks:
                    collected.extend(chunk)
                    if len(collected) >= wanted:
                        break
            finally:
                await chunks.aclose()
            data = bytes(collected)
        return _decode_preview(data, self._response.charset_encoding, limit)
