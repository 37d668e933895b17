"""Read and deserialize JSON from web responses.

The JSON in the response content must be encoded as UTF-8. Every classified
failure surfaces as :class:`~webrequests_json.errors.WebServiceError`; any
other exception raised while deserializing propagates unchanged.

Reading the body consumes it. Decoding the same response twice is only
possible when the response buffered its body (the ``requests`` default).
"""
from __future__ import annotations

import io
import json
import logging
from typing import Any, BinaryIO, Optional, TypeVar, cast

from pydantic import ValidationError

from .errors import (
    DEFAULT_PREVIEW_LENGTH,
    DecodeErrorKind,
    WebServiceError,
    create_web_service_error,
    create_web_service_error_with_content_preview,
    create_web_service_error_with_content_preview_async,
)
from .http import AsyncWebResponse, ResponseContent, WebResponse, has_json
from .models import DecodeResult
from .serialization import JsonSettings, describe_type, from_json_text_reader
from .streams import Ownership, WrappingStream, is_readable

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_JSON_MESSAGE = "The response does not have JSON content."
STREAM_NOT_READABLE_MESSAGE = "Response stream is not readable."


def _open_reader(stream: BinaryIO) -> io.TextIOWrapper:
    # closing the reader releases the wrapper but never the borrowed stream
    wrapping = WrappingStream(stream, Ownership.NONE)
    return io.TextIOWrapper(io.BufferedReader(wrapping), encoding="utf-8", newline="")


def _ensure_readable(response: ResponseContent, stream: BinaryIO) -> None:
    # observed when the request is cancelled (e.g. by a timeout) before the body is read
    if not is_readable(stream):
        logger.warning("Response stream from %s is not readable", response.url)
        raise create_web_service_error(
            response,
            STREAM_NOT_READABLE_MESSAGE,
            kind=DecodeErrorKind.STREAM_UNREADABLE,
        )


def _read_text(response: ResponseContent, stream: BinaryIO) -> str:
    _ensure_readable(response, stream)
    with _open_reader(stream) as reader:
        return reader.read()


def _parse_stream(
    response: ResponseContent,
    stream: BinaryIO,
    target_type: Any,
    settings: Optional[JsonSettings],
) -> Any:
    _ensure_readable(response, stream)
    try:
        with _open_reader(stream) as reader:
            value = from_json_text_reader(reader, target_type, settings)
    except json.JSONDecodeError as exc:
        logger.warning("Response from %s is not valid JSON: %s", response.url, exc)
        raise create_web_service_error(
            response,
            f"Response is not valid JSON: {exc}",
            exc,
            kind=DecodeErrorKind.SYNTAX,
        ) from exc
    except ValidationError as exc:
        type_name = describe_type(target_type)
        logger.warning("Response from %s could not be deserialized to %s", response.url, type_name)
        raise create_web_service_error(
            response,
            f"Response JSON could not be deserialized to {type_name}: {exc}",
            exc,
            kind=DecodeErrorKind.SCHEMA,
        ) from exc

    logger.debug("Decoded %s from %s", describe_type(target_type), response.url)
    return value


def get_json(response: WebResponse, *, preview_length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Return the unverified JSON text of the response.

    Raises:
        WebServiceError: The response does not declare non-empty JSON content,
            or its stream is not readable.
    """

    if not has_json(response):
        raise create_web_service_error_with_content_preview(
            response,
            NOT_JSON_MESSAGE,
            kind=DecodeErrorKind.NOT_JSON,
            preview_length=preview_length,
        )
    return _read_text(response, response.open_stream())


async def get_json_async(response: AsyncWebResponse, *, preview_length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    if not has_json(response):
        raise await create_web_service_error_with_content_preview_async(
            response,
            NOT_JSON_MESSAGE,
            kind=DecodeErrorKind.NOT_JSON,
            preview_length=preview_length,
        )
    return _read_text(response, await response.aopen_stream())


def get_json_as(response: WebResponse, target_type: Any, settings: Optional[JsonSettings] = None) -> Any:
    """Parse the response JSON into a value of ``target_type``.

    Use ``typing.Any`` as the target type to parse arbitrary JSON. A JSON
    ``null`` is rejected unless ``target_type`` admits ``None``.

    Callers are expected to check :func:`has_json` first.

    Raises:
        WebServiceError: The stream is not readable, the text is not valid
            JSON, or the JSON cannot be deserialized into ``target_type``.
    """

    return _parse_stream(response, response.open_stream(), target_type, settings)


async def get_json_as_async(
    response: AsyncWebResponse,
    target_type: Any,
    settings: Optional[JsonSettings] = None,
) -> Any:
    return _parse_stream(response, await response.aopen_stream(), target_type, settings)


def get_json_as_type(response: WebResponse, target_type: type[T], settings: Optional[JsonSettings] = None) -> T:
    """Typed form of :func:`get_json_as`."""
    return cast(T, get_json_as(response, target_type, settings))


async def get_json_as_type_async(
    response: AsyncWebResponse,
    target_type: type[T],
    settings: Optional[JsonSettings] = None,
) -> T:
    return cast(T, await get_json_as_async(response, target_type, settings))


def try_get_json_as(
    response: WebResponse,
    target_type: Any,
    settings: Optional[JsonSettings] = None,
    *,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> DecodeResult[Any]:
    """Classify and decode the response, returning failures instead of raising them.

    Only WebServiceError is captured; other exceptions still propagate.
    """

    if not has_json(response):
        return DecodeResult.failure(
            create_web_service_error_with_content_preview(
                response,
                NOT_JSON_MESSAGE,
                kind=DecodeErrorKind.NOT_JSON,
                preview_length=preview_length,
            )
        )
    try:
        return DecodeResult.success(get_json_as(response, target_type, settings))
    except WebServiceError as exc:
        return DecodeResult.failure(exc)


async def try_get_json_as_async(
    response: AsyncWebResponse,
    target_type: Any,
    settings: Optional[JsonSettings] = None,
    *,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> DecodeResult[Any]:
    if not has_json(response):
        return DecodeResult.failure(
            await create_web_service_error_with_content_preview_async(
                response,
                NOT_JSON_MESSAGE,
                kind=DecodeErrorKind.NOT_JSON,
                preview_length=preview_length,
            )
        )
    try:
        return DecodeResult.success(await get_json_as_async(response, target_type, settings))
    except WebServiceError as exc:
        return DecodeResult.failure(exc)
