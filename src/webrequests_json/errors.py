"""Uniform error type for failures while reading JSON from web responses."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .http import AsyncWebResponse, ResponseContent, WebResponse

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_LENGTH = 1000

# Failures raised while reading a preview; the error is still built without one.
_PREVIEW_ERRORS = (OSError, RuntimeError, ValueError)


class DecodeErrorKind(str, Enum):
    """Classified reason a response could not be decoded."""

    NOT_JSON = "not_json"
    STREAM_UNREADABLE = "stream_unreadable"
    SYNTAX = "syntax"
    SCHEMA = "schema"


class WebServiceError(RuntimeError):
    """Raised when a web response cannot be turned into the requested value."""

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[DecodeErrorKind] = None,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        content_type: Optional[str] = None,
        content_preview: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.url = url
        self.content_type = content_type
        self.content_preview = content_preview

    def __str__(self) -> str:
        context = []
        if self.status_code is not None:
            context.append(f"status {self.status_code}")
        if self.url:
            context.append(self.url)
        text = self.message
        if context:
            text = f"{text} ({', '.join(context)})"
        if self.content_preview:
            text = f"{text}: {self.content_preview}"
        return text


def create_web_service_error(
    response: ResponseContent,
    message: str,
    cause: Optional[BaseException] = None,
    *,
    kind: Optional[DecodeErrorKind] = None,
) -> WebServiceError:
    """Build a WebServiceError from response metadata without reading the body."""

    error = WebServiceError(
        message,
        kind=kind,
        status_code=response.status_code,
        url=response.url,
        content_type=response.content_type,
    )
    if cause is not None:
        error.__cause__ = cause
    return error


def create_web_service_error_with_content_preview(
    response: WebResponse,
    message: str,
    *,
    kind: Optional[DecodeErrorKind] = None,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> WebServiceError:
    """Build a WebServiceError that carries a short preview of the response body."""

    error = create_web_service_error(response, message, kind=kind)
    try:
        error.content_preview = _single_line(response.read_preview(preview_length))
    except _PREVIEW_ERRORS as exc:
        logger.debug("Unable to read content preview from %s: %s", response.url, exc)
    return error


async def create_web_service_error_with_content_preview_async(
    response: AsyncWebResponse,
    message: str,
    *,
    kind: Optional[DecodeErrorKind] = None,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> WebServiceError:
    error = create_web_service_error(response, message, kind=kind)
    try:
        error.content_preview = _single_line(await response.aread_preview(preview_length))
    except _PREVIEW_ERRORS as exc:
        logger.debug("Unable to read content preview from %s: %s", response.url, exc)
    return error


def _single_line(text: str) -> Optional[str]:
    preview = text.replace("\r", " ").replace("\n", " ").strip()
    return preview or None
