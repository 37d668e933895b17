from __future__ import annotations

import asyncio

from webrequests_json.errors import (
    DecodeErrorKind,
    WebServiceError,
    create_web_service_error,
    create_web_service_error_with_content_preview,
    create_web_service_error_with_content_preview_async,
)


class _Response:
    def __init__(self, preview: str = "", fail_preview: bool = False) -> None:
        self.status_code = 502
        self.url = "https://example.com/api"
        self.content_type = "text/html"
        self.content_length = None
        self.has_content = True
        self._preview = preview
        self._fail_preview = fail_preview
        self.preview_limits: list[int] = []

    def read_preview(self, limit: int) -> str:
        self.preview_limits.append(limit)
        if self._fail_preview:
            raise RuntimeError("The content for this response was already consumed")
        return self._preview[:limit]

    async def aread_preview(self, limit: int) -> str:
        return self.read_preview(limit)


def test_web_service_error_str_contains_context() -> None:
    error = WebServiceError(
        "Response is not valid JSON: Expecting value",
        status_code=500,
        url="https://example.com/api",
        content_preview="Internal Server Error",
    )

    message = str(error)

    assert message.startswith("Response is not valid JSON: Expecting value")
    assert "status 500" in message
    assert "https://example.com/api" in message
    assert message.endswith(": Internal Server Error")


def test_web_service_error_str_without_context_is_message() -> None:
    assert str(WebServiceError("Response stream is not readable.")) == "Response stream is not readable."


def test_create_web_service_error_copies_response_metadata() -> None:
    response = _Response("ignored")
    cause = ValueError("bad")

    error = create_web_service_error(response, "failed", cause, kind=DecodeErrorKind.SYNTAX)

    assert error.status_code == 502
    assert error.url == "https://example.com/api"
    assert error.content_type == "text/html"
    assert error.kind is DecodeErrorKind.SYNTAX
    assert error.__cause__ is cause
    assert error.content_preview is None
    assert response.preview_limits == []


def test_preview_is_collapsed_to_single_line() -> None:
    response = _Response("<html>\r\n<body>Bad Gateway</body>\n</html>\n")

    error = create_web_service_error_with_content_preview(response, "no json", preview_length=40)

    assert error.content_preview == "<html>  <body>Bad Gateway</body> </html>"
    assert response.preview_limits == [40]


def test_preview_failure_still_builds_error() -> None:
    response = _Response(fail_preview=True)

    error = create_web_service_error_with_content_preview(response, "no json", kind=DecodeErrorKind.NOT_JSON)

    assert error.kind is DecodeErrorKind.NOT_JSON
    assert error.content_preview is None


def test_async_preview_matches_sync_preview() -> None:
    response = _Response("upstream timeout")

    error = asyncio.run(create_web_service_error_with_content_preview_async(response, "no json"))

    assert error.content_preview == "upstream timeout"
