"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTPResponse objects and serializes them to the exact bytes written
to the socket.

=============================================================================
WIRE FORMAT
=============================================================================

Standard framing (default):

    HTTP/1.1 200 OK\r\n                  ← status line (closed table)
    Content-Type: text/plain\r\n         ← headers, insertion order
    Content-Length: 6\r\n                ← derived, always last
    \r\n                                 ← exactly one blank line
    abc123                               ← body, nothing after it

Legacy framing (extra terminator, for older clients):

    HTTP/1.1 200 OK\r\n
    Content-Type: text/plain\r\n
    Content-Length: 6\r\n
    \r\n                                 ← only when there are headers
    abc123\r\n\r\n                       ← extra terminator after the body

    HTTP/1.1 404 Not Found\r\n\r\n\r\n   ← no headers: no blank line of
                                           its own, then the extra CRLFCRLF

Content-Length is never taken from the caller. It is computed from the body
immediately before serialization and omitted when the body is empty.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .status_codes import HTTPStatus, resolve_status


HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass
class HTTPResponse:
    """
    An outbound response, built by a handler and serialized immediately.

    Attributes:
        status: Status code. Anything outside the closed table is sent
                as 500 Internal Server Error.
        headers: Header name → value, serialized in insertion order.
        body: Body bytes (text is stored UTF-8 encoded).
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        self.status = resolve_status(self.status)
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE

            >>> HTTPResponse(status=404).status_line
            'HTTP/1.1 404 Not Found'
        """
        return f"{HTTP_VERSION} {self.status.value} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header, returning self for chaining."""
        self.headers[name] = value
        return self

    def wire_headers(self) -> Dict[str, str]:
        """
        Headers as they will be serialized.

        Copies the caller's headers, drops any Content-Length the caller
        set, and appends the derived one when the body is non-empty.
        """
        headers = {
            name: value
            for name, value in self.headers.items()
            if name != "Content-Length"
        }
        if self.body:
            headers["Content-Length"] = str(len(self.body))
        return headers

    def to_bytes(self, legacy_framing: bool = False) -> bytes:
        """
        Serialize to wire bytes.

        Args:
            legacy_framing: Use the legacy framing (blank
                            line only when headers exist, CRLFCRLF appended
                            after the body) instead of standard HTTP/1.1.

        Returns:
            The complete response, ready for socket.sendall().
        """
        headers = self.wire_headers()
        head = self.status_line + CRLF
        head += "".join(f"{name}: {value}{CRLF}" for name, value in headers.items())

        if legacy_framing:
            if headers:
                head += CRLF
            return head.encode("utf-8") + self.body + (CRLF + CRLF).encode("utf-8")

        head += CRLF
        return head.encode("utf-8") + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("abc123")
            .build())

    Every method except build() and to_bytes() returns self.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: int) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Optional[Dict[str, str]]) -> "ResponseBuilder":
        """Merge several headers at once. None is treated as empty."""
        self._headers.update(headers or {})
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are UTF-8 encoded."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain-text body with Content-Type: text/plain."""
        return self.content_type(TEXT_PLAIN).body(text)

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Binary body with Content-Type: application/octet-stream."""
        return self.content_type(OCTET_STREAM).body(content)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self, legacy_framing: bool = False) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes(legacy_framing)


def build_response(
    status: int,
    headers: Optional[Dict[str, str]] = None,
    body: Union[str, bytes] = b"",
    legacy_framing: bool = False,
) -> bytes:
    """
    Serialize a response straight from its parts.

    Args:
        status: Status code (unknown codes become 500).
        headers: Header mapping, may be None or empty.
        body: Body text or bytes.
        legacy_framing: See HTTPResponse.to_bytes().

    Returns:
        Wire bytes.
    """
    return (ResponseBuilder()
        .status(status)
        .headers(headers)
        .body(body)
        .to_bytes(legacy_framing))


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Bodies of error responses are always empty: the status line says it all.
#
#     return ok("abc123")
#     return not_found()
#
# =============================================================================

def ok(body: Union[str, bytes] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    200 OK.

    A str body defaults to text/plain. Bytes are sent without a
    Content-Type unless one is given.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if isinstance(body, str) and body and content_type is None:
        content_type = TEXT_PLAIN
    if content_type:
        builder.content_type(content_type)
    return builder.body(body).build()


def created() -> HTTPResponse:
    """201 Created with an empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def bad_request() -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).build()


def not_found() -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def method_not_allowed(allowed_methods: List[str]) -> HTTPResponse:
    """405 with an Allow header listing the methods the route accepts."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .build())


def internal_error() -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()


def error_response(status: int) -> HTTPResponse:
    """Empty-bodied response for any error status."""
    return ResponseBuilder().status(status).build()
