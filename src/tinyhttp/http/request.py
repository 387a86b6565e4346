"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a client socket into an immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /files/foo.txt HTTP/1.1\r\n      ← request line              │
    │   ─┬── ──────┬─────── ───┬────                                      │
    │    │         │           │                                          │
    │  method     path      version (optional here)                       │
    │                                                                      │
    │   Host: localhost:4221\r\n              ← "Name: Value" headers      │
    │   Content-Length: 5\r\n                                             │
    │   \r\n                                  ← end of header block       │
    │   hello                                 ← body                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

The parser is line-oriented and single-pass:

1. The buffer is split on CRLF.
2. Line 0 is split on whitespace. The first field is the method, the
   second is the path. Fewer than two fields raises MalformedRequest.
3. Every following line that splits on ": " into exactly two parts is a
   header. Names keep the exact case the client sent; a repeated name
   overwrites the earlier value.
4. Any other non-empty line is a body line. The last one wins, so a body
   recovered this way is at most one line long.

When the client declares a Content-Length and the header terminator is
present, rule 4 is replaced by exact framing: the body is the declared
number of bytes after the blank line. Multi-line and binary uploads survive
intact that way.

Header names are NOT case-folded. "User-Agent" and "user-agent" are two
different keys.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .errors import MalformedRequest, PayloadTooLarge


CRLF = "\r\n"
HEADER_SEPARATOR = ": "
HEADER_TERMINATOR = b"\r\n\r\n"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Built once per connection by RequestParser and never modified
    afterwards (frozen dataclass).

    Attributes:
        method:         Request method exactly as sent ("GET", "POST", ...).
                        Methods other than GET/POST are kept verbatim.
        path:           Request target, stored verbatim. No URL decoding and
                        no query string splitting.
        version:        Third field of the request line, "HTTP/1.1" if absent.
        headers:        Header name → value. Exact-case keys, last one wins.
        body:           Request body bytes, empty if there is none.
        client_address: (ip, port) of the peer, used for logging.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: Tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        """The User-Agent header, empty string if the client sent none."""
        return self.headers.get("User-Agent", "")

    @property
    def content_length(self) -> int:
        """
        Declared Content-Length as an integer.

        Returns 0 when the header is missing, not a number, or negative.
        """
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            return 0
        return max(length, 0)

    @property
    def last_path_segment(self) -> str:
        """
        Text after the final "/" of the path.

            /echo/abc123      → "abc123"
            /files/foo.txt    → "foo.txt"
            /files/           → ""
        """
        return self.path.rsplit("/", 1)[-1]

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (undecodable bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by its exact name.

        Args:
            name: Header name, matched case-sensitively.
            default: Value returned when the header is absent.
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

        Raw bytes
            │
            ▼
        1. Size check ──────────────► PayloadTooLarge (413)
            │
            ▼
        2. Split on CRLF
            │
            ▼
        3. Request line ────────────► MalformedRequest (400)
            │
            ▼
        4. Headers / body lines
            │
            ▼
        5. Content-Length framing (if declared)
            │
            ▼
        HTTPRequest
    """

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Largest buffer accepted, in bytes. Larger
                              input raises PayloadTooLarge.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one request.

        Args:
            data: Raw request bytes as read from the socket.
            client_address: Peer (ip, port), copied onto the request.

        Returns:
            The parsed, immutable request.

        Raises:
            MalformedRequest: Empty input or an unusable request line.
            PayloadTooLarge: Input longer than max_request_size.
        """
        if len(data) > self.max_request_size:
            raise PayloadTooLarge(f"Request too large: {len(data)} bytes")

        if not data.strip():
            raise MalformedRequest("Empty request")

        body = self._frame_body(data)
        if body is not None:
            # Only the header block is scanned; body bytes never become headers
            head = data[:data.find(HEADER_TERMINATOR)]
        else:
            head = data

        lines = head.decode("utf-8", errors="replace").split(CRLF)

        method, path, version = self._parse_request_line(lines[0])
        headers, body_line = self._parse_lines(lines[1:])

        if body is None:
            body = body_line.encode("utf-8") if body_line else b""

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split the request line into (method, path, version).

        Only the first two fields are required. The version is never
        checked, so a request line like "GET /" is accepted.
        """
        fields = line.split()
        if len(fields) < 2:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        method, path = fields[0], fields[1]
        version = fields[2] if len(fields) > 2 else "HTTP/1.1"
        return method, path, version

    def _parse_lines(self, lines: list[str]) -> Tuple[Dict[str, str], str]:
        """
        Scan the lines after the request line.

        Returns:
            (headers, body_line) where body_line is the last non-empty line
            that was not a header.
        """
        headers: Dict[str, str] = {}
        body_line = ""

        for line in lines:
            parts = line.split(HEADER_SEPARATOR)
            if len(parts) == 2:
                name, value = parts
                headers[name] = value
            elif line:
                body_line = line

        return headers, body_line

    def _frame_body(self, data: bytes) -> Optional[bytes]:
        """
        Cut the body out of the raw buffer using Content-Length.

        Returns None when exact framing is not possible (no terminator or
        no usable Content-Length), in which case the line-scan body is used.
        """
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            return None

        length = content_length_of(data[:header_end])
        if length is None:
            return None

        body_start = header_end + len(HEADER_TERMINATOR)
        return data[body_start:body_start + length]


def content_length_of(head: bytes) -> Optional[int]:
    """
    Find the Content-Length declared in a raw header block.

    Used before a full parse is possible (the connection needs it to know
    how much body to wait for). Matches the exact "Content-Length: " header
    line, like the parser does.

    Returns:
        The declared length, or None if absent, not a number, or negative.
    """
    prefix = b"Content-Length" + HEADER_SEPARATOR.encode()
    value = None
    for line in head.split(CRLF.encode()):
        if line.startswith(prefix):
            value = line[len(prefix):]  # last one wins, as in the header map

    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse with a default-configured RequestParser."""
    return RequestParser().parse(data, client_address)
