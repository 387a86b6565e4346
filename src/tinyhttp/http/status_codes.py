"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server speaks a deliberately small set of status codes. Every response
goes through this closed table; anything outside it is reported to the
client as 500 Internal Server Error.

    HTTP/1.1 200 OK
             ─── ──
              │   │
              │   └── Reason phrase (from _STATUS_PHRASES)
              └────── Status code (HTTPStatus member)

=============================================================================
WHICH CODES, AND WHEN
=============================================================================

    200 OK                      root, echo, user-agent, file download
    201 Created                 file upload
    400 Bad Request             request line could not be parsed
    404 Not Found               unknown route, missing file, no directory
    405 Method Not Allowed      /files/... with something other than GET/POST
    408 Request Timeout         client too slow to send its request
    413 Payload Too Large       request exceeds max_request_size
    500 Internal Server Error   file I/O failure, handler crash, unknown code

=============================================================================
"""

from enum import IntEnum
from typing import Union


class HTTPStatus(IntEnum):
    """
    Status codes understood by the server.

    IntEnum so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200                    # Request handled, body may be empty
    CREATED = 201               # File written

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400           # Malformed request line
    NOT_FOUND = 404             # No route / no file / no directory
    METHOD_NOT_ALLOWED = 405    # Route exists, method does not
    REQUEST_TIMEOUT = 408       # Read deadline expired
    PAYLOAD_TOO_LARGE = 413     # Request bigger than the configured limit

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500  # Catch-all, also the fallback for unknown codes

    @property
    def phrase(self) -> str:
        """Reason phrase used on the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def resolve_status(code: Union[int, HTTPStatus]) -> HTTPStatus:
    """
    Map an arbitrary integer onto the closed status table.

    Unknown codes become 500 Internal Server Error. Handlers therefore
    can never put a status line on the wire that the table does not know.

        >>> resolve_status(201)
        <HTTPStatus.CREATED: 201>
        >>> resolve_status(418)
        <HTTPStatus.INTERNAL_SERVER_ERROR: 500>
    """
    try:
        return HTTPStatus(code)
    except ValueError:
        return HTTPStatus.INTERNAL_SERVER_ERROR


def reason_phrase(code: Union[int, HTTPStatus]) -> str:
    """Reason phrase for ``code`` after fallback resolution."""
    return resolve_status(code).phrase
