"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Translates between raw bytes and structured HTTP messages, and decides
which handler a message goes to.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest (line-oriented, exact-case)    │
    │ response.py      HTTPResponse → bytes (Content-Length derived)      │
    │ router.py        path + method → handler, 404 / 405 fallbacks       │
    │ status_codes.py  closed status table, unknown codes → 500           │
    │ errors.py        HTTPError hierarchy, one status code per error     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .errors import (
    HTTPError,
    MalformedRequest,
    PayloadTooLarge,
    RequestTimeout,
    NotFound,
    MethodNotAllowed,
    IOFailure,
    MissingConfiguration,
)
from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    build_response,
    ok,                  # 200 OK
    created,             # 201 Created
    bad_request,         # 400 Bad Request
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
    error_response,
)
from .router import Router, Route, RouteMatch, MatchType
from .status_codes import HTTPStatus, resolve_status, reason_phrase

__all__ = [
    # Errors
    "HTTPError",
    "MalformedRequest",
    "PayloadTooLarge",
    "RequestTimeout",
    "NotFound",
    "MethodNotAllowed",
    "IOFailure",
    "MissingConfiguration",

    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "build_response",
    "ok",
    "created",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "error_response",

    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "MatchType",

    # Status codes
    "HTTPStatus",
    "resolve_status",
    "reason_phrase",
]
