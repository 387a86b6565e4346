"""
Handlers that need nothing but the request itself.

    GET /                   → 200, empty body
    GET /echo/abc123        → 200, text/plain, "abc123"
    GET /user-agent         → 200, text/plain, value of User-Agent
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok


def root(request: HTTPRequest) -> HTTPResponse:
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the last path segment.

    Only the text after the final "/" is echoed, so /echo/a/b answers "b".
    """
    return ResponseBuilder().text(request.last_path_segment).build()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the User-Agent header (empty body when it is missing)."""
    return ResponseBuilder().text(request.user_agent).build()
