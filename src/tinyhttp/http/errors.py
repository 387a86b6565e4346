"""
HTTP error types.

Each error carries the status code it turns into. Errors are raised where
the problem is detected and converted into a response by whichever layer
catches them:

    MalformedRequest, PayloadTooLarge, RequestTimeout  ->  HTTPServer
    NotFound, MethodNotAllowed, IOFailure,
    MissingConfiguration                              ->  Router
"""

from typing import Optional

from .status_codes import HTTPStatus


class HTTPError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message or self.__class__.__name__)
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)


class MalformedRequest(HTTPError):
    """The request line is missing or has fewer than two fields."""

    status_code = HTTPStatus.BAD_REQUEST


class PayloadTooLarge(HTTPError):
    status_code = HTTPStatus.PAYLOAD_TOO_LARGE


class RequestTimeout(HTTPError):
    """The client did not deliver a complete request before the deadline."""

    status_code = HTTPStatus.REQUEST_TIMEOUT


class NotFound(HTTPError):
    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowed(HTTPError):
    """The path matched a route but no handler accepts the method."""

    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, method: str, allowed: list[str]):
        super().__init__(f"Method {method} not allowed")
        self.method = method
        self.allowed = allowed


class IOFailure(HTTPError):
    """A filesystem read or write failed (permissions, disk full, races)."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class MissingConfiguration(HTTPError):
    """
    No serving directory was configured.

    Reported as 404 so that a server started without ``--directory``
    behaves as if the file routes did not exist.
    """

    status_code = HTTPStatus.NOT_FOUND
