"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Emits one line per request on the "tinyhttp.access" logger:

    text:  127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "GET /echo/abc" 200 3 0.12ms "curl/8.5.0"
    json:  {"method": "GET", "path": "/echo/abc", "status_code": 200, ...}

The logger is namespaced so it can be routed separately:

    logging.getLogger("tinyhttp.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from .base import Middleware, NextHandler


access_logger = logging.getLogger("tinyhttp.access")

CLF_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


@dataclass
class AccessRecord:
    """What the access log knows about one finished request."""

    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def capture(
        cls,
        request: HTTPRequest,
        response: HTTPResponse,
        started: float,
    ) -> "AccessRecord":
        return cls(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.perf_counter() - started) * 1000,
            timestamp=time.strftime(CLF_TIME_FORMAT),
        )


def format_text(record: AccessRecord) -> str:
    """Combined-log style line."""
    return (
        f'{record.client_ip} - - [{record.timestamp}] '
        f'"{record.method} {record.path}" {record.status_code} '
        f'{record.content_length} {record.duration_ms:.2f}ms "{record.user_agent}"'
    )


def format_json(record: AccessRecord) -> str:
    fields = asdict(record)
    fields["duration_ms"] = round(record.duration_ms, 2)
    return json.dumps(fields)


FORMATTERS: Dict[str, Callable[[AccessRecord], str]] = {
    "text": format_text,
    "json": format_json,
}


class LoggingMiddleware(Middleware):
    """
    Request timing and access logging.

    Add it first so the timing covers the whole chain:

        server.use(LoggingMiddleware(log_format="json"))

    Args:
        log_format: Key into FORMATTERS ("text" or "json").
        log_level: Level of the access lines.
        skip_paths: Exact request paths left out of the log.
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[Iterable[str]] = None,
    ):
        if log_format not in FORMATTERS:
            raise ValueError(f"Unknown access log format: {log_format!r}")
        self.formatter = FORMATTERS[log_format]
        self.log_level = log_level
        self.skip_paths = frozenset(skip_paths or ())

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        started = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            access_logger.error(
                f'"{request.method} {request.path}" raised '
                f"{type(e).__name__}: {e} after {elapsed:.2f}ms"
            )
            raise

        if request.path not in self.skip_paths:
            record = AccessRecord.capture(request, response, started)
            access_logger.log(self.log_level, self.formatter(record))

        return response
