"""
Middleware wrapping the router.

    from tinyhttp.middleware import LoggingMiddleware

    server.use(LoggingMiddleware())
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import AccessRecord, LoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "AccessRecord",
]
