"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the router so that cross-cutting work (access logging)
happens around every request without the handlers knowing about it.

    pipeline.add(LoggingMiddleware())      # first added = outermost

            ┌──────────────────────────────────────────┐
            │  LoggingMiddleware                       │
            │  ┌────────────────────────────────────┐  │
            │  │         router.handle              │  │
            │  └────────────────────────────────────┘  │
            └──────────────────────────────────────────┘

Request flows inward in the order middleware was added; the response flows
back outward in reverse.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from functools import partial, reduce
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                response = next(request)   # continue the chain
                ...
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process a request.

        Args:
            request: The incoming request.
            next: The rest of the chain. Call it unless short-circuiting.

        Returns:
            The response to send.
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """Ordered middleware, folded around a final handler by wrap()."""

    def __init__(self):
        self._stack: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._stack.append(middleware)
        logger.debug(f"Middleware #{len(self._stack)}: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Fold the stack around ``handler``: MW1 → MW2 → ... → handler.

        The fold starts from the innermost layer, so the first-added
        middleware ends up outermost.
        """
        return reduce(
            lambda inner, middleware: partial(middleware, next=inner),
            reversed(self._stack),
            handler,
        )

    def __len__(self) -> int:
        return len(self._stack)
