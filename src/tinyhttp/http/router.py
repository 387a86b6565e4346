"""
=============================================================================
URL ROUTER
=============================================================================

Maps a request's path and method onto a handler function.

=============================================================================
MATCHING MODEL
=============================================================================

Routes are checked in registration order and the FIRST route whose path
pattern matches decides where the request goes. Only then is the method
looked at, among the routes registered for that same pattern:

    GET  /files/a.txt   → /files/ matches, GET handler registered  → handler
    PUT  /files/a.txt   → /files/ matches, no PUT handler          → 405
    GET  /nowhere       → nothing matches                          → 404

Because the path decides first, a PUT to /files/user-agent is a 405 from
the file route. It never falls through to the /user-agent route.

Three kinds of pattern match:

    exact      path == pattern                    "/"
    contains   pattern occurs anywhere in path    "/echo/" in "/x/echo/y"
    prefix     path starts with pattern           "/echo/" at position 0

"contains" is the default, where /foo/files/bar is a file
request. Routers built with prefix matching turn such paths into 404s.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .errors import HTTPError, IOFailure, MethodNotAllowed
from .request import HTTPRequest
from .response import HTTPResponse, error_response, method_not_allowed, not_found


logger = logging.getLogger(__name__)

# Handler: takes a request, returns a response (or raises HTTPError)
Handler = Callable[[HTTPRequest], HTTPResponse]


class MatchType(Enum):
    EXACT = "exact"
    CONTAINS = "contains"
    PREFIX = "prefix"


@dataclass
class Route:
    """
    A registered route.

    Attributes:
        path:    Pattern compared against the request path.
        handler: Function called with the request.
        method:  Required method, or None to accept any method.
        match:   How ``path`` is compared (exact / contains / prefix).
    """

    path: str
    handler: Handler
    method: Optional[str] = None
    match: MatchType = MatchType.CONTAINS

    def matches_path(self, path: str) -> bool:
        if self.match is MatchType.EXACT:
            return path == self.path
        if self.match is MatchType.PREFIX:
            return path.startswith(self.path)
        return self.path in path

    def accepts(self, method: str) -> bool:
        return self.method is None or self.method == method

    def same_pattern(self, other: "Route") -> bool:
        return self.path == other.path and self.match is other.match


@dataclass
class RouteMatch:
    """Result of a path match: the winning route, if the method fits."""

    route: Optional[Route]
    allowed: List[str]


class Router:
    """
    Ordered route table with decorator registration.

        router = Router()

        @router.get("/files/")
        def download(request):
            ...

        response = router.handle(request)

    Args:
        default_match: Match type used when a registration does not give
                       one. "contains" or "prefix".
    """

    def __init__(self, default_match: MatchType = MatchType.CONTAINS):
        self.default_match = MatchType(default_match)
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        match: Optional[MatchType] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Pattern to compare against request paths.
            handler: Handler function.
            method: Required method (None for any).
            match: Match type, defaults to the router's default_match.

        Returns:
            The registered Route.
        """
        route = Route(
            path=path,
            handler=handler,
            method=method.upper() if method else None,
            match=MatchType(match) if match else self.default_match,
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method or 'ANY'} {route.path} ({route.match.value})")
        return route

    def route(self, path: str, method: Optional[str] = None, match: Optional[MatchType] = None):
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method=method, match=match)
            return handler
        return decorator

    def get(self, path: str, match: Optional[MatchType] = None):
        return self.route(path, "GET", match)

    def post(self, path: str, match: Optional[MatchType] = None):
        return self.route(path, "POST", match)

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the route for a method and path.

        Returns:
            None if no pattern matches the path. Otherwise a RouteMatch whose
            ``route`` is None when the path matched but the method did not;
            ``allowed`` then lists the methods that would have matched.
        """
        first = next((r for r in self._routes if r.matches_path(path)), None)
        if first is None:
            return None

        group = [r for r in self._routes if r.same_pattern(first)]
        for route in group:
            if route.accepts(method):
                return RouteMatch(route=route, allowed=[])

        allowed = sorted({r.method for r in group if r.method})
        return RouteMatch(route=None, allowed=allowed)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request and return the handler's response.

        Errors raised by the handler are turned into responses here:

            NotFound / MissingConfiguration   → 404
            MethodNotAllowed                  → 405 (+ Allow)
            IOFailure                         → 500 (logged)
        """
        result = self.match(request.method, request.path)

        if result is None:
            return not_found()

        if result.route is None:
            return method_not_allowed(result.allowed)

        try:
            return result.route.handler(request)
        except MethodNotAllowed as e:
            return method_not_allowed(e.allowed)
        except IOFailure as e:
            logger.error(f"{request.method} {request.path}: {e}")
            return error_response(e.status_code)
        except HTTPError as e:
            logger.debug(f"{request.method} {request.path}: {type(e).__name__}: {e}")
            return error_response(e.status_code)

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)
