"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ──accept──► _handle_connection ──thread──► _process_connection
                                                                  │
        ┌─────────────────────────────────────────────────────────┘
        ▼
    Connection.read_request()    bytes in
        │
    RequestParser.parse()        → HTTPRequest        (400 / 413 on failure)
        │
    middleware(router.handle)    → HTTPResponse       (500 on crash)
        │
    HTTPResponse.to_bytes()      bytes out
        │
    Connection.send_response()
        │
    Connection.close()

Each connection gets its own thread and runs this pipeline to completion.
A failure in one connection is logged and ends that connection only.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional, Set

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .handlers import create_router
from .http import (
    HTTPError,
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    Router,
    error_response,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(directory="/tmp/data"))
        server.use(LoggingMiddleware())
        server.run()    # blocks until SIGINT / SIGTERM / shutdown()

    Args:
        config: Server configuration. Defaults to ServerConfig().
        router: Route table. Defaults to create_router(config).
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = router or create_router(self.config)
        self._middleware = MiddlewarePipeline()

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        # Live connection threads, so shutdown can wait for them
        self._threads: Set[threading.Thread] = set()
        self._threads_lock = threading.Lock()

        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added runs outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self):
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start serving (blocking).

        Args:
            setup_logging: Configure the root logger from config.log_level.
                           Pass False when the caller manages logging.
        """
        if setup_logging:
            self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)
        self._running = True

        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")
        else:
            logger.info("No directory configured, /files/ routes answer 404")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask the accept loop to stop; run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("tinyhttp").setLevel(level)

    def _shutdown(self, timeout: float = 5.0):
        """Stop accepting, then give in-flight connections time to finish."""
        logger.info("Shutting down server...")
        self._running = False

        with self._threads_lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout=timeout)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a thread for one accepted connection."""
        thread = threading.Thread(
            target=self._run_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._threads_lock:
            self._threads.add(thread)
        thread.start()

    def _run_connection(self, conn: Connection):
        try:
            self._process_connection(conn)
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())

    def _process_connection(self, conn: Connection):
        """
        Read, parse, route, serialize, write, close.

        Runs in the connection's own thread. Nothing raised here escapes
        the thread: every failure becomes either an error response or a
        logged abort of this connection.
        """
        with conn:
            try:
                raw_request = conn.read_request()
                if raw_request is None:
                    logger.debug(f"[{conn.id}] Client closed without sending a request")
                    return

                conn.state = ConnectionState.PROCESSING
                request = self._parser.parse(raw_request, conn.address)
                response = self._dispatch(conn, request)

            except HTTPError as e:
                # Malformed, oversized or too slow: the router never saw it
                logger.warning(f"[{conn.id}] {type(e).__name__}: {e}")
                response = error_response(e.status_code)

            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed, aborting connection: {e}")
                return

            conn.send_response(response.to_bytes(self.config.legacy_framing))

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        handler = self._handler or self._router.handle
        try:
            return handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Factory for a server with the default routes and access logging."""
    config = config or ServerConfig()
    server = HTTPServer(config)
    server.use(LoggingMiddleware(log_format=config.log_format))
    return server
