"""
=============================================================================
SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted client
socket is wrapped in a Connection and handed to a callback; the socket
server itself never reads or writes client data.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    start(on_connection)                                              │
    │        ├──► _listen()       socket, SO_REUSEADDR, bind, listen       │
    │        ├──► _stop_on_signals()   SIGTERM / SIGINT (main thread)      │
    │        └──► _serve()        blocks here                              │
    │                 until stopped:                                       │
    │                     accept()       wakes every POLL_INTERVAL         │
    │                     _wrap()        client socket → Connection        │
    │                     on_connection(conn)                              │
    │                                                                      │
    │    shutdown()  → stop flag set, the loop exits on its next wake-up   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import signal
import socket
import threading
from contextlib import contextmanager
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

# Seconds accept() blocks before re-checking the stop flag
POLL_INTERVAL = 1.0

ConnectionCallback = Callable[[Connection], None]


class SocketServer:
    """
    TCP listener feeding Connections to a callback.

        listener = SocketServer(config)
        listener.start(lambda conn: ...)    # returns after shutdown()

    Args:
        config: Supplies host, port, backlog and the per-connection
                buffer_size / timeout / max_request_size.
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None

        self._ready = threading.Event()
        self._stop_requested = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._ready.is_set() and not self._stop_requested.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        """
        Where the server listens.

        Once bound this is the kernel's view, so a configured port of 0
        reports the port that was actually assigned.
        """
        listener = self._listener
        if listener is None:
            return (self.config.host, self.config.port)
        host, port = listener.getsockname()[:2]
        return (host, port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, on_connection: ConnectionCallback):
        """
        Listen and dispatch connections until shutdown().

        Args:
            on_connection: Receives each accepted Connection. It runs on the
                           accept thread, so it must hand the connection off
                           instead of serving it inline.

        Raises:
            OSError: Binding or listening failed.
        """
        self._stop_requested.clear()
        self._listener = self._listen()

        try:
            with self._stop_on_signals():
                host, port = self.address
                logger.info(f"Server listening on {host}:{port}")
                self._ready.set()
                self._serve(on_connection)
        finally:
            self._close_listener()
            self._ready.clear()
            logger.info("Socket server stopped")

    def shutdown(self):
        """Ask the accept loop to stop. Safe to call repeatedly."""
        if self.is_running:
            logger.info("Shutting down socket server...")
        self._stop_requested.set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is bound and listening."""
        return self._ready.wait(timeout)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _listen(self) -> socket.socket:
        host, port = self.config.host, self.config.port
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.settimeout(POLL_INTERVAL)

        try:
            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {host}:{port}: {e}")
            listener.close()
            raise

        return listener

    @contextmanager
    def _stop_on_signals(self):
        """
        Turn SIGTERM and SIGINT into shutdown() for the duration of serving.

        Python only allows signal handlers on the main thread. A server
        running on any other thread is stopped through shutdown() alone.
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        previous = {
            signum: signal.signal(signum, on_signal)
            for signum in (signal.SIGTERM, signal.SIGINT)
        }
        try:
            yield
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def _serve(self, on_connection: ConnectionCallback):
        while not self._stop_requested.is_set():
            try:
                client, peer = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop_requested.is_set():
                    logger.error(f"accept() failed, no longer serving: {e}")
                return

            logger.debug(f"Accepted {peer[0]}:{peer[1]}")
            on_connection(self._wrap(client, peer))

    def _wrap(self, client: socket.socket, peer: Tuple[str, int]) -> Connection:
        return Connection(
            socket=client,
            address=peer,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_request_size=self.config.max_request_size,
        )

    def _close_listener(self):
        listener, self._listener = self._listener, None
        if listener is not None:
            try:
                listener.close()
            except OSError as e:
                logger.debug(f"Closing listener: {e}")
