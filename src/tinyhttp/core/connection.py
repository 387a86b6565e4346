"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for the lifetime of a single request.

TCP is a byte STREAM, not a message protocol: one recv() can return half a
request, or a request split anywhere. The Connection therefore keeps
reading until it holds a complete request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      read_request() flow                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   recv() → buffer, until "\r\n\r\n" is in the buffer                 │
    │       │          (peer closed first → return what we have)          │
    │       ▼                                                              │
    │   Content-Length in the header block?                               │
    │       │                                                              │
    │       ├── no  → done, bytes already read after it are kept           │
    │       └── yes → recv() until the whole body is buffered              │
    │                                                                      │
    │   Buffer above max_request_size → PayloadTooLarge                    │
    │   Deadline expired               → RequestTimeout                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Connections are never kept alive: one request, one response, close.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..http.errors import PayloadTooLarge, RequestTimeout
from ..http.request import HEADER_TERMINATOR, content_length_of


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle of a connection, for logging and debugging."""

    NEW = "new"                # Accepted, nothing read yet
    READING = "reading"        # Receiving the request
    PROCESSING = "processing"  # Parsing and routing
    WRITING = "writing"        # Sending the response
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client (ip, port).
        id: Short random identifier used in log lines.
        state: Current lifecycle state.
        created_at: Accept timestamp.
        buffer_size: Bytes requested per recv().
        timeout: Deadline in seconds for each socket operation (None = none).
        max_request_size: Largest request accepted, in bytes.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 30.0
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request from the socket.

        Returns:
            The request bytes, or None if the client closed the connection
            without sending anything.

        Raises:
            RequestTimeout: The deadline expired before the request was
                            complete.
            PayloadTooLarge: The request grew beyond max_request_size.
            ConnectionError: The socket failed (reset, broken pipe, ...).
        """
        self.state = ConnectionState.READING

        try:
            # STEP 1: everything up to the blank line after the headers
            while HEADER_TERMINATOR not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    # Peer closed early; hand over whatever arrived
                    return self._buffer or None

            # STEP 2: the declared body, if any
            header_end = self._buffer.find(HEADER_TERMINATOR)
            body_start = header_end + len(HEADER_TERMINATOR)
            content_length = content_length_of(self._buffer[:header_end])
            if content_length is None:
                # No usable length: keep whatever arrived with the headers
                return self._buffer

            if body_start + content_length > self.max_request_size:
                raise PayloadTooLarge(
                    f"Declared body of {content_length} bytes exceeds limit"
                )

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # Closed mid-body; the parser sees what arrived

            return self._buffer[:body_start + content_length]

        except socket.timeout:
            raise RequestTimeout(
                f"No complete request after {self.timeout}s "
                f"({len(self._buffer)} bytes received)"
            )

    def _recv(self) -> bytes:
        chunk = self.socket.recv(self.buffer_size)
        self._buffer += chunk

        if len(self._buffer) > self.max_request_size:
            raise PayloadTooLarge(f"Request too large: {len(self._buffer)} bytes")
        return chunk

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response.

        sendall() keeps writing until every byte is out or the socket fails.

        Returns:
            True on success, False if the client went away or the write
            deadline expired.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except (socket.timeout, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees the end of the
        response before the descriptor is released.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
