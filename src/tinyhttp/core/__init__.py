"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates, binds and listens on the TCP socket                      │
    │  • Runs the accept() loop                                            │
    │  • Stops on SIGTERM / SIGINT or shutdown()                           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one Connection per accepted client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Reads one complete request (headers + Content-Length body)        │
    │  • Enforces the per-connection deadline and size limit               │
    │  • Sends the response and closes                                     │
    └─────────────────────────────────────────────────────────────────────┘

THREAD-PER-CONNECTION: HTTPServer starts one thread for every Connection.
Connections share no request state; the only common value is the
read-only ServerConfig.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
