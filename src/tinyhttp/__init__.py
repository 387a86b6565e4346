"""
=============================================================================
TINYHTTP - A Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

Accepts TCP connections, parses each request, routes it to one of a handful
of handlers and writes the response back, one thread per connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Route            Method   Response                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │  /                any      200, empty                               │
    │  /echo/<value>    any      200 text/plain, <value>                  │
    │  /user-agent      any      200 text/plain, the User-Agent header    │
    │  /files/<name>    GET      200 octet-stream file contents, or 404   │
    │  /files/<name>    POST     201 after writing the body, 500 on error │
    │  anything else    -        404                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttp)
    ├── server.py            # HTTPServer: per-connection pipeline
    ├── config.py            # ServerConfig dataclass
    ├── storage.py           # FileStore: the served directory
    ├── core/
    │   ├── socket_server.py # Listening socket + accept loop
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response serialization
    │   ├── router.py        # Route table and dispatch
    │   ├── status_codes.py  # Closed status table
    │   └── errors.py        # HTTPError hierarchy
    ├── handlers/
    │   ├── basic.py         # root, echo, user-agent
    │   └── files.py         # /files/ GET and POST
    └── middleware/
        ├── base.py          # Middleware + pipeline
        └── logging.py       # Access log

=============================================================================
QUICK START
=============================================================================

    python -m tinyhttp --directory /tmp/data

    from tinyhttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/data"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
