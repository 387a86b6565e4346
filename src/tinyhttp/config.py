"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All process-wide settings live in one ServerConfig value. It is built once
at startup (from CLI arguments or environment variables), validated, and
then handed explicitly to every component that needs it. Nothing reads
process arguments or globals after that.

    CLI / env ──► ServerConfig ──► HTTPServer ──► Router, FileHandler,
                    (validate)                    Connection, ...

The only setting shared across connections at runtime is ``directory``,
and it is never written after startup.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTP_HOST        Listen address          (default: 0.0.0.0)
    HTTP_PORT        Listen port             (default: 4221)
    HTTP_TIMEOUT     Per-connection deadline (default: 30 seconds)
    HTTP_DIRECTORY   Directory for /files/   (default: unset, file routes 404)
    HTTP_LOG_LEVEL   Logging level           (default: INFO)

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


ROUTE_MATCHING_MODES = ("contains", "prefix")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", directory="/tmp/data", log_level="DEBUG")

    Wire-compatible with older clients:
        ServerConfig(legacy_framing=True)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind to. 0.0.0.0 listens on every interface."""

    port: int = 4221
    """TCP port to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 1024
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Read/write deadline per connection, in seconds.
    None disables the deadline (a stalled client then holds its thread).
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest request (headers + body) accepted. Larger gets 413."""

    legacy_framing: bool = False
    """
    Serialize responses in the legacy format: blank line only
    when headers exist, plus CRLFCRLF after the body. Off by default;
    standard HTTP/1.1 framing is used.
    """

    route_matching: str = "contains"
    """
    How route patterns are compared with request paths.
    "contains" - pattern anywhere in the path (default)
    "prefix"   - path must start with the pattern
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Directory served by /files/<name>.
    When unset, every /files/ request is answered with 404.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' (combined-log style) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from HTTP_* environment variables."""
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            directory=os.getenv("HTTP_DIRECTORY") or None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so that a bad value fails immediately
        instead of on the first request that needs it.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.route_matching not in ROUTE_MATCHING_MODES:
            raise ValueError(
                f"route_matching must be one of {ROUTE_MATCHING_MODES}, "
                f"got {self.route_matching!r}"
            )

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")

        if self.directory is not None and not Path(self.directory).is_dir():
            raise ValueError(f"directory does not exist: {self.directory}")
