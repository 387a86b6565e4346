"""
=============================================================================
TINYHTTP CLI ENTRY POINT
=============================================================================

    # Listen on 0.0.0.0:4221, file routes disabled
    python -m tinyhttp

    # Serve and accept uploads in /tmp/data
    python -m tinyhttp --directory /tmp/data

    # Legacy framing: extra CRLFCRLF after every body
    python -m tinyhttp --directory /tmp/data --legacy-framing

    # Only route paths that START with /files/, /echo/, /user-agent
    python -m tinyhttp --route-matching prefix

Unset options fall back to the HTTP_* environment variables read by
ServerConfig.from_env().

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, ROUTE_MATCHING_MODES, ServerConfig
from .middleware import LoggingMiddleware
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttp",
        description="Minimal HTTP/1.1 server with echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttp                           # 0.0.0.0:4221, no file routes
  python -m tinyhttp --directory /tmp/data     # Enable /files/<name>
  python -m tinyhttp --port 8080 --log-level DEBUG
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None,
                        help="Address to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, default=None,
                        help="Port to listen on (default: 4221)")
    parser.add_argument("--timeout", "-t", type=float, default=None,
                        help="Per-connection read/write deadline in seconds (default: 30)")

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--directory", "-d", default=None,
                        help="Directory served by /files/<name> (default: file routes disabled)")
    parser.add_argument("--legacy-framing", action="store_true",
                        help="Append CRLFCRLF after every response body (legacy framing)")
    parser.add_argument("--route-matching", choices=ROUTE_MATCHING_MODES, default="contains",
                        help="How route patterns match paths (default: contains)")

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--log-level", "-l", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="text",
                        help="Access log format (default: text)")
    parser.add_argument("--version", "-v", action="version",
                        version=f"tinyhttp {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Overlay CLI arguments on the environment-derived configuration."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.directory is not None:
        config.directory = args.directory
    if args.log_level is not None:
        config.log_level = args.log_level

    config.legacy_framing = args.legacy_framing
    config.route_matching = args.route_matching
    config.log_format = args.log_format
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"tinyhttp: {e}", file=sys.stderr)
        return 2

    server.use(LoggingMiddleware(log_format=config.log_format))

    try:
        server.run()
    except OSError as e:
        print(f"tinyhttp: failed to bind to {config.host}:{config.port}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
