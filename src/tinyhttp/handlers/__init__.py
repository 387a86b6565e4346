"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    basic.py   root, echo and user-agent reflection
    files.py   FileHandler: GET/POST on /files/<name>

create_router() wires them into the route table the server uses:

    order  pattern        match      method  handler
    ─────  ─────────────  ─────────  ──────  ───────────────────
      1    /              exact      any     root
      2    /files/        default    GET     FileHandler.get
      2    /files/        default    POST    FileHandler.post
      3    /user-agent    default    any     user_agent
      4    /echo/         default    any     echo
      -    anything else                     404

"default" is the configured route_matching mode ("contains" unless the
server was started with prefix matching).

=============================================================================
"""

from typing import Optional

from ..config import ServerConfig
from ..http.router import MatchType, Router
from ..storage import FileStore
from .basic import echo, root, user_agent
from .files import FileHandler


def create_router(
    config: Optional[ServerConfig] = None,
    store: Optional[FileStore] = None,
) -> Router:
    """
    Build the server's route table.

    Args:
        config: Server configuration (route matching mode, directory).
        store: FileStore to serve from. Created from config.directory when
               not given; stays None when no directory is configured.

    Returns:
        A Router with every route registered in dispatch order.
    """
    config = config or ServerConfig()
    if store is None and config.directory:
        store = FileStore(config.directory)

    router = Router(default_match=MatchType(config.route_matching))
    files = FileHandler(store)

    router.add_route("/", root, match=MatchType.EXACT)
    router.get("/files/")(files.get)
    router.post("/files/")(files.post)
    router.route("/user-agent")(user_agent)
    router.route("/echo/")(echo)

    return router


__all__ = [
    "create_router",
    "FileHandler",
    "root",
    "echo",
    "user_agent",
]
