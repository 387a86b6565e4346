"""
=============================================================================
FILE HANDLER
=============================================================================

Downloads and uploads under /files/<name>, backed by a FileStore.

    GET  /files/foo.txt     → 200 application/octet-stream, file contents
                              404 when the file does not exist
                              500 when it exists but cannot be read

    POST /files/foo.txt     → 201, request body written to <dir>/foo.txt
                              500 when the write fails

    Either method with no serving directory configured → 404

Only the LAST path segment names the file. /files/a/b.txt serves "b.txt"
from the top of the directory; sub-directories are never traversed.

=============================================================================
"""

import logging
from typing import Optional

from ..http.errors import MissingConfiguration, NotFound
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, created
from ..storage import FileStore


logger = logging.getLogger(__name__)


class FileHandler:
    """
    GET/POST handler pair for a single serving directory.

    Args:
        store: Backing store, or None when no directory was configured.

    Usage:
        files = FileHandler(FileStore("/tmp/data"))
        router.get("/files/")(files.get)
        router.post("/files/")(files.post)
    """

    def __init__(self, store: Optional[FileStore]):
        self.store = store

    def _require_store(self) -> FileStore:
        if self.store is None:
            raise MissingConfiguration("No serving directory configured")
        return self.store

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve a file.

        Raises:
            MissingConfiguration: No directory configured (→ 404).
            NotFound: No such file (→ 404).
            IOFailure: The file exists but could not be read (→ 500).
        """
        store = self._require_store()
        name = request.last_path_segment

        if not store.exists(name):
            raise NotFound(f"No such file: {name!r}")

        content = store.read(name)
        logger.debug(f"Serving {name} ({len(content)} bytes)")
        return ResponseBuilder().octet_stream(content).build()

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """
        Store the request body as a file.

        Raises:
            MissingConfiguration: No directory configured (→ 404).
            NotFound: The path does not end in a usable file name (→ 404).
            IOFailure: The write failed (→ 500).
        """
        store = self._require_store()
        name = request.last_path_segment

        store.write(name, request.body)
        logger.info(f"Stored {name} ({len(request.body)} bytes)")
        return created()
