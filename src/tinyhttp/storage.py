"""
File storage for the /files/ routes.

A FileStore is bound to one directory and addresses files by bare name
(the last path segment of a request). Names that could leave the directory
are rejected before the filesystem is touched.

    store = FileStore("/tmp/data")
    store.write("foo.txt", b"hello")    # /tmp/data/foo.txt, mode 0644
    store.exists("foo.txt")             # True
    store.read("foo.txt")               # b"hello"
"""

import logging
import os
from pathlib import Path
from typing import Union

from .http.errors import IOFailure, NotFound


logger = logging.getLogger(__name__)

# rw-r--r--
FILE_MODE = 0o644


class FileStore:
    """
    Read/write/stat access to a single directory.

    Args:
        directory: Directory holding the served files. Must exist.
        file_mode: Permission bits for newly created files.
    """

    def __init__(self, directory: Union[str, Path], file_mode: int = FILE_MODE):
        self.directory = Path(directory).resolve()
        self.file_mode = file_mode

        if not self.directory.is_dir():
            raise ValueError(f"Serving directory does not exist: {directory}")

    def path_for(self, name: str) -> Path:
        """
        Absolute path of ``name`` inside the directory.

        Raises:
            NotFound: The name is empty, "." or "..", or contains a path
                      separator.
        """
        if name in ("", ".", "..") or "/" in name or os.sep in name:
            raise NotFound(f"Invalid file name: {name!r}")
        return self.directory / name

    def exists(self, name: str) -> bool:
        """True if ``name`` is a regular file in the directory."""
        try:
            return self.path_for(name).is_file()
        except NotFound:
            return False

    def stat(self, name: str) -> os.stat_result:
        path = self.path_for(name)
        try:
            return path.stat()
        except FileNotFoundError:
            raise NotFound(f"No such file: {name}")
        except OSError as e:
            raise IOFailure(f"Cannot stat {path}: {e}") from e

    def read(self, name: str) -> bytes:
        """
        Full contents of ``name``.

        Raises:
            NotFound: The file does not exist (e.g. deleted since exists()).
            IOFailure: Any other read error, such as a permission problem.
        """
        path = self.path_for(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFound(f"No such file: {name}")
        except OSError as e:
            raise IOFailure(f"Cannot read {path}: {e}") from e

    def write(self, name: str, data: bytes) -> None:
        """
        Create or truncate ``name`` and write ``data`` to it.

        Concurrent writers to the same name are not coordinated; the last
        one to finish wins.

        Raises:
            IOFailure: The file could not be opened or written.
        """
        path = self.path_for(name)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise IOFailure(f"Cannot write {path}: {e}") from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")
