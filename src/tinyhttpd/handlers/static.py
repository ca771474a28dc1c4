"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Turns a request path into file bytes.

=============================================================================
PATH MAPPING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Request path            Filesystem path  (doc_root = "./srv")      │
    ├─────────────────────────────────────────────────────────────────────┤
    │  /                       ./srv/index.html                           │
    │  /style.css              ./srv/style.css                            │
    │  /api/users.json         ./srv/api/users.json                       │
    │  /img/                   ./srv/img/       (a directory → error)     │
    │  /../notes.txt           ./srv/../notes.txt                         │
    └─────────────────────────────────────────────────────────────────────┘

The request path is appended to the document root as a plain string.
There is no URL decoding and no normalization of ".." segments, so the
last example really does read a file OUTSIDE the document root.

SECURITY WARNING: with the default configuration any file readable by
the server process can be fetched with enough "../". Set
ServerConfig.confine_to_root to refuse such paths.

=============================================================================
READ ERRORS
=============================================================================

A file that can't be read does not produce an HTTP error. The body is
replaced with a short HTML fragment describing the problem and the
response is still 200 OK:

    <p>Error: No such file or directory (os error 2)</p>
    <p>Error: Is a directory (os error 21)</p>
    <p>Error: Permission denied (os error 13)</p>

=============================================================================
"""

import os
import logging
from pathlib import Path


logger = logging.getLogger(__name__)


ACCESS_DENIED = "Access denied"


def describe_error(error: Exception) -> str:
    """
    Human-readable description of a read failure.

    OSErrors are rendered as "<message> (os error <errno>)"; anything
    else falls back to str(error).
    """
    if isinstance(error, OSError) and error.errno is not None and error.strerror:
        return f"{error.strerror} (os error {error.errno})"
    return str(error)


def error_body(description: str) -> bytes:
    """The HTML fragment sent in place of a file that couldn't be read."""
    return f"<p>Error: {description}</p>".encode("utf-8")


class StaticFileHandler:
    """
    Handler for serving files from a document root.

    =========================================================================
    USAGE
    =========================================================================

        static = StaticFileHandler("./srv")

        file_path = static.resolve("/style.css")   # "./srv/style.css"
        body = static.read_file_bytes(file_path)

    =========================================================================
    """

    def __init__(
        self,
        doc_root: str,
        index_file: str = "index.html",
        confine_to_root: bool = False,
    ):
        """
        Initialize static file handler.

        Args:
            doc_root: Directory request paths are appended to. It doesn't
                      have to exist; every request just gets an error body
                      until it does.
            index_file: File served for "/".
            confine_to_root: Refuse paths that resolve outside doc_root.
        """
        self.doc_root = doc_root
        self.index_file = index_file
        self.confine_to_root = confine_to_root

    def resolve(self, request_path: str) -> str:
        """
        Map a request path to a filesystem path.

        Args:
            request_path: Path token from the request line.

        Returns:
            doc_root/index_file for "/", otherwise doc_root + request_path.
        """
        if request_path == "/":
            return f"{self.doc_root}/{self.index_file}"
        return f"{self.doc_root}{request_path}"

    def is_inside_root(self, file_path: str) -> bool:
        """Check whether file_path, with ".." and symlinks resolved, stays under doc_root."""
        root = os.path.realpath(self.doc_root)
        target = os.path.realpath(file_path)
        try:
            return os.path.commonpath([root, target]) == root
        except ValueError:
            return False  # Different drives on Windows

    def read_file_bytes(self, file_path: str) -> bytes:
        """
        Read a file, substituting an error fragment on failure.

        Args:
            file_path: Path produced by resolve().

        Returns:
            The file's bytes, or b"<p>Error: ...</p>" if it can't be read.
        """
        if self.confine_to_root and not self.is_inside_root(file_path):
            logger.warning(f"Path outside document root refused: {file_path}")
            return error_body(ACCESS_DENIED)

        try:
            return Path(file_path).read_bytes()
        except (OSError, ValueError) as e:
            # ValueError: embedded null byte in the path
            logger.debug(f"Failed to read {file_path}: {e}")
            return error_body(describe_error(e))
