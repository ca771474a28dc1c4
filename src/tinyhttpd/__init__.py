"""
=============================================================================
TINYHTTPD - A Minimal Static File Server Built On Raw Sockets
=============================================================================

A single-threaded HTTP/1.1 server that serves files from a document root.
It reads the request line, maps the path to a file, and sends the bytes
back with a Content-Type picked from the file extension.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttpd)
    ├── server.py            # Server: the request pipeline
    ├── config.py            # ServerConfig dataclass
    ├── exceptions.py        # BindError, RequestReadError, ResponseWriteError
    ├── core/                # Socket plumbing
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # Client socket wrapper
    ├── http/                # Protocol bits
    │   ├── request.py       # Path extraction
    │   ├── response.py      # Always-200 response
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # Path mapping and file reading

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import Server

    server = Server.new("localhost:6969")   # Serves ./srv
    server.start()

=============================================================================
WHAT IT DOESN'T DO
=============================================================================

No keep-alive, no request bodies, no query strings, no directory
listings, no TLS, no caching, and one client at a time. Every response is
200 OK, even when the file couldn't be read.

=============================================================================
"""

__version__ = "0.1.0"

from .server import Server
from .config import ServerConfig
from .exceptions import BindError, RequestReadError, ResponseWriteError

__all__ = [
    "Server",
    "ServerConfig",
    "BindError",
    "RequestReadError",
    "ResponseWriteError",
    "__version__",
]
