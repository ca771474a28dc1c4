"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

The server has very little to configure: where to listen, which directory
to serve from, and how chatty the logs should be. All of it lives in one
dataclass so every component reads its settings from the same place.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m tinyhttpd --port 8000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── TINYHTTPD_PORT=8000 python -m tinyhttpd                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │      └── localhost:6969, serving ./srv                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Tuple


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6969
DEFAULT_DOC_ROOT = "./srv"


@dataclass
class ServerConfig:
    """
    File server configuration.

    =========================================================================
    SETTINGS GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, accept_poll_interval

    DOCUMENT ROOT
    - doc_root, index_file, confine_to_root

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = DEFAULT_HOST
    """
    The host name or IP address to bind to.
    - "localhost" - Loopback only (default)
    - "0.0.0.0" - All network interfaces
    """

    port: int = DEFAULT_PORT
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().

    Connections are handled one at a time, so while a request is being
    served every new client waits in this queue.
    """

    accept_poll_interval: float = 1.0
    """
    How often (seconds) the accept loop wakes up to check for shutdown.

    This only applies to the listening socket. Client connections have
    no timeout at all.
    """

    # ─────────────────────────────────────────────────────────────────────
    # DOCUMENT ROOT
    # ─────────────────────────────────────────────────────────────────────

    doc_root: str = DEFAULT_DOC_ROOT
    """
    Directory that request paths are appended to.

    "/style.css" is served from doc_root + "/style.css".
    """

    index_file: str = "index.html"
    """
    File served for a request to "/".
    """

    confine_to_root: bool = False
    """
    Refuse paths that resolve outside doc_root.

    Off by default: request paths are appended to doc_root verbatim, so
    "/../secret.txt" escapes the root. When enabled, such requests get
    an "Access denied" error body instead.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    @property
    def address(self) -> Tuple[str, int]:
        """The (host, port) pair handed to socket.bind()."""
        return (self.host, self.port)

    @classmethod
    def from_address(cls, address: str, **kwargs) -> "ServerConfig":
        """
        Create configuration from a "host:port" string.

        The port is taken from the last colon, so "localhost:6969" and
        "[::1]:8000" both work.

        Raises:
            ValueError: If the address has no port or the port is not a number.
        """
        host, sep, port = address.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Invalid address: {address!r}. Expected host:port.")

        host = host.strip("[]")
        return cls(host=host, port=int(port), **kwargs)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

            TINYHTTPD_HOST       Server host (default: localhost)
            TINYHTTPD_PORT       Server port (default: 6969)
            TINYHTTPD_ROOT       Document root (default: ./srv)
            TINYHTTPD_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("TINYHTTPD_HOST", DEFAULT_HOST),
            port=int(os.getenv("TINYHTTPD_PORT", str(DEFAULT_PORT))),
            doc_root=os.getenv("TINYHTTPD_ROOT", DEFAULT_DOC_ROOT),
            log_level=os.getenv("TINYHTTPD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.accept_poll_interval <= 0:
            raise ValueError("accept_poll_interval must be > 0")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {self.log_level}")
