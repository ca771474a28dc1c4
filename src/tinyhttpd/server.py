"""
=============================================================================
FILE SERVER
=============================================================================

The Server class ties the pieces together: it owns the SocketServer, and
for every accepted connection runs the whole pipeline to completion
before the next client is accepted.

=============================================================================
REQUEST PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept()                                                           │
    │      │                                                               │
    │      ▼                                                               │
    │   read_request()      lines up to the first blank line               │
    │      │                (nothing read → close, no response)           │
    │      ▼                                                               │
    │   parse_request()     second token of line 0, default "/"           │
    │      │                                                               │
    │      ▼                                                               │
    │   resolve             "/" → ./srv/index.html, else ./srv + path     │
    │      │                                                               │
    │      ▼                                                               │
    │   read file           error → "<p>Error: ...</p>"                    │
    │      │                                                               │
    │      ▼                                                               │
    │   content type        from the extension, default text/plain        │
    │      │                                                               │
    │      ▼                                                               │
    │   send head, send body                                               │
    │      │                                                               │
    │      ▼                                                               │
    │   close                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURES
=============================================================================

    Bind fails             BindError from the constructor (fatal)
    accept() fails         logged, keep accepting
    Request unreadable     logged, connection dropped, keep accepting
    File unreadable        error fragment as body, still 200 OK
    Head write fails       logged, body skipped
    Body write fails       logged

No failure is ever reported to the client with a non-200 status.

=============================================================================
"""

import sys
import logging
from typing import List, Optional, Sequence, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .exceptions import RequestReadError, ResponseWriteError
from .handlers import StaticFileHandler
from .http import HTTPRequest, HTTPResponse, parse_request, filename_to_content_type


logger = logging.getLogger(__name__)


class Server:
    """
    Single-threaded static file server.

    The listening socket is bound in the constructor, so a port conflict
    surfaces immediately as BindError.

    Example:
        server = Server.new("localhost:6969")
        server.start()   # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Bind the server.

        Args:
            config: Server configuration. Defaults to localhost:6969 serving ./srv.

        Raises:
            ValueError: If the configuration is invalid.
            BindError: If the listening socket can't be bound.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._setup_logging()

        self._static = StaticFileHandler(
            self.config.doc_root,
            index_file=self.config.index_file,
            confine_to_root=self.config.confine_to_root,
        )

        self._socket_server = SocketServer(self.config)
        self._socket_server.bind()

    @classmethod
    def new(cls, address: str, **kwargs) -> "Server":
        """
        Create a server bound to a "host:port" address.

        Extra keyword arguments are passed on to ServerConfig.
        """
        return cls(ServerConfig.from_address(address, **kwargs))

    @property
    def address(self) -> Tuple[str, int]:
        """The address actually bound (useful when port 0 was requested)."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        """
        Serve connections one at a time until shutdown() (or Ctrl+C).
        """
        self._print_startup_banner()
        self._socket_server.start(self._process_connection)
        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. The current one, if any, is finished first."""
        self._socket_server.shutdown()

    def close(self):
        """Release the listening socket without serving (start() does this itself on exit)."""
        self._socket_server.close()

    def _print_startup_banner(self):
        """Print server startup information."""
        host, port = self.address
        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"  tinyhttpd serving {self.config.doc_root}")
        print(f"  http://{host}:{port}")
        print("  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            stream=sys.stdout,
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """
        Accept-loop callback.

        An unexpected error while serving one client is logged and the
        server moves on to the next.
        """
        try:
            self.handle_connection(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")

    def handle_connection(self, conn: Connection):
        """
        Serve one connection and close it.

        Args:
            conn: The accepted client connection.
        """
        with conn:
            try:
                lines = self.read_request(conn)
            except RequestReadError as e:
                logger.error(f"[{conn.id}] Error reading request: {e}")
                return

            request = HTTPRequest(lines)
            if request.is_empty:
                logger.debug(f"[{conn.id}] Empty request, closing")
                return

            logger.info(f"[{conn.id}] Received request from {conn.client_ip}:{conn.client_port}:\n{request.dump()}")

            conn.state = ConnectionState.RESOLVING
            path = self.parse_request(request.lines)
            file_path = self._static.resolve(path)
            body = self._static.read_file_bytes(file_path)

            response = HTTPResponse(
                content_type=self.filename_to_content_type(file_path),
                body=body,
            )

            logger.info(
                f"[{conn.id}] Sending response\n"
                f"    Path: {file_path}\n"
                f"    Content-Type: {response.content_type}\n"
                f"    Content-Length: {response.content_length}"
            )

            try:
                conn.send(response.head())
            except ResponseWriteError as e:
                logger.error(f"[{conn.id}] Error sending response headers: {e}")
                return

            try:
                conn.send(response.body)
            except ResponseWriteError as e:
                logger.error(f"[{conn.id}] Error sending content: {e}")

    def read_request(self, conn: Connection) -> List[str]:
        """Read the request head lines from a connection."""
        return conn.read_request()

    def parse_request(self, lines: Sequence[str]) -> str:
        """Extract the request path from the request lines."""
        return parse_request(lines)

    def filename_to_content_type(self, path: str) -> str:
        """Content-Type for a filesystem path."""
        return filename_to_content_type(path)
