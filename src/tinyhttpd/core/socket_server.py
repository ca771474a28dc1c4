"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

This module owns the listening socket: it binds it, runs the accept loop
and hands every accepted client to a callback, one at a time.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    Mark socket as a "listening" socket
    4. accept()    Wait for and accept an incoming connection
                   └─ Returns a NEW socket just for that client
    5. close()     Release the socket resources

Steps 1-3 happen in bind(), right when the server is constructed, so a
busy port is reported before anything else starts. Steps 4-5 happen in
start().

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

There is no thread pool. The callback runs on the accept loop's own
thread, so the next accept() only happens after the previous client has
been fully served:

    ┌─────────────────────────────────────────────────────────────────┐
    │                     Accept Loop Flow                             │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   while running:                                                 │
    │       accept()          ◄── client B waits in the backlog       │
    │          │                  while client A is being served      │
    │          ▼                                                       │
    │       Connection(...)                                            │
    │          │                                                       │
    │          ▼                                                       │
    │       handler(conn)     ◄── blocks until A is done              │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

A slow client therefore stalls every client behind it. Handing the
connection to a worker instead of calling the handler directly is the
natural place to add concurrency later; nothing else would change.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM call shutdown(), which makes the accept loop
exit at its next wake-up. Python only allows installing signal handlers
from the main thread, so when start() runs in a background thread (as in
the test suite) handlers are left alone and shutdown() is called directly.

The handler only flips a flag; it does not interrupt the connection being
served. Client sockets have no timeout, and Python retries a read that a
signal interrupted (PEP 475), so while a silent client sits inside
readline() Ctrl+C is only acted on once that client sends its blank line
or disconnects:

    client A connects, sends nothing
    Ctrl+C            ──► shutdown(): running = False
    readline()        ──► retried, still waiting on A
    A disconnects     ──► handler returns, loop sees running = False, exits

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..exceptions import BindError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Sequential TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            lines = conn.read_request()
            ...

        server = SocketServer(config)
        server.bind()                     # Raises BindError
        server.start(handle_connection)   # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if the accept loop is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the address the server is listening on.

        After bind() this is the real socket name, so a configured port
        of 0 shows up as the port the OS picked.
        """
        if self._socket is not None:
            name = self._socket.getsockname()
            return (name[0], name[1])
        return self.config.address

    def _create_socket(self, family: int) -> socket.socket:
        """Create a TCP socket with SO_REUSEADDR set."""
        sock = socket.socket(family, socket.SOCK_STREAM)

        # Lets the server restart immediately instead of waiting out
        # TIME_WAIT on the old socket.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Accept wakes up periodically so shutdown() is noticed.
        sock.settimeout(self.config.accept_poll_interval)
        return sock

    def bind(self):
        """
        Create the listening socket, bind it and start listening.

        Host names are resolved with getaddrinfo() and the first usable
        address wins, so "localhost" works whether it maps to 127.0.0.1
        or ::1.

        Raises:
            BindError: If the address can't be resolved or bound.
        """
        if self._socket is not None:
            return

        address = self.config.address

        try:
            candidates = socket.getaddrinfo(
                self.config.host, self.config.port,
                type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE,
            )
        except socket.gaierror as e:
            logger.error(f"Failed to resolve {address[0]}: {e}")
            raise BindError(address, str(e)) from e

        last_error: Optional[OSError] = None
        for family, _, _, _, sockaddr in candidates:
            sock = self._create_socket(family)
            try:
                sock.bind(sockaddr)
                sock.listen(self.config.backlog)
            except OSError as e:
                sock.close()
                last_error = e
                continue

            self._socket = sock
            logger.debug(f"Bound listening socket to {self.address[0]}:{self.address[1]}")
            return

        logger.error(f"Failed to bind to {address[0]}:{address[1]}: {last_error}")
        raise BindError(address, str(last_error)) from last_error

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that trigger shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown() is called.

        Binds first if bind() hasn't been called yet.

        Args:
            connection_handler: Called with each accepted connection. It runs
                                on this thread, so the next connection is not
                                accepted until it returns.
        """
        self.bind()

        self._running = True
        self._setup_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop: accept, hand off, repeat.

        Accept errors (e.g. too many open files, connection aborted during
        the handshake) are logged and the loop carries on.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Wake-up to check self._running
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Error accepting connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(socket=client_socket, address=client_address)
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from a signal handler or another thread, and safe to
        call more than once. A connection being served when this is called
        is finished first.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._restore_signals()
        self.close()
        logger.info("Socket server stopped")

    def close(self):
        """Close the listening socket. bind() can be called again afterwards."""
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None
