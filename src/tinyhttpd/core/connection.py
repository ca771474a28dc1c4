"""
=============================================================================
CONNECTION HANDLING
=============================================================================

This module wraps a single accepted client socket with the three things
the server needs from it: read the request head as lines, write bytes
back, and close cleanly.

=============================================================================
READING LINES FROM A BYTE STREAM
=============================================================================

TCP delivers bytes, not lines. A request head might arrive in one recv()
or spread over many:

    First recv():  "GET /index.ht"
    Second recv(): "ml HTTP/1.1\\r\\nHost: loc"
    Third recv():  "alhost\\r\\n\\r\\n"

Instead of stitching chunks together by hand we wrap the socket in a
buffered binary file (socket.makefile("rb")) and call readline(). The
buffer takes care of partial reads; we only see complete lines.

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   readline() ──► b"GET / HTTP/1.1\\r\\n"  ──► "GET / HTTP/1.1"    │
    │   readline() ──► b"Host: localhost\\r\\n" ──► "Host: localhost"   │
    │   readline() ──► b"\\r\\n"                ──► ""  (stop here)      │
    │                                                                  │
    │   readline() ──► b""  (peer closed)     ──► stop, keep lines    │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Only the head is read. There is no request body support, so anything the
client sends after the blank line is ignored.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► RESOLVING ──► RESPONDING ──► CLOSED
             │                                          ▲
             └──────────────────────────────────────────┘
                  (empty request or read error)

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, BinaryIO

from ..exceptions import RequestReadError, ResponseWriteError


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of a client connection."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request head
    RESOLVING = "resolving"    # Mapping the path and reading the file
    RESPONDING = "responding"  # Writing head and body
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket returned by accept().
        address: Client's (ip, port) tuple.
        id: Short identifier used to tag log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_sent: Total bytes written to the client.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0

    # Most bytes close() discards from the receive buffer. The drain never blocks.
    drain_limit: int = 64 * 1024

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Blocking with no timeout: a silent client holds the server until
        # it sends a blank line or disconnects.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> List[str]:
        """
        Read the request head as a list of text lines.

        Lines are split on "\\n" with an optional trailing "\\r" removed.
        Reading stops at the first empty line, which is not included.
        If the client closes the connection first, whatever was read so
        far is returned (an empty list if nothing arrived at all).

        Returns:
            The request lines in order.

        Raises:
            RequestReadError: If a line is not valid UTF-8 or the socket
                fails while reading.
        """
        self.state = ConnectionState.READING

        if self._reader is None:
            self._reader = self.socket.makefile("rb")

        lines: List[str] = []
        while True:
            try:
                raw = self._reader.readline()
            except OSError as e:
                raise RequestReadError(f"Socket error while reading request: {e}") from e

            if not raw:
                break  # Peer closed before the blank line

            try:
                line = self._strip_line_ending(raw).decode("utf-8")
            except UnicodeDecodeError as e:
                raise RequestReadError(f"Request line is not valid UTF-8: {e}") from e

            if not line:
                break  # End of head

            lines.append(line)

        return lines

    @staticmethod
    def _strip_line_ending(raw: bytes) -> bytes:
        """Remove a trailing "\\n" and then a trailing "\\r", if present."""
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
        return raw

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Write all of data to the client.

        Uses sendall() so a partial write never goes unnoticed.

        Raises:
            ResponseWriteError: If the client is gone or the write fails.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
        except OSError as e:
            raise ResponseWriteError(str(e)) from e

        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        Sends FIN first (shutdown SHUT_WR) so the client sees a clean end
        of the response, discards whatever input is already buffered, then
        releases the file descriptor. Nothing here waits on the client, so
        a peer that keeps its end open (or keeps trickling bytes) doesn't
        hold up the accept loop.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Client already gone

        self._discard_pending_input()

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass
            self._reader = None

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s, {self.bytes_sent} bytes sent")

    def _discard_pending_input(self):
        """
        Read and drop input that has already arrived, without blocking.

        Unread data left in the kernel buffer turns close() into a RST,
        which can destroy the response before the client reads it.
        """
        drained = 0
        try:
            self.socket.setblocking(False)
            while drained < self.drain_limit:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break  # Peer finished sending
                drained += len(chunk)
        except OSError:
            pass  # Nothing more buffered (BlockingIOError) or reset

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
