"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the file server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Binds the listening socket at startup                            │
    │  • Runs the accept() loop                                           │
    │  • Calls the handler for each connection, one at a time             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One connection at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps a client socket                                            │
    │  • Reads the request head line by line                              │
    │  • Writes the response and closes                                   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
