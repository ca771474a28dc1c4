"""
Exceptions raised at the socket boundary.

Each one wraps the underlying OSError (available as ``__cause__``) and
carries enough context for a useful log line. None of them ever turn into
an HTTP error status: the server either fails at startup (BindError) or
drops the single connection that caused the problem.
"""

from typing import Tuple


class BindError(Exception):
    """
    Raised when the listening socket cannot be bound.

    Typical causes: the port is already in use, the host name does not
    resolve, or the port needs privileges we don't have.
    """

    def __init__(self, address: Tuple[str, int], reason: str):
        super().__init__(f"Failed to bind to {address[0]}:{address[1]}: {reason}")
        self.address = address
        self.reason = reason


class RequestReadError(Exception):
    """Raised when the request head cannot be read or decoded."""


class ResponseWriteError(Exception):
    """Raised when writing to the client socket fails."""
