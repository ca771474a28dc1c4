"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

The server only cares about one thing in a request: the path.

=============================================================================
HTTP REQUEST HEAD
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /style.css HTTP/1.1          ← Request line (line 0)           │
    │  Host: localhost:6969             ← Headers (read, then ignored)    │
    │  Accept: text/css                                                   │
    │                                   ← Blank line ends the head       │
    └─────────────────────────────────────────────────────────────────────┘

The request line is split on whitespace and the second token is the path.
Nothing is validated: the method can be anything, the version can be
missing, and a request line with no path at all is treated as "/".

    "GET /style.css HTTP/1.1"  →  "/style.css"
    "GET"                      →  "/"
    ""                         →  "/"
    "FOO /a/b"                 →  "/a/b"

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Sequence


DEFAULT_PATH = "/"


def parse_request(lines: Sequence[str]) -> str:
    """
    Extract the request path from the request lines.

    Never fails: missing lines or tokens fall back to "/".

    Args:
        lines: Request head lines as returned by Connection.read_request().

    Returns:
        The second whitespace-separated token of the first line.

    Examples:
        >>> parse_request(["GET /index.html HTTP/1.1", "Host: x"])
        '/index.html'

        >>> parse_request(["GET"])
        '/'
    """
    request_line = lines[0] if lines else ""
    tokens = request_line.split()
    return tokens[1] if len(tokens) > 1 else DEFAULT_PATH


@dataclass
class HTTPRequest:
    """
    A received request head.

    Keeps the raw lines around for logging. The path comes from
    parse_request(lines).
    """

    lines: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the client sent nothing before closing."""
        return not self.lines

    def dump(self) -> str:
        """Format the request lines for the log, one per line."""
        return "\n".join(f"    {line!r}" for line in self.lines)
