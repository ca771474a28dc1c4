"""
=============================================================================
HTTP RESPONSE
=============================================================================

Every response this server sends has the same shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\\r\\n                  ← Status line (always 200)  │
    │  Content-Type: text/html\\r\\n          ← From the file extension    │
    │  Content-Length: 1234\\r\\n             ← len(body)                  │
    │  \\r\\n                                 ← End of head                │
    │  <!DOCTYPE html>...                   ← Body bytes                 │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY ALWAYS 200?
=============================================================================

A file that can't be read is still answered with 200 OK; the problem is
only visible in the body ("<p>Error: ...</p>"). Clients that look at the
status code alone cannot tell a missing file from a real one. This is
how the server behaves, not an oversight in this module: a response with
a different status is never built.

=============================================================================
HEAD AND BODY ARE SENT SEPARATELY
=============================================================================

head() and body are written with two separate sendall() calls. If the
head can't be written the body is never attempted.

=============================================================================
"""

from dataclasses import dataclass
from http import HTTPStatus


@dataclass
class HTTPResponse:
    """
    A response ready to be written to the socket.

    Content-Length is always computed from the body, so the header can
    never disagree with the bytes actually sent.
    """

    content_type: str
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status(self) -> HTTPStatus:
        return HTTPStatus.OK

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {self.status.value} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def headers(self) -> dict:
        """Response headers, in the order they are written."""
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(self.content_length),
        }

    def head(self) -> bytes:
        """
        Serialize the status line and headers, including the blank line.

        Returns:
            b"HTTP/1.1 200 OK\\r\\nContent-Type: ...\\r\\nContent-Length: ...\\r\\n\\r\\n"
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
