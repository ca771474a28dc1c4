"""
Request handlers.

The server has exactly one: StaticFileHandler, which maps a request path
to a file under the document root and reads it.
"""

from .static import StaticFileHandler

__all__ = [
    "StaticFileHandler",
]
