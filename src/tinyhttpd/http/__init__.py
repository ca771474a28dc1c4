"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Just enough HTTP/1.1 to serve files:

    request.py     Pull the path out of the request line
    mime_types.py  Pick a Content-Type from the file extension
    response.py    Build the always-200 status line, headers and body

=============================================================================
"""

from .request import HTTPRequest, parse_request
from .response import HTTPResponse
from .mime_types import CONTENT_TYPES, DEFAULT_CONTENT_TYPE, filename_to_content_type

__all__ = [
    "HTTPRequest",
    "parse_request",
    "HTTPResponse",
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "filename_to_content_type",
]
