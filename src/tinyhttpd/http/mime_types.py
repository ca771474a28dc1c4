"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type header value.

=============================================================================
HOW THE LOOKUP WORKS
=============================================================================

The extension is whatever follows the LAST dot in the path. It is looked
up as-is in a small fixed table. There is no content sniffing and no
case folding:

    "./srv/index.html"     → "html"        → text/html
    "./srv/app.js"         → "js"          → text/javascript
    "./srv/photo.PNG"      → "PNG"         → text/plain  (not in table)
    "./srv/README"         → "/srv/README" → text/plain  (no extension)

Anything not in the table is served as text/plain.

=============================================================================
"""

from pathlib import PurePath
from typing import Union


CONTENT_TYPES = {
    "gif": "image/gif",
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
}

DEFAULT_CONTENT_TYPE = "text/plain"


def get_extension(path: Union[str, PurePath]) -> str:
    """
    Return the text after the last "." in path.

    If there is no dot the whole path comes back, which never matches a
    table entry.
    """
    return str(path).rsplit(".", 1)[-1]


def filename_to_content_type(path: Union[str, PurePath]) -> str:
    """
    Get the Content-Type for a file path.

    Args:
        path: File path or name.

    Returns:
        The MIME type from CONTENT_TYPES, or "text/plain".

    Examples:
        >>> filename_to_content_type("style.css")
        'text/css'

        >>> filename_to_content_type("photo.PNG")
        'text/plain'
    """
    return CONTENT_TYPES.get(get_extension(path), DEFAULT_CONTENT_TYPE)
