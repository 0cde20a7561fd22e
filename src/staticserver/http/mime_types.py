"""
=============================================================================
CONTENT TYPE RESOLUTION
=============================================================================

Maps a file's extension to the Content-Type sent with it.

    ┌────────────────────────────────────────────────────────────────────┐
    │  .html .htm     → text/html                                        │
    │  .css           → text/css                                         │
    │  .js            → application/javascript                           │
    │  .json          → application/json                                 │
    │  .png           → image/png                                        │
    │  .jpg .jpeg     → image/jpeg                                       │
    │  .gif           → image/gif                                        │
    │  anything else  → application/octet-stream                         │
    └────────────────────────────────────────────────────────────────────┘

Lookup is an exact, case-sensitive match: "logo.PNG" is served as
application/octet-stream. No charset parameter is appended.

=============================================================================
"""

from pathlib import PurePath
from typing import Union


CONTENT_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
}

# Unknown or missing extension: "treat as opaque binary"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_extension(path: Union[str, PurePath]) -> str:
    """
    Return the extension of the last path component, dot included.

        >>> get_extension("/www/archive.tar.gz")
        '.gz'
        >>> get_extension("/www/README")
        ''
    """
    return PurePath(path).suffix


def get_content_type(path: Union[str, PurePath]) -> str:
    """
    Get the Content-Type header value for a file path.

    Examples:
        >>> get_content_type("/www/index.html")
        'text/html'

        >>> get_content_type("logo.png")
        'image/png'

        >>> get_content_type("data.xyz")
        'application/octet-stream'
    """
    return CONTENT_TYPES.get(get_extension(path), DEFAULT_CONTENT_TYPE)
