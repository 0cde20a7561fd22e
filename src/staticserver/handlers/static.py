"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Turns a parsed request into a response by reading a file from the
document root.

=============================================================================
DISPATCH
=============================================================================

    ┌──────────────────────────────────────────────────────────────────────┐
    │  method != GET ───────────────────────► 400 "Invalid request method." │
    │                                                                       │
    │  GET target                                                           │
    │    │                                                                  │
    │    ├─ "/" → "/index.html"                                             │
    │    ├─ path = doc_root + target                                        │
    │    ├─ outside doc_root or missing ───► 404 "File not found: <t>"      │
    │    ├─ open() fails ──────────────────► 500 "Error opening file: <t>"  │
    │    ├─ read() fails ──────────────────► 500 "Exception: <message>"     │
    │    └─ otherwise ─────────────────────► 200, Content-Type by extension │
    └──────────────────────────────────────────────────────────────────────┘

=============================================================================
PATH HANDLING
=============================================================================

The filesystem path is the document root and the raw target glued
together as strings. The target is not URL-decoded, and a query string
is part of the file name ("/a.html?v=2" looks for a file literally named
"a.html?v=2").

A target that climbs out of the document root ("/../secret.txt") is
answered exactly like a missing file. The check is lexical (os.path.abspath),
so symlinks placed inside the root still work.

=============================================================================
"""

import os
import logging

from ..http.request import HTTPRequest, Method
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    bad_request, not_found, internal_error,
)
from ..http.mime_types import get_content_type


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Serves files from a single document root.

    The handler holds no mutable state, so one instance is shared by every
    connection thread.

    Usage:
        handler = StaticFileHandler("/var/www")
        response = handler.handle(request)
    """

    def __init__(self, doc_root: str, index_file: str = "index.html"):
        """
        Args:
            doc_root: Directory to serve. Existence is checked by the caller
                      at startup, not here.
            index_file: File served for the target "/".
        """
        self._doc_root = doc_root
        self._root_abs = os.path.abspath(doc_root)
        self.index_file = index_file

    @property
    def doc_root(self) -> str:
        return self._doc_root

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Build the response for a request.

        Never raises for file problems; those become 404/500 responses.
        """
        if request.verb is not Method.GET:
            return bad_request("Invalid request method.\n")

        return self.handle_get(request.target)

    def handle_get(self, target: str) -> HTTPResponse:
        """Serve the file named by a GET target."""
        if target == "/":
            target = "/" + self.index_file

        path = self.resolve(target)

        if not self._is_inside_root(path):
            logger.warning(f"Path traversal attempt: {target}")
            return not_found(f"File not found: {target}\n")

        if not os.path.exists(path):
            return not_found(f"File not found: {target}\n")

        try:
            file = open(path, "rb")
        except OSError as e:
            logger.warning(f"Cannot open {path}: {e}")
            return internal_error(f"Error opening file: {target}\n")

        try:
            with file:
                content = file.read()
        except Exception as e:
            logger.error(f"Error reading {path}: {e}")
            return internal_error(f"Exception: {e}\n")

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type(get_content_type(path))
            .body(content)
            .build())

    def resolve(self, target: str) -> str:
        """Filesystem path for a target: plain concatenation."""
        return self._doc_root + target

    def _is_inside_root(self, path: str) -> bool:
        candidate = os.path.abspath(path)
        if candidate == self._root_abs:
            return True

        prefix = self._root_abs.rstrip(os.sep) + os.sep
        return candidate.startswith(prefix)
