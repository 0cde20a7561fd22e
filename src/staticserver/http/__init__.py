"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    request.py       Request head parsing (HTTPRequest, RequestParser)
    response.py      Response assembly and serialization
    status_codes.py  The status codes the server emits
    mime_types.py    Extension → Content-Type table

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, Method, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    text_response,
    bad_request,    # 400 Bad Request
    not_found,      # 404 Not Found
    internal_error,  # 500 Internal Server Error
)
from .status_codes import HTTPStatus
from .mime_types import get_content_type, CONTENT_TYPES, DEFAULT_CONTENT_TYPE

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "Method",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "text_response",
    "bad_request",
    "not_found",
    "internal_error",

    # Status codes
    "HTTPStatus",

    # Content types
    "get_content_type",
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
]
