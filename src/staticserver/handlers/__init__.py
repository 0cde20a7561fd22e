"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    static.py   StaticFileHandler - maps GET targets onto the document root

    handler = StaticFileHandler("./www")
    response = handler.handle(request)

=============================================================================
"""

from .static import StaticFileHandler

__all__ = [
    "StaticFileHandler",
]
