"""
=============================================================================
STATICSERVER - Minimal HTTP/1.1 Static File Server
=============================================================================

Serves files from a document root, one request per TCP connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ARCHITECTURE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Listener          accept loop, one thread per connection          │
    │      │                                                               │
    │      ▼                                                               │
    │   Connection        READING → PROCESSING → WRITING → CLOSED          │
    │      │                                                               │
    │      ▼                                                               │
    │   StaticFileHandler GET → file, anything else → 400                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    staticserver/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m staticserver)
    ├── server.py            # StaticServer: logging, signals, run loop
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── listener.py      # Bind + accept loop
    │   └── connection.py    # Per-connection state machine
    ├── http/
    │   ├── request.py       # Request head parsing
    │   ├── response.py      # Response building
    │   ├── status_codes.py  # HTTP status enum
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # File lookup and error responses

=============================================================================
QUICK START
=============================================================================

    from staticserver import StaticServer, ServerConfig

    server = StaticServer(ServerConfig(port=8080, doc_root="./www"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import StaticServer
from .config import ServerConfig

__all__ = ["StaticServer", "ServerConfig", "__version__"]
