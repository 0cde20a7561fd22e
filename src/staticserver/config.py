"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables for the static file server live in one dataclass. The CLI
builds one from command-line arguments; embedders and tests build one
directly.

=============================================================================
CONFIGURATION GROUPS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  NETWORK         host, port, backlog, poll_interval                 │
    │  FRAMING         buffer_size, max_body_size                         │
    │  TIMEOUTS        read_timeout (None = wait forever)                 │
    │  CONTENT         doc_root                                           │
    │  LOGGING         log_level                                          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    Example:
        config = ServerConfig(port=8080, doc_root="./www")
        config.validate()
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IPv4 address to bind to.
    - "0.0.0.0" - All interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """Port to listen on. 0 asks the OS for any free port."""

    backlog: int = 128
    """
    Length of the kernel's pending-connection queue.
    This is the only limit on connection admission.
    """

    poll_interval: float = 1.0
    """
    How long accept() waits before re-checking for shutdown, in seconds.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FRAMING
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 8192
    """
    Capacity of the per-connection read buffer (8 KB).
    A request head (request line + headers) larger than this is dropped.
    """

    max_body_size: int = 1024 * 1024
    """
    Largest request body the server will read and discard (1 MB).
    """

    # ─────────────────────────────────────────────────────────────────────
    # TIMEOUTS
    # ─────────────────────────────────────────────────────────────────────

    read_timeout: Optional[float] = None
    """
    Per-operation socket timeout for connections, in seconds.
    None = no timeout, a silent client holds its thread indefinitely.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    doc_root: str = "."
    """Directory files are served from."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATIC_HOST       Bind address (default: 0.0.0.0)
        STATIC_PORT       Listen port (default: 8080)
        STATIC_DOC_ROOT   Document root (default: .)
        STATIC_TIMEOUT    Read timeout in seconds (default: none)
        STATIC_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("STATIC_TIMEOUT")
        return cls(
            host=os.getenv("STATIC_HOST", "0.0.0.0"),
            port=int(os.getenv("STATIC_PORT", "8080")),
            doc_root=os.getenv("STATIC_DOC_ROOT", "."),
            read_timeout=float(timeout) if timeout else None,
            log_level=os.getenv("STATIC_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails before any socket is bound.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
