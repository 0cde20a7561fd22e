"""
=============================================================================
LISTENER: BIND AND ACCEPT
=============================================================================

The Listener owns the listening TCP socket. Its only job is to keep
admitting connections; all request work happens elsewhere.

=============================================================================
ACCEPT LOOP
=============================================================================

    start(port, doc_root)
        │
        ├──► socket()  + SO_REUSEADDR + TCP_NODELAY
        ├──► bind()    ── fails ──► BindError (fatal, no retry)
        └──► listen(backlog)

    run()
        │
        └──► while running:
                accept() ────── timeout ──► loop (re-check running)
                   │   └─────── OSError ──► log, keep accepting
                   ▼
                Connection(client_socket, doc_root handler)
                   │
                   ▼
                Thread(target=conn.serve).start()    ← fire and forget

The loop never waits for a connection to finish and never limits how many
are alive at once. The kernel's listen backlog and the process's thread
and file-descriptor limits are the only bounds.

=============================================================================
ACCEPT TIMEOUT
=============================================================================

accept() on a blocking socket cannot be interrupted from another thread.
A short timeout lets the loop notice shutdown() within poll_interval
seconds. A timeout is not an accept failure.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Tuple

from ..config import ServerConfig
from ..handlers.static import StaticFileHandler
from .connection import Connection


logger = logging.getLogger(__name__)


class BindError(OSError):
    """
    Raised when the listening socket cannot be bound.

    Typical causes: the port is in use, or it is privileged (< 1024) and
    the process is not.
    """

    def __init__(self, host: str, port: int, reason: OSError):
        super().__init__(f"Failed to bind to {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class Listener:
    """
    Accepts TCP connections and hands each one to its own Connection thread.

    Usage:
        listener = Listener(config)
        listener.start(8080, "./www")   # raises BindError
        listener.run()                  # blocks until shutdown()
        listener.close()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Supplies host, backlog, poll interval and the per-
                    connection framing limits and timeout.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._handler: Optional[StaticFileHandler] = None

        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (ip, port); reports the real port when 0 was requested."""
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    @property
    def doc_root(self) -> Optional[str]:
        return self._handler.doc_root if self._handler else None

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind right after a restart even with connections in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Inherited by accepted sockets on Linux
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.config.poll_interval)
        return sock

    def start(self, port: int, doc_root: str) -> None:
        """
        Bind and listen on (config.host, port).

        Args:
            port: TCP port; 0 picks a free one (see `address`).
            doc_root: Document root shared read-only by every connection.
                      Must already have been checked to be a directory.

        Raises:
            BindError: If the address cannot be bound.
            RuntimeError: If the listener was already started.
        """
        if self._socket is not None:
            raise RuntimeError("Listener already started")

        sock = self._create_socket()

        try:
            sock.bind((self.config.host, port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{port}: {e}")
            raise BindError(self.config.host, port, e) from e

        self._socket = sock
        self._handler = StaticFileHandler(doc_root)
        self._running = True

        host, bound_port = self.address
        logger.debug(f"Listening on {host}:{bound_port} (backlog {self.config.backlog})")

    def run(self) -> None:
        """
        Accept connections until shutdown() is called.

        A failed accept() is logged and the loop carries on.
        """
        sock = self._socket
        if sock is None:
            raise RuntimeError("Listener.run() called before start()")

        while self._running:
            try:
                client_socket, client_address = sock.accept()

            except socket.timeout:
                continue

            except OSError as e:
                if not self._running or sock.fileno() == -1:
                    break
                logger.warning(f"Accept failed: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
            self._dispatch(client_socket, client_address)

    def _dispatch(self, client_socket: socket.socket, client_address: tuple) -> None:
        """Wrap the socket in a Connection and start its thread."""
        conn = Connection(
            socket=client_socket,
            address=client_address,
            handler=self._handler,
            buffer_size=self.config.buffer_size,
            max_body_size=self.config.max_body_size,
            timeout=self.config.read_timeout,
        )

        thread = threading.Thread(
            target=conn.serve,
            name=f"Connection-{conn.id}",
            daemon=True,
        )

        try:
            thread.start()
        except RuntimeError as e:
            # Out of threads: this client loses, the loop does not
            logger.error(f"[{conn.id}] Could not start connection thread: {e}")
            conn.close()

    def shutdown(self) -> None:
        """
        Stop the accept loop. Idempotent and callable from any thread
        or a signal handler.
        """
        if self._running:
            logger.info("Shutting down listener...")
        self._running = False

    def close(self) -> None:
        """Close the listening socket. Live connections are not touched."""
        self._running = False

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
            logger.info("Listener stopped")
