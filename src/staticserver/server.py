"""
=============================================================================
STATIC SERVER
=============================================================================

Process-level wiring: configure logging, start the Listener, announce
the server, and run the accept loop until a signal or Ctrl+C stops it.

    StaticServer.run()
        │
        ├──► config.validate()        ValueError on bad settings
        ├──► _setup_logging()
        ├──► Listener.start()         BindError if the port is unavailable
        ├──► "Server started on port ..." / "Document root: ..."
        ├──► _setup_signals()         SIGINT / SIGTERM → shutdown()
        └──► Listener.run()           blocks
                 │
                 ▼
             Listener.close()         always, on the way out

Shutdown stops accepting. Connections already running finish on their
own daemon threads or die with the process.

=============================================================================
"""

import signal
import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import Listener


logger = logging.getLogger(__name__)


class StaticServer:
    """
    Serves files from a document root over HTTP/1.1.

    Usage:
        server = StaticServer(ServerConfig(port=8080, doc_root="./www"))
        server.run()   # blocks until SIGINT/SIGTERM
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._listener = Listener(self.config)
        self._original_handlers: dict = {}

    @property
    def listener(self) -> Listener:
        return self._listener

    @property
    def address(self) -> Tuple[str, int]:
        return self._listener.address

    def start(self) -> None:
        """
        Bind the port without entering the accept loop.

        Raises:
            BindError: If the port cannot be bound.
        """
        self._listener.start(self.config.port, self.config.doc_root)

        logger.info(f"Server started on port {self.address[1]}")
        logger.info(f"Document root: {self.config.doc_root}")

    def run(self) -> None:
        """
        Start (if needed) and serve until shut down.

        Raises:
            BindError: If the port cannot be bound.
        """
        self._setup_logging()

        if not self._listener.is_bound:
            self.start()

        self._setup_signals()
        try:
            self._listener.run()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._restore_signals()
            self._listener.close()

    def shutdown(self) -> None:
        """Ask the accept loop to stop. Safe from any thread."""
        self._listener.shutdown()

    def _setup_logging(self) -> None:
        """Configure root logging from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticserver").setLevel(level)

    def _setup_signals(self) -> None:
        """
        Route SIGINT and SIGTERM to a graceful shutdown.

        Python only allows signal handlers on the main thread; when the
        server runs elsewhere (tests, embedding) this is skipped.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
