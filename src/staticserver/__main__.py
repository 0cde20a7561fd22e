"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m staticserver <port> <doc_root> [options]

    # Serve ./www on port 8080, all interfaces
    python -m staticserver 8080 ./www

    # Localhost only, verbose, drop clients silent for 10s
    python -m staticserver 8080 ./www --host 127.0.0.1 -l DEBUG --timeout 10

The entry point is responsible for everything the server core assumes:
the arguments parse, the document root exists and is a directory. Any
fatal problem is printed to stderr and the process exits with status 1.

=============================================================================
"""

import argparse
import os
import sys

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .core import BindError
from .server import StaticServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Minimal HTTP/1.1 static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  staticserver 8080 ./www                     # Serve ./www on port 8080
  staticserver 8080 ./www --host 127.0.0.1    # Localhost only
  staticserver 8080 ./www --timeout 10        # Drop clients idle for 10s
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUIRED
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("port", type=int, help="Port to listen on")
    parser.add_argument("doc_root", help="Directory to serve files from")

    # ─────────────────────────────────────────────────────────────────────
    # OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="Address to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--backlog", "-b",
        type=int,
        default=128,
        help="Listen backlog (default: 128)",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}",
    )

    return parser


def check_doc_root(doc_root: str) -> None:
    """
    Exit with status 1 unless doc_root is an existing directory.
    """
    if not os.path.exists(doc_root):
        print(f"Document root directory does not exist: {doc_root}", file=sys.stderr)
        sys.exit(1)

    if not os.path.isdir(doc_root):
        print(f"Document root is not a directory: {doc_root}", file=sys.stderr)
        sys.exit(1)


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)

    check_doc_root(args.doc_root)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        doc_root=args.doc_root,
        backlog=args.backlog,
        read_timeout=args.timeout,
        log_level=args.log_level,
    )

    try:
        server = StaticServer(config)
        server.run()
    except (BindError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
