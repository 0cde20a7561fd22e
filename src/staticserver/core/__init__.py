"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    listener.py    Listener - binds the port, runs the accept loop
    connection.py  Connection - one socket, one request, one response

    ┌──────────┐  accept()   ┌────────────┐   thread    ┌────────────────┐
    │ Listener │ ──────────► │ Connection │ ──────────► │ READING → ...  │
    └──────────┘             └────────────┘             │ ... → CLOSED   │
         ▲                                              └────────────────┘
         └── loops immediately, never waits on the connection

=============================================================================
"""

from .listener import Listener, BindError
from .connection import Connection, ConnectionState

__all__ = [
    "Listener",         # Accept loop
    "BindError",        # Fatal startup failure
    "Connection",       # Per-connection pipeline
    "ConnectionState",  # READING / PROCESSING / WRITING / CLOSED
]
