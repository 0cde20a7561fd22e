"""
=============================================================================
CONNECTION PIPELINE
=============================================================================

One Connection owns one accepted socket and serves exactly one
request-response cycle on it. There is no keep-alive: after the response
is written the socket is shut down and closed.

=============================================================================
STATE MACHINE
=============================================================================

    ┌──────────┐  head framed   ┌────────────┐  response   ┌─────────┐
    │ READING  │ ─────────────► │ PROCESSING │ ──────────► │ WRITING │
    └────┬─────┘  and parsed    └────────────┘   built     └────┬────┘
         │                                                      │
         │ I/O error, EOF, oversized or malformed head          │ always
         │ (no response is sent)                                │
         ▼                                                      ▼
    ┌───────────────────────────────────────────────────────────────┐
    │                           CLOSED                              │
    └───────────────────────────────────────────────────────────────┘

No state is ever revisited.

=============================================================================
FRAMING
=============================================================================

TCP is a byte stream, so the head may arrive in any number of recv()
chunks. Bytes are accumulated in a buffer of fixed capacity until the
blank line (\r\n\r\n) shows up:

    recv() → "GET /index.ht"
    recv() → "ml HTTP/1.1\r\nHost: a\r\n"
    recv() → "\r\n"                         ← head complete

If the buffer fills before the terminator appears the request is dropped.
A request body is read and thrown away, so that closing the socket
afterwards does not reset the connection under the client's feet:

    Content-Length: N           exactly N bytes
    Transfer-Encoding: chunked  size line, data, CRLF ... "0", trailers
    any other Transfer-Encoding left to the post-write drain

Both framed bodies are bounded by max_body_size. After the response is
written the socket is drained for at most DRAIN_TIMEOUT seconds and
DRAIN_LIMIT bytes in total, whatever the client keeps sending.

=============================================================================
FAILURE HANDLING
=============================================================================

    Before a request exists   → drop silently, no response
    After a request exists    → always answer (400 / 404 / 500)
    Write or shutdown failure → logged, swallowed

Nothing raised inside a Connection escapes its thread.

=============================================================================
"""

import re
import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..http.request import HTTPRequest, RequestParser, HTTPParseError
from ..http.response import HTTPResponse, internal_error
from ..handlers.static import StaticFileHandler


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("staticserver.access")

DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024

CHUNK_SIZE_PATTERN = re.compile(rb"[0-9A-Fa-f]+")


class ConnectionState(Enum):
    """Connection lifecycle states, in the only order they can occur."""
    READING = "reading"        # Framing and parsing the request head
    PROCESSING = "processing"  # Building the response
    WRITING = "writing"        # Sending the response
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A single accepted client socket and its one request-response cycle.

    Attributes:
        socket: The accepted client socket (owned exclusively).
        address: Client's (ip, port) tuple.
        handler: Shared, read-only static file handler.
        id: Short identifier used in log lines.
        state: Current pipeline state.
        buffer_size: Capacity of the head-framing buffer.
        max_body_size: Largest request body that is read and discarded.
        timeout: Per-operation socket timeout; None blocks forever.
    """

    socket: socket.socket
    address: tuple
    handler: StaticFileHandler

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.READING
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    max_body_size: int = 1024 * 1024
    timeout: Optional[float] = None

    request: Optional[HTTPRequest] = field(default=None, repr=False)
    response: Optional[HTTPResponse] = field(default=None, repr=False)

    _parser: RequestParser = field(default_factory=RequestParser, repr=False)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's accept timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def serve(self) -> None:
        """
        Run the whole pipeline: read, process, write, close.

        This is the body of the connection's thread.
        """
        with self:
            try:
                request = self.read_request()
                if request is None:
                    return

                response = self.process_request(request)
                if self.write_response(response):
                    self._log_access(request, response)

            except Exception as e:
                logger.exception(f"[{self.id}] Connection error: {e}")

    def read_request(self) -> Optional[HTTPRequest]:
        """
        READING: frame and parse the request head.

        Returns:
            The parsed request, or None if the connection should be dropped
            without a response.
        """
        self.state = ConnectionState.READING

        try:
            head, leftover = self._read_head()
            request = self._parser.parse(head, self.address)
            if request.chunked:
                self._discard_chunked(bytearray(leftover))
            elif "transfer-encoding" not in request.headers:
                self._discard_body(request.content_length, len(leftover))

        except HTTPParseError as e:
            logger.debug(f"[{self.id}] Dropping connection: {e}")
            return None

        except socket.timeout:
            logger.debug(f"[{self.id}] Read timed out")
            return None

        except OSError as e:
            logger.debug(f"[{self.id}] Read failed: {e}")
            return None

        self.request = request
        return request

    def process_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        PROCESSING: build the response for a parsed request.

        Always produces a response; a handler crash becomes a 500.
        """
        self.state = ConnectionState.PROCESSING

        try:
            response = self.handler.handle(request)
        except Exception as e:
            logger.exception(f"[{self.id}] Handler error: {e}")
            response = internal_error(f"Exception: {e}\n")

        response.version = request.version
        response.close_connection()

        self.response = response
        return response

    def write_response(self, response: HTTPResponse) -> bool:
        """
        WRITING: send the response, then shut down our half of the socket.

        Returns:
            True if every byte was handed to the kernel.
        """
        self.state = ConnectionState.WRITING
        response.set_content_length()

        try:
            self.socket.sendall(response.to_bytes())
            sent = True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            sent = False

        # FIN to the client; it may already be gone
        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError as e:
            logger.debug(f"[{self.id}] Shutdown failed: {e}")

        return sent

    def close(self) -> None:
        """
        CLOSED: release the socket. Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        if self.state == ConnectionState.WRITING:
            self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        self.request = None
        self.response = None
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    # =========================================================================
    # FRAMING HELPERS
    # =========================================================================

    def _read_head(self) -> tuple:
        """
        Receive until the head terminator is in the buffer.

        Returns:
            (head bytes including the terminator, bytes received past it)
        """
        buffer = bytearray()

        while True:
            end = buffer.find(b"\r\n\r\n")
            if end != -1:
                return bytes(buffer[:end + 4]), bytes(buffer[end + 4:])

            if len(buffer) >= self.buffer_size:
                raise HTTPParseError(f"Request head exceeds {self.buffer_size} bytes")

            chunk = self.socket.recv(self.buffer_size - len(buffer))
            if not chunk:
                raise HTTPParseError("Connection closed before request head was complete")

            buffer += chunk

    def _discard_body(self, content_length: int, already_read: int) -> None:
        if content_length > self.max_body_size:
            raise HTTPParseError(f"Request body too large: {content_length} bytes")

        remaining = content_length - already_read
        while remaining > 0:
            chunk = self.socket.recv(min(self.buffer_size, remaining))
            if not chunk:
                raise HTTPParseError("Connection closed mid-body")
            remaining -= len(chunk)

    def _discard_chunked(self, buffer: bytearray) -> None:
        """
        Consume a chunked body: size lines, chunk data, then trailers.

        `buffer` holds whatever was received past the head.
        """
        total = 0

        while True:
            line = self._read_line(buffer)
            size_text = line.split(b";", 1)[0].strip()
            if not CHUNK_SIZE_PATTERN.fullmatch(size_text):
                raise HTTPParseError(f"Invalid chunk size line: {line!r}")

            size = int(size_text, 16)
            if size == 0:
                break

            total += size
            if total > self.max_body_size:
                raise HTTPParseError(f"Request body too large: over {self.max_body_size} bytes")

            self._skip(buffer, size)
            if self._read_line(buffer):
                raise HTTPParseError("Chunk data not followed by CRLF")

        # Trailer section ends with an empty line
        while self._read_line(buffer):
            pass

    def _read_line(self, buffer: bytearray) -> bytes:
        """Pop one CRLF-terminated line off the buffer, receiving as needed."""
        while True:
            end = buffer.find(b"\r\n")
            if end != -1:
                line = bytes(buffer[:end])
                del buffer[:end + 2]
                return line

            if len(buffer) >= self.buffer_size:
                raise HTTPParseError(f"Chunk line exceeds {self.buffer_size} bytes")

            chunk = self.socket.recv(self.buffer_size)
            if not chunk:
                raise HTTPParseError("Connection closed mid-body")
            buffer += chunk

    def _skip(self, buffer: bytearray, count: int) -> None:
        """Throw away `count` body bytes, taking them from the buffer first."""
        taken = min(count, len(buffer))
        del buffer[:taken]
        self._discard_body(count, taken)

    def _drain(self) -> None:
        """
        Read and discard client input until EOF, DRAIN_TIMEOUT seconds in
        total, or DRAIN_LIMIT bytes, whichever comes first.

        close() on a socket with unread input sends RST instead of FIN.
        """
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break

                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass

    def _log_access(self, request: HTTPRequest, response: HTTPResponse) -> None:
        access_logger.info(
            f'{self.client_ip} "{request.request_line}" '
            f'{int(response.status)} {len(response.body)} '
            f'{self.age * 1000:.2f}ms'
        )

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure the socket is released however the pipeline ended."""
        self.close()
        return False
