"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the framed head of a request (request line + headers, up to and
including the blank line) into an immutable HTTPRequest.

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /css/site.css HTTP/1.1\r\n     ← request line              │
    │  Host: localhost:8080\r\n           ← headers                   │
    │  Accept: text/css\r\n                                           │
    │  \r\n                               ← end of head               │
    └─────────────────────────────────────────────────────────────────┘

Only the request line drives behavior. Headers are parsed so that
Content-Length can be honored while framing and so malformed input is
recognized, but no header changes how a file is served.

=============================================================================
STRICTNESS
=============================================================================

A request the parser cannot make sense of never gets a response: the
connection is simply closed. So every rule below raises HTTPParseError
rather than guessing:

    - request line must be   TOKEN SP TARGET SP HTTP/1.x
    - every header line must be   NAME ":" VALUE   with a token NAME
    - Content-Length must be digits, and repeated values must agree
    - the head must be valid UTF-8

When Transfer-Encoding is present it overrides Content-Length (RFC 7230
3.3.3): content_length is reported as 0 and the body is framed by its
chunks instead.

The target is kept exactly as received: no URL decoding, no query string
splitting, no ".." handling. Mapping it onto the filesystem is the static
handler's job.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class HTTPParseError(Exception):
    """
    Raised when a request head is malformed or incomplete.

    Never reaches the client as a response; the connection that hit it
    is dropped.
    """


class Method(Enum):
    """The only distinction the server makes between request methods."""
    GET = "GET"
    OTHER = "OTHER"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request head.

    Attributes:
        method:         Method token exactly as sent ("GET", "POST", "FOO")
        target:         Request-target exactly as sent ("/", "/a%20b.html?x=1")
        version:        "HTTP/1.0" or "HTTP/1.1"
        headers:        Header name (lowercase) → value
        content_length: Declared body length, 0 when absent
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    target: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    content_length: int = 0
    client_address: tuple = ("", 0)

    @property
    def verb(self) -> Method:
        """Method.GET for GET (case-sensitive), Method.OTHER otherwise."""
        return Method.GET if self.method == "GET" else Method.OTHER

    @property
    def chunked(self) -> bool:
        """True when the last transfer coding is "chunked"."""
        codings = [c.strip().lower() for c in self.get_header("transfer-encoding").split(",")]
        return codings[-1] == "chunked"

    @property
    def request_line(self) -> str:
        return f"{self.method} {self.target} {self.version}"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses a framed request head into an HTTPRequest.

    Usage:
        parser = RequestParser()
        request = parser.parse(b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
    """

    # RFC 7230 tchar
    TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"

    REQUEST_LINE_PATTERN = re.compile(
        r"^(" + TOKEN + r") (\S+) HTTP/(\d)\.(\d)$"
    )
    HEADER_PATTERN = re.compile(r"^(" + TOKEN + r"):[ \t]*(.*?)[ \t]*$")

    def parse(self, head: bytes, client_address: tuple = ("", 0)) -> HTTPRequest:
        """
        Parse the head of a request.

        Args:
            head: Bytes up to and including the terminating b"\\r\\n\\r\\n".
                  Anything after the terminator is ignored.
            client_address: Peer (ip, port), carried on the request.

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: If the head is incomplete or malformed.
        """
        end = head.find(b"\r\n\r\n")
        if end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        try:
            text = head[:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Request head is not valid UTF-8: {e}") from e

        lines = text.split("\r\n")
        method, target, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        if "transfer-encoding" in headers:
            content_length = 0
        else:
            content_length = self._parse_content_length(headers)

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            content_length=content_length,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple:
        """
        Split "METHOD SP TARGET SP HTTP/x.y" into its three parts.

        Only HTTP/1.x is accepted; anything else is a framing error since
        the server cannot answer in a version it does not speak.
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, major, minor = match.groups()
        if major != "1":
            raise HTTPParseError(f"Unsupported HTTP version: HTTP/{major}.{minor}")

        return method, target, f"HTTP/{major}.{minor}"

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        headers: Dict[str, str] = {}

        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise HTTPParseError(f"Invalid header line: {line!r}")

            name, value = match.groups()
            name = name.lower()

            # Repeated headers fold into one comma-separated value (RFC 7230 3.2.2)
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers

    def _parse_content_length(self, headers: Dict[str, str]) -> int:
        raw = headers.get("content-length")
        if raw is None:
            return 0

        values = {v.strip() for v in raw.split(",")}
        if len(values) != 1:
            raise HTTPParseError(f"Conflicting Content-Length values: {raw!r}")

        value = values.pop()
        if not (value.isascii() and value.isdigit()):
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")

        return int(value)


def parse_request(head: bytes, client_address: tuple = ("", 0)) -> HTTPRequest:
    """Parse a request head with a default RequestParser."""
    return RequestParser().parse(head, client_address)
