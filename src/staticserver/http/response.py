"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

A response is assembled piece by piece while a request is processed and
serialized exactly once, when the connection writes it.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 404 Not Found\r\n                ← status line
    Connection: close\r\n                     ← headers, in insertion order
    Content-Type: text/plain\r\n
    Content-Length: 29\r\n
    \r\n                                      ← end of headers
    File not found: /missing.txt\n            ← body

No Date or Server header is added. Two responses built from the same
request against the same file are therefore byte-for-byte identical.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response to be sent to the client.

    Attributes:
        status:  Status code (HTTPStatus enum)
        headers: Header name → value, serialized in insertion order
        body:    Body bytes
        version: Protocol version for the status line
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header, returning self for chaining."""
        self.headers[name] = value
        return self

    def close_connection(self) -> "HTTPResponse":
        """Mark the response as the last one on its connection."""
        return self.set_header("Connection", "close")

    def set_content_length(self) -> "HTTPResponse":
        """Set Content-Length to the exact size of the current body."""
        return self.set_header("Content-Length", str(len(self.body)))

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Content-Length is filled in from the body when it has not been set.
        """
        headers = dict(self.headers)
        if "Content-Length" not in headers:
            headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("image/png")
            .body(data)
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body (strings are UTF-8 encoded)."""
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body with Content-Type: text/plain."""
        return self.content_type("text/plain").body(text)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Every error this server sends is a short text/plain explanation.
#
# =============================================================================

def text_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Build a text/plain response with the given status."""
    return ResponseBuilder().status(status).text(message).build()


def bad_request(message: str) -> HTTPResponse:
    """400 Bad Request with a plain-text body."""
    return text_response(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str) -> HTTPResponse:
    """404 Not Found with a plain-text body."""
    return text_response(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str) -> HTTPResponse:
    """500 Internal Server Error with a plain-text body."""
    return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
