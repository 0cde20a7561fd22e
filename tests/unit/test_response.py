"""
Unit tests for HTTP response building.
"""

from staticserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    bad_request,
    not_found,
    internal_error,
    text_response,
)
from staticserver.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND, version="HTTP/1.0")
        assert response.status_line == "HTTP/1.0 404 Not Found"

    def test_to_bytes_layout(self):
        """Status line, headers in insertion order, blank line, body."""
        response = (HTTPResponse(status=HTTPStatus.OK, body=b"hi")
            .close_connection()
            .set_header("Content-Type", "text/html")
            .set_content_length())

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Connection: close\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 2\r\n"
            b"\r\n"
            b"hi"
        )

    def test_to_bytes_fills_content_length(self):
        response = HTTPResponse(body=b"hello world")
        assert b"Content-Length: 11\r\n" in response.to_bytes()

    def test_no_date_or_server_header(self):
        """Responses must be reproducible byte for byte."""
        result = HTTPResponse(body=b"x").to_bytes()

        assert b"Date:" not in result
        assert b"Server:" not in result
        assert result == HTTPResponse(body=b"x").to_bytes()

    def test_set_content_length_counts_bytes(self):
        response = HTTPResponse(body="é".encode("utf-8")).set_content_length()
        assert response.headers["Content-Length"] == "2"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND

    def test_defaults(self):
        response = ResponseBuilder().build()

        assert response.status == HTTPStatus.OK
        assert response.headers == {}
        assert response.body == b""

    def test_text_body(self):
        response = ResponseBuilder().text("Hello\n").build()

        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"Hello\n"

    def test_binary_body(self):
        response = ResponseBuilder().content_type("image/png").body(b"\x89PNG").build()

        assert response.content_type == "image/png"
        assert response.body == b"\x89PNG"

    def test_builds_are_independent(self):
        builder = ResponseBuilder().header("X-One", "1")
        first = builder.build()
        first.set_header("X-Two", "2")

        assert "X-Two" not in builder.build().headers


class TestConvenienceFunctions:
    """Tests for the text/plain error helpers."""

    def test_bad_request(self):
        response = bad_request("Invalid request method.\n")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.content_type == "text/plain"
        assert response.body == b"Invalid request method.\n"

    def test_not_found(self):
        response = not_found("File not found: /x\n")

        assert response.status == 404
        assert response.content_type == "text/plain"

    def test_internal_error(self):
        response = internal_error("Exception: boom\n")

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"Exception: boom\n"

    def test_text_response(self):
        response = text_response(HTTPStatus.OK, "fine")
        assert response.status_line == "HTTP/1.1 200 OK"


class TestHTTPStatus:

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_compares_to_int(self):
        assert HTTPStatus.NOT_FOUND == 404
        assert int(HTTPStatus.INTERNAL_SERVER_ERROR) == 500
