"""
Unit tests for HTTP response building.
"""

import pytest

from tinyhttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    build_response,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
    error_response,
)
from tinyhttp.http.status_codes import HTTPStatus, reason_phrase, resolve_status


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=404).status_line == "HTTP/1.1 404 Not Found"

    def test_unknown_status_becomes_500(self):
        response = HTTPResponse(status=418)

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.to_bytes().startswith(b"HTTP/1.1 500 Internal Server Error\r\n")

    def test_empty_response(self):
        assert HTTPResponse(status=404).to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_to_bytes_with_headers_and_body(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"Content-Type": "text/plain"},
            body=b"abc123",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 6\r\n"
            b"\r\n"
            b"abc123"
        )

    def test_content_length_is_byte_length(self):
        response = HTTPResponse(body="héllo")

        assert response.body == "héllo".encode()
        assert b"Content-Length: 6\r\n" in response.to_bytes()

    def test_caller_content_length_is_replaced(self):
        response = HTTPResponse(headers={"Content-Length": "999"}, body=b"hi")
        result = response.to_bytes()

        assert b"Content-Length: 2\r\n" in result
        assert b"999" not in result

    def test_caller_content_length_dropped_for_empty_body(self):
        response = HTTPResponse(headers={"Content-Length": "5"})

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_headers_keep_insertion_order(self):
        response = HTTPResponse(headers={"B": "2", "A": "1"}, body=b"x")

        assert list(response.wire_headers()) == ["B", "A", "Content-Length"]

    def test_wire_headers_do_not_mutate_response(self):
        response = HTTPResponse(body=b"x")
        response.to_bytes()

        assert response.headers == {}

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}


class TestLegacyFraming:
    """Extra CRLFCRLF after the body."""

    def test_headers_and_body(self):
        response = HTTPResponse(headers={"Content-Type": "text/plain"}, body=b"abc")

        assert response.to_bytes(legacy_framing=True) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
            b"\r\n\r\n"
        )

    def test_no_headers(self):
        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)

        assert response.to_bytes(legacy_framing=True) == b"HTTP/1.1 404 Not Found\r\n\r\n\r\n"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == HTTPStatus.CREATED

    def test_text_body(self):
        response = ResponseBuilder().text("Hello").build()

        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"Hello"

    def test_octet_stream_body(self):
        response = ResponseBuilder().octet_stream(b"\x00\x01").build()

        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_headers_none_is_empty(self):
        response = ResponseBuilder().headers(None).build()
        assert response.headers == {}

    def test_build_copies_headers(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        builder.header("X-B", "2")

        assert first.headers == {"X-A": "1"}

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .text("body")
            .build())

        assert response.headers == {"X-Custom": "value", "Content-Type": "text/plain"}


class TestBuildResponse:
    def test_user_agent_scenario(self):
        result = build_response(200, {"Content-Type": "text/plain"}, "test-client")

        assert result == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 11\r\n"
            b"\r\n"
            b"test-client"
        )

    def test_none_headers(self):
        assert build_response(201, None, "") == b"HTTP/1.1 201 Created\r\n\r\n"

    @pytest.mark.parametrize("code", [200, 201, 404, 405, 500, 302, 999])
    def test_status_line_from_closed_table(self, code: int):
        result = build_response(code)
        expected = resolve_status(code)

        assert result.startswith(f"HTTP/1.1 {expected.value} {expected.phrase}\r\n".encode())


class TestConvenienceFunctions:
    def test_ok_empty(self):
        assert ok().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_ok_text(self):
        response = ok("hi")
        assert response.headers["Content-Type"] == "text/plain"

    def test_created(self):
        response = created()
        assert response.status == HTTPStatus.CREATED
        assert response.body == b""

    def test_not_found(self):
        response = not_found()
        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "POST"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, POST"

    def test_internal_error(self):
        assert internal_error().status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_error_response(self):
        assert error_response(400).to_bytes() == b"HTTP/1.1 400 Bad Request\r\n\r\n"


class TestHTTPStatus:
    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.CREATED.phrase == "Created"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.METHOD_NOT_ALLOWED.phrase == "Method Not Allowed"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_every_member_has_a_phrase(self):
        for status in HTTPStatus:
            assert status.phrase

    def test_reason_phrase_fallback(self):
        assert reason_phrase(204) == "Internal Server Error"
        assert reason_phrase(201) == "Created"

    def test_categories(self):
        assert HTTPStatus.CREATED.is_success
        assert HTTPStatus.NOT_FOUND.is_error
        assert not HTTPStatus.OK.is_error
