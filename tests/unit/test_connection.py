"""
Unit tests for request reading on a client connection.
"""

import socket
import threading
import time
from typing import Generator, Tuple

import pytest

from tinyhttp.core.connection import Connection, ConnectionState
from tinyhttp.http.errors import PayloadTooLarge, RequestTimeout


@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """(server side, client side)"""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    server_side.close()
    client_side.close()


def make_connection(sock: socket.socket, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 5000), **kwargs)


class TestReadRequest:
    """Tests for Connection.read_request()."""

    def test_headers_only(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"
        client_side.sendall(raw)

        assert make_connection(server_side).read_request() == raw

    def test_small_buffer_reassembles(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"GET /echo/abc HTTP/1.1\r\nUser-Agent: test\r\n\r\n"
        client_side.sendall(raw)

        assert make_connection(server_side, buffer_size=3).read_request() == raw

    def test_body_larger_than_buffer(self, socket_pair):
        server_side, client_side = socket_pair
        body = b"x" * 5000
        raw = b"POST /files/big HTTP/1.1\r\nContent-Length: 5000\r\n\r\n" + body
        client_side.sendall(raw)

        assert make_connection(server_side).read_request() == raw

    def test_body_sent_in_pieces(self, socket_pair):
        server_side, client_side = socket_pair
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n"

        def send_slowly():
            client_side.sendall(head + b"01234")
            time.sleep(0.1)
            client_side.sendall(b"56789")

        sender = threading.Thread(target=send_slowly)
        sender.start()
        data = make_connection(server_side).read_request()
        sender.join()

        assert data == head + b"0123456789"

    def test_bytes_after_headers_kept_without_content_length(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"POST /files/a HTTP/1.1\r\nHost: x\r\n\r\nhello"
        client_side.sendall(raw)

        assert make_connection(server_side).read_request() == raw

    def test_bytes_after_headers_kept_with_invalid_content_length(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"POST /files/a HTTP/1.1\r\nContent-Length: lots\r\n\r\nhello"
        client_side.sendall(raw)

        assert make_connection(server_side).read_request() == raw

    def test_extra_bytes_beyond_content_length_dropped(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"POST /x HTTP/1.1\r\nContent-Length: 2\r\n\r\nabcd")

        assert make_connection(server_side).read_request().endswith(b"\r\n\r\nab")

    def test_peer_closes_before_terminator(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\n")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == b"GET / HTTP/1.1\r\n"

    def test_peer_closes_without_sending(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() is None

    def test_timeout(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\n")

        with pytest.raises(RequestTimeout) as exc_info:
            make_connection(server_side, timeout=0.2).read_request()

        assert exc_info.value.status_code == 408

    def test_headers_too_large(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\nX-Big: " + b"a" * 500)

        with pytest.raises(PayloadTooLarge):
            make_connection(server_side, max_request_size=256).read_request()

    def test_declared_body_too_large(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 100000\r\n\r\n")

        with pytest.raises(PayloadTooLarge) as exc_info:
            make_connection(server_side, max_request_size=1024).read_request()

        assert exc_info.value.status_code == 413


class TestConnectionLifecycle:
    def test_send_and_close(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")
        conn.close()

        assert conn.state == ConnectionState.CLOSED
        assert client_side.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert client_side.recv(1024) == b""

    def test_close_twice(self, socket_pair):
        server_side, _ = socket_pair
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, socket_pair):
        server_side, _ = socket_pair

        with make_connection(server_side) as conn:
            assert conn.state == ConnectionState.NEW

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_peer_gone(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.close()
        conn = make_connection(server_side)

        # The first write may still succeed on some platforms; a later one fails
        results = [conn.send_response(b"x" * 65536) for _ in range(5)]

        assert results[-1] is False
