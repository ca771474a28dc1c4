"""
Unit tests for the client connection wrapper.
"""

import socket
import time
from unittest import mock

import pytest

from tinyhttpd.core.connection import Connection, ConnectionState
from tinyhttpd.exceptions import RequestReadError, ResponseWriteError


@pytest.fixture
def pair():
    """A connected (server_side, client_side) socket pair."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    server_side.close()
    client_side.close()


def make_connection(sock) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 54321))


class TestReadRequest:
    """Tests for Connection.read_request()."""

    def test_reads_until_blank_line(self, pair):
        server_side, client_side = pair
        client_side.sendall(
            b"GET /index.html HTTP/1.1\r\n"
            b"Host: localhost\r\n"
            b"\r\n"
            b"ignored body"
        )

        conn = make_connection(server_side)
        assert conn.read_request() == ["GET /index.html HTTP/1.1", "Host: localhost"]
        assert conn.state == ConnectionState.READING

    def test_bare_newlines(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /a HTTP/1.0\nAccept: */*\n\n")

        assert make_connection(server_side).read_request() == ["GET /a HTTP/1.0", "Accept: */*"]

    def test_peer_closes_before_blank_line(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /partial HTTP/1.1\r\nHost: x\r\n")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == ["GET /partial HTTP/1.1", "Host: x"]

    def test_last_line_without_newline(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /nonl")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == ["GET /nonl"]

    def test_empty_request(self, pair):
        server_side, client_side = pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == []

    def test_leading_blank_line_ends_request(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"\r\nGET / HTTP/1.1\r\n\r\n")

        assert make_connection(server_side).read_request() == []

    def test_line_split_across_sends(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /sp")
        client_side.sendall(b"lit.css HTTP/1.1\r\n\r\n")

        assert make_connection(server_side).read_request() == ["GET /split.css HTTP/1.1"]

    def test_invalid_utf8(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /\xff\xfe HTTP/1.1\r\n\r\n")

        with pytest.raises(RequestReadError):
            make_connection(server_side).read_request()

    def test_socket_error(self):
        sock = mock.Mock()
        sock.makefile.return_value.readline.side_effect = ConnectionResetError("reset")

        with pytest.raises(RequestReadError) as exc_info:
            make_connection(sock).read_request()

        assert isinstance(exc_info.value.__cause__, ConnectionResetError)


class TestSend:
    """Tests for Connection.send()."""

    def test_send(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)

        conn.send(b"hello")

        assert client_side.recv(16) == b"hello"
        assert conn.bytes_sent == 5
        assert conn.state == ConnectionState.RESPONDING

    def test_send_failure(self):
        sock = mock.Mock()
        sock.sendall.side_effect = BrokenPipeError("Broken pipe")
        conn = make_connection(sock)

        with pytest.raises(ResponseWriteError):
            conn.send(b"data")

        assert conn.bytes_sent == 0


class TestClose:
    """Tests for closing connections."""

    def test_context_manager_closes(self, pair):
        server_side, client_side = pair

        with make_connection(server_side) as conn:
            conn.send(b"bye")

        assert conn.state == ConnectionState.CLOSED
        assert server_side.fileno() == -1
        assert client_side.recv(16) == b"bye"
        assert client_side.recv(16) == b""

    def test_close_is_idempotent(self, pair):
        server_side, _ = pair
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_close_does_not_wait_for_open_peer(self, pair):
        """Test close() returns at once while the client keeps its end open."""
        server_side, client_side = pair
        conn = make_connection(server_side)

        started = time.monotonic()
        conn.close()

        assert time.monotonic() - started < 0.1
        assert client_side.recv(16) == b""

    def test_close_discards_buffered_input(self, pair):
        """Test bytes sent after the request head don't get in the way of the response."""
        server_side, client_side = pair
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\nleftover body bytes")

        conn = make_connection(server_side)
        conn.read_request()
        conn.send(b"response")
        conn.close()

        assert client_side.recv(64) == b"response"
        assert client_side.recv(64) == b""

    def test_drain_never_blocks(self):
        """Test the drain switches the socket to non-blocking and stops when nothing is buffered."""
        sock = mock.Mock()
        sock.recv.side_effect = [b"late", BlockingIOError()]
        conn = make_connection(sock)

        conn.close()

        sock.setblocking.assert_called_with(False)
        assert sock.recv.call_count == 2
        sock.close.assert_called_once()

    def test_drain_stops_at_limit(self):
        """Test a peer that never stops sending can't keep close() reading."""
        sock = mock.Mock()
        sock.recv.return_value = b"x" * 4096
        conn = make_connection(sock)
        conn.drain_limit = 8192

        conn.close()

        assert sock.recv.call_count == 2
        assert conn.state == ConnectionState.CLOSED
