from __future__ import annotations

import logging
import socket
import threading

import pytest

from wordmask.constants import INVALID_REQUEST, TRAILER, TRANSMISSION_COMPLETE
from wordmask.tcp import TcpClient, TcpServer, compose_request, respond_to_line


def test_compose_request():
    assert compose_request(b"hello world", b"hello") == b"hello world -- hello"


def test_respond_to_line():
    assert respond_to_line(b"hello world hello -- hello") == [
        b"XXXXX world XXXXX",
        TRAILER,
        TRAILER,
        TRANSMISSION_COMPLETE,
    ]


def test_respond_without_delimiter():
    assert respond_to_line(b"hello world hello--hello") == [INVALID_REQUEST]


def test_respond_splits_on_first_delimiter_only():
    assert respond_to_line(b"a -- b -- c") == [b"a", TRANSMISSION_COMPLETE]


def test_respond_no_matches():
    assert respond_to_line(b"nothing -- cat") == [b"nothing", TRANSMISSION_COMPLETE]


@pytest.fixture
def server():
    srv = TcpServer.listening("127.0.0.1", 0)
    t = threading.Thread(target=srv.serve_once, daemon=True)
    t.start()
    yield srv
    t.join(timeout=5.0)
    srv.close()


def test_client_server_exchange(server):
    host, port = server.local_address
    client = TcpClient.connect(host, port, timeout_ms=2000)
    try:
        lines = list(client.exchange(b"hello world hello", b"hello"))
    finally:
        client.close()
    assert lines == [b"XXXXX world XXXXX", TRAILER, TRAILER]


def test_wire_format(server):
    with socket.create_connection(server.local_address, timeout=2.0) as sock:
        with sock.makefile("rb") as rfile:
            sock.sendall(b"no delimiter here\n")
            assert rfile.readline() == INVALID_REQUEST + b"\n"

            # same connection stays usable after a bad line
            sock.sendall(b"hello world hello -- hello\r\n")
            assert [rfile.readline() for _ in range(4)] == [
                b"XXXXX world XXXXX\n",
                b"Socket Programming\n",
                b"Socket Programming\n",
                b"Transmission Complete\n",
            ]


class FlakyListener:
    """Listening socket whose accept() fails; reports closed once the errors run out."""

    def __init__(self, errors):
        self.errors = list(errors)
        self.accepts = 0

    def accept(self):
        self.accepts += 1
        raise self.errors.pop(0)

    def fileno(self):
        return 3 if self.errors else -1


def test_accept_error_does_not_stop_server(caplog):
    listener = FlakyListener([ConnectionAbortedError(103, "aborted"), OSError(24, "Too many open files")])
    server = TcpServer(listener)

    with caplog.at_level(logging.WARNING):
        server.serve_forever()

    assert listener.accepts == 2
    assert "accept failed" in caplog.text


def test_serve_forever_returns_once_closed():
    server = TcpServer.listening("127.0.0.1", 0)
    server.close()
    server.serve_forever()
