from __future__ import annotations

import socket

import pytest

from wordmask.net import Impairment, UdpEndpoint


@pytest.fixture
def pair():
    server = UdpEndpoint.listening("127.0.0.1", 0, timeout_ms=1000)
    client = UdpEndpoint.sending(timeout_ms=1000)
    yield server, client
    server.close()
    client.close()


def test_loopback_datagram(pair):
    server, client = pair
    client.sendto(b"hello", server.local_address)
    data, peer = server.recvfrom()
    assert data == b"hello"
    assert peer[0] == "127.0.0.1"


def test_receive_buffer_truncates_long_datagrams(pair):
    server, client = pair
    client.sendto(b"0123456789" * 3, server.local_address)
    data, _ = server.recvfrom()
    assert data == b"01234567890123456789"


def test_timeout_context_restores_previous_value(pair):
    server, _ = pair
    assert server.sock.gettimeout() == 1.0
    with server.timeout(250):
        assert server.sock.gettimeout() == 0.25
    assert server.sock.gettimeout() == 1.0


def test_timeout_context_restores_after_error(pair):
    server, _ = pair
    with server.timeout(None):
        assert server.sock.gettimeout() is None
    with pytest.raises(socket.timeout):
        with server.timeout(10):
            server.recvfrom()
    assert server.sock.gettimeout() == 1.0


def test_full_loss_drops_outbound(pair):
    server, _ = pair
    lossy = UdpEndpoint.sending(impairment=Impairment(loss_rate=1.0))
    try:
        lossy.sendto(b"gone", server.local_address)
        with pytest.raises(TimeoutError):
            with server.timeout(100):
                server.recvfrom()
    finally:
        lossy.close()
