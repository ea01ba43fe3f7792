from __future__ import annotations

import contextlib

import pytest

from wordmask.constants import CHUNK_SIZE


class ScriptedEndpoint:
    """Stands in for UdpEndpoint: replays inbound datagrams and records outbound ones.

    Inbound items are ``(payload, peer)`` pairs or exception instances to raise.
    An exhausted script behaves like a socket timeout.
    """

    def __init__(self, inbound=()):
        self.inbound = list(inbound)
        self.sent = []
        self.timeout_history = []
        self.current_timeout = None

    def sendto(self, data, peer):
        self.sent.append((data, peer))

    def recvfrom(self, bufsize=CHUNK_SIZE):
        if not self.inbound:
            raise TimeoutError("timed out")
        item = self.inbound.pop(0)
        if isinstance(item, BaseException):
            raise item
        data, peer = item
        return data[:bufsize], peer

    @contextlib.contextmanager
    def timeout(self, timeout_ms):
        previous = self.current_timeout
        self.current_timeout = timeout_ms
        self.timeout_history.append(timeout_ms)
        try:
            yield self
        finally:
            self.current_timeout = previous

    def payloads(self):
        return [data for data, _ in self.sent]


@pytest.fixture
def make_endpoint():
    return ScriptedEndpoint
