from __future__ import annotations

import contextlib
import random
import socket
import time
from dataclasses import dataclass
from typing import Iterator, Tuple

from .constants import CHUNK_SIZE

Peer = Tuple[str, int]


@dataclass(frozen=True, slots=True)
class Impairment:
    loss_rate: float = 0.0
    delay_ms: int = 0

    def should_drop(self) -> bool:
        return self.loss_rate > 0 and random.random() < self.loss_rate

    def sleep_if_needed(self) -> None:
        if self.delay_ms > 0:
            time.sleep(self.delay_ms / 1000.0)


def _seconds(timeout_ms: int | None) -> float | None:
    if not timeout_ms or timeout_ms <= 0:
        return None
    return timeout_ms / 1000.0


class UdpEndpoint:
    """One UDP socket with a fixed-size receive buffer.

    Datagrams longer than the buffer are truncated by the kernel; the excess
    is lost and nothing here reports it.
    """

    def __init__(self, sock: socket.socket, impairment: Impairment | None = None):
        self.sock = sock
        self.impairment = impairment or Impairment()

    @classmethod
    def listening(
        cls,
        host: str,
        port: int,
        timeout_ms: int = 0,
        impairment: Impairment | None = None,
    ) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind((host, port))
        sock.settimeout(_seconds(timeout_ms))
        return cls(sock, impairment)

    @classmethod
    def sending(
        cls,
        timeout_ms: int = 0,
        impairment: Impairment | None = None,
    ) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.settimeout(_seconds(timeout_ms))
        return cls(sock, impairment)

    @property
    def local_address(self) -> Peer:
        host, port = self.sock.getsockname()[:2]
        return host, port

    @contextlib.contextmanager
    def timeout(self, timeout_ms: int | None) -> Iterator["UdpEndpoint"]:
        previous = self.sock.gettimeout()
        self.sock.settimeout(_seconds(timeout_ms))
        try:
            yield self
        finally:
            self.sock.settimeout(previous)

    def sendto(self, data: bytes, peer: Peer) -> None:
        if self.impairment.should_drop():
            return
        self.impairment.sleep_if_needed()
        self.sock.sendto(data, peer)

    def recvfrom(self, bufsize: int = CHUNK_SIZE) -> Tuple[bytes, Peer]:
        while True:
            data, addr = self.sock.recvfrom(bufsize)
            if self.impairment.should_drop():
                continue
            self.impairment.sleep_if_needed()
            return data, (addr[0], addr[1])

    def close(self) -> None:
        self.sock.close()
