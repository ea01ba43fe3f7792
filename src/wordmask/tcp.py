"""Stream transport: one request line in, masked line plus trailers out."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Iterator, List

from .constants import DELIMITER, INVALID_REQUEST, TRAILER, TRANSMISSION_COMPLETE
from .masker import mask
from .net import Peer

NEWLINE = b"\n"


def compose_request(phrase: bytes, keyword: bytes) -> bytes:
    return phrase + DELIMITER + keyword


def respond_to_line(line: bytes) -> List[bytes]:
    phrase, sep, keyword = line.partition(DELIMITER)
    if not sep:
        return [INVALID_REQUEST]

    result = mask(phrase, keyword)
    return [result.masked, *(TRAILER for _ in range(result.count)), TRANSMISSION_COMPLETE]


def _strip_eol(line: bytes) -> bytes:
    return line.rstrip(b"\n").rstrip(b"\r")


@dataclass(slots=True)
class TcpServer:
    sock: socket.socket

    @classmethod
    def listening(cls, host: str, port: int, backlog: int = 1) -> "TcpServer":
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
        return cls(sock)

    @property
    def local_address(self) -> Peer:
        host, port = self.sock.getsockname()[:2]
        return host, port

    def serve_forever(self) -> None:
        # runs until the listening socket is closed
        while self.sock.fileno() != -1:
            self.serve_once()

    def serve_once(self) -> None:
        try:
            conn, addr = self.sock.accept()
        except OSError as exc:
            logging.warning("accept failed: %s", exc)
            return
        with conn:
            self.serve_connection(conn, (addr[0], addr[1]))

    def serve_connection(self, conn: socket.socket, peer: Peer) -> None:
        logging.info("Connected to %s:%d", peer[0], peer[1])
        try:
            with conn.makefile("rb") as rfile, conn.makefile("wb") as wfile:
                for raw in rfile:
                    for reply in respond_to_line(_strip_eol(raw)):
                        wfile.write(reply + NEWLINE)
                    wfile.flush()
        except OSError as exc:
            logging.warning("Result transmission failed. Terminating! (%s)", exc)
            return
        logging.info("Client exiting... (%s:%d)", peer[0], peer[1])

    def close(self) -> None:
        self.sock.close()


@dataclass(slots=True)
class TcpClient:
    sock: socket.socket

    @classmethod
    def connect(cls, host: str, port: int, timeout_ms: int | None = None) -> "TcpClient":
        timeout = timeout_ms / 1000.0 if timeout_ms else None
        return cls(socket.create_connection((host, port), timeout=timeout))

    def exchange(self, phrase: bytes, keyword: bytes) -> Iterator[bytes]:
        """Send one request line and yield reply lines until the terminator."""
        with self.sock.makefile("rb") as rfile:
            self.sock.sendall(compose_request(phrase, keyword) + NEWLINE)
            for raw in rfile:
                line = _strip_eol(raw)
                if line == TRANSMISSION_COMPLETE:
                    return
                yield line

    def close(self) -> None:
        self.sock.close()
