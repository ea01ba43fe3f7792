from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Tuple

from .constants import ACK, SERVER_COLLECT_TIMEOUT_MS
from .errors import MessageTimeout, ProtocolError
from .net import Peer, UdpEndpoint
from .packet import Preamble


@dataclass(slots=True)
class Metrics:
    packets_sent: int = 0
    bytes_sent: int = 0
    acks_sent: int = 0
    timeouts: int = 0
    retransmits: int = 0
    failures: int = 0


@dataclass(slots=True)
class Receiver:
    udp: UdpEndpoint
    collect_timeout_ms: int = SERVER_COLLECT_TIMEOUT_MS
    metrics: Metrics = field(default_factory=Metrics)

    def receive_reliable(self) -> Tuple[Peer, bytes]:
        """Wait for one datagram and acknowledge it to its source.

        Blocks for as long as the socket's current timeout allows. The ACK
        does not depend on the payload.
        """
        payload, peer = self.udp.recvfrom()
        self.udp.sendto(ACK, peer)
        self.metrics.acks_sent += 1
        return peer, payload

    def receive_message(self) -> Tuple[Peer, bytes]:
        peer, raw = self.receive_reliable()
        try:
            preamble = Preamble.from_bytes(raw)
        except ProtocolError as exc:
            exc.peer = peer
            raise

        logging.debug("preamble from %s:%d; fragments=%d", peer[0], peer[1], preamble.count)
        parts = []
        with self.udp.timeout(self.collect_timeout_ms):
            for index in range(preamble.count):
                try:
                    _, chunk = self.receive_reliable()
                except TimeoutError:
                    self.metrics.timeouts += 1
                    raise MessageTimeout(
                        f"fragment {index + 1}/{preamble.count} not received", peer=peer
                    ) from None
                parts.append(chunk)

        return peer, b"".join(parts)
