from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .constants import ACK, CHUNK_SIZE, MAX_TRIES, SEND_TIMEOUT_MS
from .net import Peer, UdpEndpoint
from .packet import Preamble, fragment
from .receiver import Metrics


@dataclass(slots=True)
class StopAndWaitSender:
    udp: UdpEndpoint
    max_tries: int = MAX_TRIES
    timeout_ms: int = SEND_TIMEOUT_MS
    chunk_size: int = CHUNK_SIZE
    metrics: Metrics = field(default_factory=Metrics)

    def send_reliable(self, payload: bytes, peer: Peer) -> bool:
        for attempt in range(1, self.max_tries + 1):
            if attempt > 1:
                self.metrics.retransmits += 1
                logging.debug("retransmit to %s:%d; try=%d", peer[0], peer[1], attempt)

            self.metrics.packets_sent += 1
            self.metrics.bytes_sent += len(payload)
            try:
                self.udp.sendto(payload, peer)
                reply, _ = self.udp.recvfrom()
            except TimeoutError:
                self.metrics.timeouts += 1
                continue
            except OSError as exc:
                logging.debug("I/O error talking to %s:%d: %s", peer[0], peer[1], exc)
                continue

            if reply == ACK:
                return True

        self.metrics.failures += 1
        logging.warning("no ACK from %s:%d after %d tries", peer[0], peer[1], self.max_tries)
        return False

    def send_message(self, data: bytes, peer: Peer) -> bool:
        chunks = fragment(data, self.chunk_size)
        with self.udp.timeout(self.timeout_ms):
            if not self.send_reliable(Preamble(len(chunks)).to_bytes(), peer):
                return False
            for chunk in chunks:
                if not self.send_reliable(chunk, peer):
                    return False
        return True
