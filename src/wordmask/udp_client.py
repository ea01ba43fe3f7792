from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .errors import ProtocolError, SendFailed
from .net import Peer
from .receiver import Receiver
from .sender import StopAndWaitSender


@dataclass(slots=True)
class MaskClient:
    sender: StopAndWaitSender
    receiver: Receiver
    server: Peer

    def exchange(self, phrase: bytes, keyword: bytes) -> Iterator[bytes]:
        """Send phrase then keyword; yield the masked phrase and each trailer.

        Lines are yielded as they arrive so the caller can print them before
        the rest of the reply is in.
        """
        for part in (phrase, keyword):
            if not self.sender.send_message(part, self.server):
                raise SendFailed(f"no ACK from {self.server[0]}:{self.server[1]}")

        _, masked = self.receiver.receive_message()
        yield masked

        _, raw_count = self.receiver.receive_message()
        if not raw_count.isdigit():
            raise ProtocolError(f"malformed match count: {raw_count!r}")

        for _ in range(int(raw_count)):
            _, trailer = self.receiver.receive_message()
            yield trailer
