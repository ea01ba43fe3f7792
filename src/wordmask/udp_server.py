"""Datagram server: phrase and keyword arrive as two messages from one peer.

The first message from a peer is held as its phrase. The next message from the
same ``(address, port)`` is taken as the keyword, the masked phrase and the
replies are sent back, and the slot is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from .constants import TRAILER
from .errors import MessageTimeout, ProtocolError
from .masker import mask
from .net import Peer
from .receiver import Receiver
from .sender import StopAndWaitSender


@dataclass(slots=True)
class MaskServer:
    sender: StopAndWaitSender
    receiver: Receiver
    sessions: Dict[Peer, bytes] = field(default_factory=dict)

    def serve_forever(self) -> None:
        while True:
            self.serve_once()

    def serve_once(self) -> None:
        try:
            peer, data = self.receiver.receive_message()
        except (ProtocolError, MessageTimeout) as exc:
            logging.warning("Did not receive valid string from client. Terminating! (%s)", exc)
            if exc.peer is not None:
                self.sessions.pop(exc.peer, None)
            return
        except OSError as exc:
            logging.warning("I/O error while receiving: %s", exc)
            return

        phrase = self.sessions.pop(peer, None)
        if phrase is None:
            logging.debug("phrase from %s:%d; awaiting keyword", peer[0], peer[1])
            self.sessions[peer] = data
            return

        self.respond(peer, phrase, data)

    def respond(self, peer: Peer, phrase: bytes, keyword: bytes) -> bool:
        result = mask(phrase, keyword)
        logging.info("%s:%d matched %d token(s)", peer[0], peer[1], result.count)

        replies = [result.masked, str(result.count).encode("ascii")]
        replies.extend(TRAILER for _ in range(result.count))
        for reply in replies:
            if not self.sender.send_message(reply, peer):
                logging.warning("Result transmission failed. Terminating!")
                return False
        return True
