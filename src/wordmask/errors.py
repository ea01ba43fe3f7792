from __future__ import annotations

from .net import Peer


class WordmaskError(Exception):
    pass


class InputError(WordmaskError, ValueError):
    """Blank prompt field, non-numeric port or port out of range."""


class ProtocolError(WordmaskError, ValueError):
    """Peer sent something that does not follow the wire format."""

    def __init__(self, message: str, peer: Peer | None = None):
        super().__init__(message)
        self.peer = peer


class MessageTimeout(WordmaskError, TimeoutError):
    """A fragment did not arrive while a message was being collected."""

    def __init__(self, message: str, peer: Peer | None = None):
        super().__init__(message)
        self.peer = peer


class SendFailed(WordmaskError):
    pass
