from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .constants import CHUNK_SIZE, PREAMBLE_PREFIX
from .errors import ProtocolError


def fragment(data: bytes, chunk_size: int = CHUNK_SIZE) -> List[bytes]:
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive, got {chunk_size}")
    if not data:
        return [b""]
    return [data[i : i + chunk_size] for i in range(0, len(data), chunk_size)]


@dataclass(frozen=True, slots=True)
class Preamble:
    """First datagram of a message: ``Packets: <n>``."""

    count: int

    def to_bytes(self) -> bytes:
        if self.count < 1:
            raise ValueError(f"fragment count must be at least 1, got {self.count}")
        raw = PREAMBLE_PREFIX + str(self.count).encode("ascii")
        if len(raw) > CHUNK_SIZE:
            raise ValueError(f"preamble does not fit in one chunk: {raw!r}")
        return raw

    @staticmethod
    def from_bytes(raw: bytes) -> "Preamble":
        if PREAMBLE_PREFIX not in raw:
            raise ProtocolError(f"missing preamble: {raw!r}")

        _, _, value = raw.partition(b":")
        digits = value.strip()
        # plain decimal only: int() would also take signs and underscores
        if not digits.isdigit():
            raise ProtocolError(f"malformed fragment count: {raw!r}")
        return Preamble(int(digits))

