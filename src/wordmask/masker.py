"""Keyword masking over space-separated tokens.

A token is split into a stem and a tail of trailing ``, . ! ?``. When the stem
equals the keyword, ignoring ASCII case, the stem is overwritten with ``X`` and
the tail is kept. Everything operates on bytes: non-ASCII bytes are compared
as-is and only ``A-Z`` fold to lower case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .constants import MASK_BYTE, PUNCTUATION

SPACE = b" "


@dataclass(frozen=True, slots=True)
class MaskResult:
    masked: bytes
    count: int


def split_token(token: bytes) -> Tuple[bytes, bytes]:
    end = len(token)
    while end > 0 and token[end - 1 : end] in PUNCTUATION:
        end -= 1
    return token[:end], token[end:]


def mask(phrase: bytes, keyword: bytes) -> MaskResult:
    needle = keyword.lower()
    count = 0
    tokens = []

    for token in phrase.split(SPACE):
        stem, tail = split_token(token)
        # empty stems (blank or all-punctuation tokens) never match
        if stem and stem.lower() == needle:
            token = MASK_BYTE * len(stem) + tail
            count += 1
        tokens.append(token)

    return MaskResult(masked=SPACE.join(tokens), count=count)

