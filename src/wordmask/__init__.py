"""wordmask: keyword masking served over TCP and over a stop-and-wait UDP link.

Layout follows the same split as the transport it runs on:
- masking is a pure function over bytes (``masker``)
- datagram framing and reliability live apart from session logic
- both transports share the masker and the wire literals in ``constants``
"""

from .masker import MaskResult, mask

__all__ = ["MaskResult", "mask"]
