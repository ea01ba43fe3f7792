from __future__ import annotations

CHUNK_SIZE = 20  # send chunk and receive buffer, in bytes
MAX_TRIES = 3

SEND_TIMEOUT_MS = 1000
SERVER_COLLECT_TIMEOUT_MS = 500
CLIENT_TIMEOUT_MS = 1000

ACK = b"ACK"
PREAMBLE_PREFIX = b"Packets: "

TRAILER = b"Socket Programming"
DELIMITER = b" -- "
TRANSMISSION_COMPLETE = b"Transmission Complete"
INVALID_REQUEST = b"Did not receive valid string from client. Terminating"

PUNCTUATION = b",.!?"
MASK_BYTE = b"X"

PORT_MIN = 1024
PORT_MAX = 49151
