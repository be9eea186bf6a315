"""Base16 (lower-case hexadecimal) encoding."""

from __future__ import annotations

import logging

_log = logging.getLogger(__name__)
_HEX = frozenset("0123456789abcdefABCDEF")


class Base16Error(ValueError):
    """Raised for a malformed Base16 string."""


def encode(raw: bytes) -> str:
    """Encode bytes as lower-case hex."""
    encoded = bytes(raw).hex()
    _log.debug('Base16-encoded to "%s"', encoded)
    return encoded


def decode(encoded: str) -> bytes:
    """Decode a hex string; raise Base16Error on odd length or bad digits."""
    if len(encoded) % 2:
        raise Base16Error(f'Base16-encoded string "{encoded}" has invalid length')
    out = bytearray()
    for start in range(0, len(encoded), 2):
        pair = encoded[start:start + 2]
        if not set(pair) <= _HEX:
            raise Base16Error(f'Base16-encoded string "{encoded}" has invalid byte "{pair}"')
        out.append(int(pair, 16))
    _log.debug('Base16-decoded "%s"', encoded)
    return bytes(out)