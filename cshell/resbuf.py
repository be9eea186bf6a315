"""Unwinding the result ring buffer downloaded from a node."""

from __future__ import annotations

import struct
from datetime import datetime

HEADER_SIZE = 4


class ResbufError(ValueError):
    """The result buffer contents are inconsistent."""


def extract_ring(data: bytes) -> bytes:
    """Return the bytes between the read and write index of a result ring buffer.

    The buffer starts with two little-endian 16-bit indices, write ("in")
    then read ("out"); the ring itself wraps back to offset 4. When both
    indices are equal the whole ring is returned once.
    """
    data = bytes(data)
    size = len(data)
    if size <= HEADER_SIZE:
        raise ResbufError(f"result buffer of {size} bytes is too small")
    head, tail = struct.unpack_from("<HH", data)
    if head > size:
        raise ResbufError(f"write index {head} beyond buffer size {size}")
    if tail >= size:
        raise ResbufError(f"read index {tail} beyond buffer size {size}")

    out = bytearray()
    pos = tail
    for _ in range(2 * size):
        out.append(data[pos])
        pos += 1
        if pos >= size:
            pos = HEADER_SIZE
        if pos == head:
            return bytes(out)
    raise ResbufError(f"write index {head} is never reached from read index {tail}")


def timestamped_filename(node: int, when: datetime | None = None) -> str:
    """File name for a dump of node taken at the given local time."""
    if when is None:
        when = datetime.now()
    return f"{node}_{when.strftime('%Y%m%d_%H%M%S')}.txt"