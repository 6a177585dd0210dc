"""Byte-stream helpers shared by the codecs, validator and reader."""
from __future__ import annotations

from typing import BinaryIO


class TruncatedInput(EOFError):
    """Raised when a stream ends before a fixed-width field is complete."""


def read_exact(f: BinaryIO, n: int, what: str = "field") -> bytes:
    data = f.read(n)
    if len(data) != n:
        raise TruncatedInput(f"Truncated {what}: expected {n} bytes, got {len(data)}")
    return data


def decode_hex_count(raw: bytes) -> int:
    """Interpret count bytes as a base-16 numeral of their hex digits.

    This is how the device reads the settings and sample counts. It matches
    an unsigned big-endian integer, but the wire contract is defined this way
    and must not be swapped for anything else.
    """
    if not raw:
        raise TruncatedInput("Empty count field")
    return int(raw.hex(), 16)


def encode_hex_count(value: int, width: int) -> bytes:
    """Inverse of `decode_hex_count` for a field of `width` bytes."""
    if value < 0 or value >= 1 << (8 * width):
        raise ValueError(f"Count {value} does not fit in {width} bytes")
    return bytes.fromhex(f"{value:0{2 * width}x}")
