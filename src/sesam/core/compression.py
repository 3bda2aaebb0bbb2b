"""Framed zlib compression for envelope payloads.

Frame layout: 4-byte big-endian length of the uncompressed data, then a zlib
stream. Empty input is encoded as the bare 4-byte header of zeros, so
existing envelopes written by the desktop client stay readable.
"""

import struct
import zlib

from .exceptions import CompressionError

_LENGTH = struct.Struct(">I")


def compress(data: bytes, level: int = 9) -> bytes:
    if not -1 <= level <= 9:
        raise ValueError("compression level must be between -1 and 9")
    if not data:
        return _LENGTH.pack(0)
    return _LENGTH.pack(len(data)) + zlib.compress(bytes(data), level)


def uncompress(data: bytes) -> bytes:
    if len(data) < _LENGTH.size:
        raise CompressionError("truncated compressed frame")
    (expected,) = _LENGTH.unpack_from(data)
    if expected == 0:
        if len(data) != _LENGTH.size:
            raise CompressionError("trailing data after empty frame")
        return b""

    # never inflate more than the header promises, plus one byte to detect overrun
    stream = zlib.decompressobj()
    try:
        out = stream.decompress(bytes(data[_LENGTH.size:]), expected + 1)
    except zlib.error:
        raise CompressionError("corrupt compressed stream") from None
    if len(out) != expected or stream.unconsumed_tail:
        raise CompressionError("uncompressed length does not match frame header")
    if not stream.eof:
        raise CompressionError("truncated compressed stream")
    if stream.unused_data:
        raise CompressionError("trailing data after compressed stream")
    return out
