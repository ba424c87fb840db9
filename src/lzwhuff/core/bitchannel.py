"""Bit-level I/O over byte streams.

Bits are read and written MSB-first within each byte.

Padding: the last byte of every stream carries its own padding marker.
The k pending payload bits (0 <= k < 8) sit in the top k positions, followed
by a ``0`` break bit and then ``1`` bits down to the LSB. Writing 0,0,1,1 and
closing therefore produces ``0b00110111`` (0x37). The marker byte is written on
every close, also when k == 0 (``0x7F``), so a stream whose payload is a whole
number of bytes stays unambiguous.

The reader finds the last byte by lookahead (one byte of read-ahead), never by
looking at its content, and strips the marker only from that byte.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Final

from lzwhuff.errors import CorruptPayload, EndOfStream

MAX_BITS_PER_CALL: Final[int] = 32


def _check_width(n: int) -> None:
    if not (1 <= n <= MAX_BITS_PER_CALL):
        raise ValueError(f"bit width must be 1..{MAX_BITS_PER_CALL}, got {n}")


class BitReader:
    """Read bits from a binary file object."""

    def __init__(self, fp: IO[bytes], *, close_fp: bool = True):
        self._fp = fp
        self._close_fp = close_fp
        self._cur = 0
        # index of the next bit to hand out inside _cur; -1 = need a new byte
        self._pos = -1
        self._ahead: bytes | None = None
        self._started = False
        self._eof = False
        self.bits_read = 0
        self.padding_bits = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "BitReader":
        return cls(io.BytesIO(bytes(data)))

    def __enter__(self) -> "BitReader":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _load(self) -> None:
        if self._eof:
            raise EndOfStream()

        if not self._started:
            self._ahead = self._fp.read(1)
            self._started = True
        cur = self._ahead
        if not cur:
            self._eof = True
            raise EndOfStream()

        self._ahead = self._fp.read(1)
        self._cur = cur[0]
        self._pos = 7
        if self._ahead:
            return

        # Last byte: drop the run of 1s and the 0 break bit above it.
        if self._cur == 0xFF:
            self._eof = True
            raise CorruptPayload("last byte has no padding break bit")
        while self._cur & 1:
            self._cur >>= 1
            self._pos -= 1
        self._cur >>= 1
        self._pos -= 1
        self.padding_bits = 7 - self._pos
        if self._pos < 0:
            self._eof = True
            raise EndOfStream()

    def read_bit(self) -> int:
        if self._pos < 0:
            self._load()
        bit = (self._cur >> self._pos) & 1
        self._pos -= 1
        self.bits_read += 1
        return bit

    def read_bits(self, n: int) -> int:
        """Read ``n`` bits and pack them MSB-first into an unsigned int."""
        _check_width(n)
        value = 0
        for i in range(n):
            try:
                bit = self.read_bit()
            except EndOfStream:
                raise EndOfStream(
                    f"end of bit stream after {i} of {n} bits", bits_read=i
                ) from None
            value = (value << 1) | bit
        return value

    def read_byte(self) -> int:
        return self.read_bits(8)

    def close(self) -> None:
        if self._close_fp:
            self._fp.close()


class BitWriter:
    """Write bits to a binary file object; ``close()`` pads the last byte."""

    def __init__(self, fp: IO[bytes], *, close_fp: bool = True):
        self._fp = fp
        self._close_fp = close_fp
        self._cur = 0
        self._nbits = 0
        self._closed = False
        self.bits_written = 0

    @classmethod
    def to_buffer(cls) -> "BitWriter":
        """Writer over an in-memory buffer; read it back with getvalue()."""
        return cls(io.BytesIO(), close_fp=False)

    def getvalue(self) -> bytes:
        if not isinstance(self._fp, io.BytesIO):
            raise TypeError("getvalue() needs a writer created with to_buffer()")
        return self._fp.getvalue()

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def write_bit(self, bit: int) -> None:
        if bit != 0 and bit != 1:
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        if self._closed:
            raise ValueError("write on closed BitWriter")
        self._cur = (self._cur << 1) | bit
        self._nbits += 1
        self.bits_written += 1
        if self._nbits == 8:
            self._fp.write(bytes((self._cur,)))
            self._cur = 0
            self._nbits = 0

    def write_bits(self, n: int, value: int) -> None:
        """Write the ``n``-bit big-endian representation of ``value``."""
        _check_width(n)
        if value < 0 or value >> n:
            raise ValueError(f"value {value} does not fit in {n} bits")
        for i in range(n - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    def write_byte(self, value: int) -> None:
        if not (0 <= value <= 0xFF):
            raise ValueError(f"byte must be 0..255, got {value}")
        self.write_bits(8, value)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        k = self._nbits
        last = (self._cur << (8 - k)) | ((1 << (7 - k)) - 1)
        self._fp.write(bytes((last,)))
        self._fp.flush()
        if self._close_fp:
            self._fp.close()


def open_read(path: str | Path) -> BitReader:
    return BitReader(open(path, "rb"))


def open_write(path: str | Path) -> BitWriter:
    return BitWriter(open(path, "wb"))
