"""LZW with fixed 12-bit codes.

The dictionary starts with the 256 single-byte sequences (codes 0..255);
new sequences get codes 256, 257, ... in order of appearance until the table
holds 4096 entries. A full table is frozen: no eviction, no reset, existing
entries stay usable. Encoder and decoder rebuild the same table from the
code stream, nothing but the codes is transmitted.
"""

from __future__ import annotations

from typing import Dict, Final, List, Optional

from lzwhuff.core.bitchannel import BitReader, BitWriter
from lzwhuff.core.codec_base import Codec, Trace
from lzwhuff.errors import CorruptPayload, EndOfStream, TruncatedStream

CODE_WIDTH: Final[int] = 12
INITIAL_DICT_SIZE: Final[int] = 256
MAX_DICT_SIZE: Final[int] = 1 << CODE_WIDTH  # 4096


def _show(seq: bytes) -> str:
    txt = "".join(chr(b) if 32 <= b <= 126 else "." for b in seq)
    return f"{seq.hex().upper()} ('{txt}')"


class LZWEncoder:
    """Longest-match state machine: sequence -> code."""

    def __init__(self, trace: Trace = None):
        self.dictionary: Dict[bytes, int] = {bytes((i,)): i for i in range(INITIAL_DICT_SIZE)}
        self.next_code = INITIAL_DICT_SIZE
        self._buffer = b""
        self._trace = trace

    @property
    def is_full(self) -> bool:
        return self.next_code >= MAX_DICT_SIZE

    def push(self, byte: int) -> Optional[int]:
        """Feed one input byte; return the code to emit, if any."""
        grown = self._buffer + bytes((byte,))
        if grown in self.dictionary:
            self._buffer = grown
            return None

        # self._buffer matched on the previous step (or is a single byte)
        code = self.dictionary[self._buffer]
        if not self.is_full:
            self.dictionary[grown] = self.next_code
            if self._trace:
                self._trace(f"Added code {self.next_code} for sequence {_show(grown)}")
            self.next_code += 1
        self._buffer = grown[-1:]
        return code

    def finish(self) -> Optional[int]:
        """Code for the pending match, or None if nothing is pending."""
        if not self._buffer:
            return None
        code = self.dictionary[self._buffer]
        self._buffer = b""
        return code


class LZWDecoder:
    """Inverse table: code -> sequence, indexed directly by code."""

    def __init__(self, trace: Trace = None):
        self.table: List[bytes] = [bytes((i,)) for i in range(INITIAL_DICT_SIZE)]
        self.next_code = INITIAL_DICT_SIZE
        self._prev: Optional[bytes] = None
        self._trace = trace

    @property
    def is_full(self) -> bool:
        return self.next_code >= MAX_DICT_SIZE

    def feed(self, code: int) -> bytes:
        """Decode one code and return its byte sequence."""
        prev = self._prev
        if prev is None:
            if code >= INITIAL_DICT_SIZE:
                raise CorruptPayload(f"invalid first LZW code: {code}")
            self._prev = self.table[code]
            return self._prev

        if code < self.next_code:
            seq = self.table[code]
        elif code == self.next_code:
            # code being defined by this very step: prev + prev[0]
            seq = prev + prev[:1]
        else:
            raise CorruptPayload(f"invalid LZW code {code} (next code is {self.next_code})")

        if not self.is_full:
            self.table.append(prev + seq[:1])
            if self._trace:
                self._trace(f"Added code {self.next_code} for sequence {_show(self.table[-1])}")
            self.next_code += 1

        self._prev = seq
        return seq


def lzw_codes(data: bytes, trace: Trace = None) -> List[int]:
    """Code sequence the encoder emits for ``data``."""
    enc = LZWEncoder(trace)
    out: List[int] = []
    for b in data:
        code = enc.push(b)
        if code is not None:
            out.append(code)
    last = enc.finish()
    if last is not None:
        out.append(last)
    return out


def lzw_encode(data: bytes, writer: BitWriter, trace: Trace = None) -> int:
    """Write the 12-bit codes for ``data``; return how many were written."""
    n = 0
    for code in lzw_codes(data, trace):
        writer.write_bits(CODE_WIDTH, code)
        n += 1
    if trace:
        trace(f"{len(data)} bytes -> {n} codes of {CODE_WIDTH} bits")
    return n


def lzw_decode(reader: BitReader, trace: Trace = None) -> bytes:
    """Decode codes until the stream ends on a code boundary."""
    dec = LZWDecoder(trace)
    out = bytearray()
    while True:
        try:
            code = reader.read_bits(CODE_WIDTH)
        except EndOfStream as e:
            if e.bits_read:
                raise TruncatedStream(
                    f"bit stream ended inside an LZW code ({e.bits_read} of {CODE_WIDTH} bits)"
                ) from e
            break
        out += dec.feed(code)
    return bytes(out)


def lzw_compress(data: bytes, trace: Trace = None) -> bytes:
    writer = BitWriter.to_buffer()
    with writer:
        lzw_encode(bytes(data), writer, trace)
    return writer.getvalue()


def lzw_decompress(blob: bytes, trace: Trace = None) -> bytes:
    with BitReader.from_bytes(blob) as reader:
        return lzw_decode(reader, trace)


class CodecLZW(Codec):
    codec_id = "lzw"

    def compress(self, data: bytes, trace: Trace = None) -> bytes:
        return lzw_compress(data, trace)

    def decompress(self, blob: bytes, trace: Trace = None) -> bytes:
        return lzw_decompress(blob, trace)
