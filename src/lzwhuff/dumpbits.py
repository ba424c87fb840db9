"""Bit dump of a padded bit stream.

Shows the payload bits grouped by byte and, in parentheses, the padding
marker stripped from the last byte (``0`` break bit followed by ``1`` bits).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lzwhuff.core.bitchannel import BitReader, open_read
from lzwhuff.errors import EndOfStream, InputOutputError


@dataclass(frozen=True)
class BitDump:
    bits: str
    padding_bits: int

    @property
    def total_bits(self) -> int:
        return len(self.bits)


def dump_reader(reader: BitReader) -> BitDump:
    out: list[str] = []
    while True:
        try:
            out.append(str(reader.read_bit()))
        except EndOfStream:
            break
    return BitDump(bits="".join(out), padding_bits=reader.padding_bits)


def dump_bytes(blob: bytes) -> BitDump:
    with BitReader.from_bytes(blob) as reader:
        return dump_reader(reader)


def dump_file(path: str | Path) -> BitDump:
    try:
        reader = open_read(path)
    except OSError as e:
        raise InputOutputError(f"cannot read {path}: {e.strerror or e}") from e
    with reader:
        return dump_reader(reader)


def format_dump(name: str, dump: BitDump) -> str:
    groups = [dump.bits[i : i + 8] for i in range(0, len(dump.bits), 8)]
    line = " ".join(groups)
    if dump.padding_bits:
        pad = "(0" + "1" * (dump.padding_bits - 1) + ")"
        line = f"{line} {pad}" if line else pad
    return "\n".join(
        [
            f"Filename: {name}",
            f"Total bits: {dump.total_bits}",
            f"Padding bits: {dump.padding_bits}",
            line,
        ]
    )
