"""Typed errors for lzwhuff.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
- Argument-range failures (bit not 0/1, value wider than the requested width)
  are programmer errors and stay plain ValueError.
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_CORRUPT = 11
EXIT_IO = 12


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage error (invalid args, unknown codec, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (empty Huffman input, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_CORRUPT, "CORRUPT", "Corrupt compressed data (bad LZW code, truncated stream, etc.)"),
    ExitCodeInfo(EXIT_IO, "IO", "Input/output failure (file cannot be opened, read or written)"),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE — do not edit manually.\n")
    lines.append("> Source of truth: `src/lzwhuff/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Most internal errors extend `LzwHuffError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append("- On any failure the partially written output file is removed.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class LzwHuffError(Exception):
    """Base error for lzwhuff."""

    exit_code: int = EXIT_GENERIC


class UsageError(LzwHuffError):
    exit_code = EXIT_USAGE


class CorruptPayload(LzwHuffError):
    exit_code = EXIT_CORRUPT


class TruncatedStream(CorruptPayload):
    """The bit stream ended inside a code or inside the serialized tree."""


class EmptyInput(LzwHuffError):
    """No symbols to build a Huffman tree from."""


class EmptyQueue(LzwHuffError):
    """extract_min() on an empty priority queue."""


class InputOutputError(LzwHuffError):
    exit_code = EXIT_IO


class EndOfStream(LzwHuffError):
    """No more valid bits in a BitReader.

    ``bits_read`` is the number of bits the failing read consumed before the
    stream ran dry: 0 means the stream ended on a read boundary.
    """

    def __init__(self, message: str = "end of bit stream", *, bits_read: int = 0):
        super().__init__(message)
        self.bits_read = bits_read
