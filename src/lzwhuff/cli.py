"""lzwhuff CLI.

This is the stable CLI entrypoint (console-script: ``lzwhuff``).

  lzwhuff compress   <input> <output> [--codec huffman|lzw] [-v]
  lzwhuff decompress <input> <output> [--codec huffman|lzw] [-v]
  lzwhuff dump-bits  <input>

``-`` as input/output means stdin/stdout. The compressed formats carry no
header, so decompress must be told the codec that produced the file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from lzwhuff.core.codec_base import Trace
from lzwhuff.core.registry import (
    CODECS,
    DEFAULT_CODEC,
    compress_file,
    decompress_file,
    get_codec,
    read_input,
    write_output,
)
from lzwhuff.errors import EXIT_GENERIC, EXIT_USAGE, LzwHuffError

STDIO = "-"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_codec_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--codec",
        default=DEFAULT_CODEC,
        choices=sorted(CODECS),
        help=f"Codec id (default: {DEFAULT_CODEC})",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print codec diagnostics (tables, tree, dictionary additions)",
    )


def _make_trace(verbose: bool, output: str) -> Trace:
    if not verbose:
        return None
    # keep stdout clean when it carries the data
    stream = sys.stderr if output == STDIO else sys.stdout

    def trace(msg: str) -> None:
        print(msg, file=stream)

    return trace


def _run_stdio(direction: str, codec_id: str, input_arg: str, output_arg: str, trace: Trace) -> int:
    codec = get_codec(codec_id)
    data = sys.stdin.buffer.read() if input_arg == STDIO else read_input(Path(input_arg))
    out = codec.compress(data, trace) if direction == "compress" else codec.decompress(data, trace)
    if output_arg == STDIO:
        sys.stdout.buffer.write(out)
        sys.stdout.buffer.flush()
    else:
        write_output(Path(output_arg), out)
    return 0


def _file_compress(input_arg: str, output_arg: str, codec_id: str, verbose: bool) -> int:
    trace = _make_trace(verbose, output_arg)
    if STDIO in (input_arg, output_arg):
        return _run_stdio("compress", codec_id, input_arg, output_arg, trace)

    n_in, n_out = compress_file(codec_id, input_arg, output_arg, trace)
    if verbose:
        ratio = (n_out / n_in) if n_in else 0.0
        print(f"File '{input_arg}' ({n_in} bytes) compressed to '{output_arg}' ({n_out} bytes), ratio {ratio:.3f}")
    return 0


def _file_decompress(input_arg: str, output_arg: str, codec_id: str, verbose: bool) -> int:
    trace = _make_trace(verbose, output_arg)
    if STDIO in (input_arg, output_arg):
        return _run_stdio("decompress", codec_id, input_arg, output_arg, trace)

    n_in, n_out = decompress_file(codec_id, input_arg, output_arg, trace)
    if verbose:
        print(f"Decompression complete: '{input_arg}' ({n_in} bytes) -> '{output_arg}' ({n_out} bytes)")
    return 0


def _dump_bits(input_arg: str) -> int:
    from lzwhuff.dumpbits import dump_bytes, dump_file, format_dump

    if input_arg == STDIO:
        dump = dump_bytes(sys.stdin.buffer.read())
    else:
        dump = dump_file(input_arg)
    print(format_dump(input_arg, dump))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lzwhuff", description="Lossless LZW / Huffman file compression"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress a file")
    p_c.add_argument("input", help="Source file ('-' for stdin)")
    p_c.add_argument("output", help="Destination file ('-' for stdout)")
    _add_codec_args(p_c)
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Decompress a file produced by 'compress'")
    p_d.add_argument("input", help="Compressed file ('-' for stdin)")
    p_d.add_argument("output", help="Destination file ('-' for stdout)")
    _add_codec_args(p_d)
    _add_common_args(p_d)

    p_b = sub.add_parser("dump-bits", help="Show the bits of a compressed file and its padding")
    p_b.add_argument("input", help="File to dump ('-' for stdin)")
    _add_common_args(p_b)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "compress":
            return _file_compress(ns.input, ns.output, ns.codec, bool(ns.verbose))
        if ns.cmd == "decompress":
            return _file_decompress(ns.input, ns.output, ns.codec, bool(ns.verbose))
        if ns.cmd == "dump-bits":
            return _dump_bits(ns.input)
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except LzwHuffError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[lzwhuff] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except ValueError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[lzwhuff] {e}", file=sys.stderr)
        return EXIT_USAGE
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[lzwhuff] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
