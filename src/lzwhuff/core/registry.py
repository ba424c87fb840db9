from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from lzwhuff.core.codec_base import Codec, Trace
from lzwhuff.core.codec_huffman import CodecHuffman
from lzwhuff.core.codec_lzw import CodecLZW
from lzwhuff.errors import InputOutputError, UsageError

CODECS: Dict[str, Callable[[], Codec]] = {
    CodecHuffman.codec_id: CodecHuffman,
    CodecLZW.codec_id: CodecLZW,
}

DEFAULT_CODEC = CodecHuffman.codec_id


def get_codec(codec_id: str) -> Codec:
    try:
        factory = CODECS[codec_id.strip().lower()]
    except KeyError:
        raise UsageError(
            f"unknown codec: {codec_id!r} (valid: {', '.join(sorted(CODECS))})"
        ) from None
    return factory()


def read_input(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise InputOutputError(f"cannot read {path}: {e.strerror or e}") from e


def write_output(path: Path, blob: bytes) -> int:
    """Write ``blob`` to ``path``; a failed write leaves no partial file behind."""
    try:
        with path.open("wb") as fp:
            fp.write(blob)
    except OSError as e:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            pass
        raise InputOutputError(f"cannot write {path}: {e.strerror or e}") from e
    return len(blob)


def compress_file(
    codec_id: str, input_path: str | Path, output_path: str | Path, trace: Trace = None
) -> tuple[int, int]:
    """Compress a file; return (input size, output size)."""
    codec = get_codec(codec_id)
    data = read_input(Path(input_path))
    n_out = write_output(Path(output_path), codec.compress(data, trace))
    return len(data), n_out


def decompress_file(
    codec_id: str, input_path: str | Path, output_path: str | Path, trace: Trace = None
) -> tuple[int, int]:
    """Decompress a file; return (input size, output size)."""
    codec = get_codec(codec_id)
    blob = read_input(Path(input_path))
    n_out = write_output(Path(output_path), codec.decompress(blob, trace))
    return len(blob), n_out
