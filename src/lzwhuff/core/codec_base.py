from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

# Diagnostics sink: receives human-readable trace lines, never affects output.
Trace = Optional[Callable[[str], None]]


class Codec(ABC):
    """
    Minimal interface for the pluggable codecs.

    Both directions work on whole byte strings; the compressed form is a
    self-terminating bit stream (see core.bitchannel), no header.
    """

    codec_id: str

    @abstractmethod
    def compress(self, data: bytes, trace: Trace = None) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def decompress(self, blob: bytes, trace: Trace = None) -> bytes:
        raise NotImplementedError
