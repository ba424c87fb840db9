from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from lzwhuff.core.bitchannel import BitReader, BitWriter
from lzwhuff.core.codec_base import Codec, Trace
from lzwhuff.core.priority_queue import PriorityQueue
from lzwhuff.errors import CorruptPayload, EmptyInput, EndOfStream, TruncatedStream

# A tree with at most 256 leaves is never deeper than 255.
MAX_TREE_DEPTH = 256

Code = Tuple[int, ...]


# -------------------
# Huffman base structures
# -------------------
@dataclass
class HuffmanNode:
    weight: int
    symbol: Optional[int] = None  # 0-255 for leaves, None for internal nodes
    left: int = -1  # child indices into HuffmanTree.nodes
    right: int = -1

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None


@dataclass
class HuffmanTree:
    """Arena of nodes; children are indices, ``root`` is the root index."""

    nodes: List[HuffmanNode] = field(default_factory=list)
    root: int = -1

    def add(self, node: HuffmanNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def node(self, idx: int) -> HuffmanNode:
        return self.nodes[idx]

    def leaves(self) -> List[int]:
        """Leaf symbols, pre-order."""
        out: List[int] = []
        stack = [self.root]
        while stack:
            n = self.nodes[stack.pop()]
            if n.is_leaf:
                out.append(n.symbol)  # type: ignore[arg-type]
            else:
                stack.append(n.right)
                stack.append(n.left)
        return out


def count_bytes(data: bytes) -> List[int]:
    freq = [0] * 256
    for b in data:
        freq[b] += 1
    return freq


def build_huffman_tree(freq: List[int]) -> HuffmanTree:
    """
    One leaf per symbol with nonzero weight, then merge the two lightest
    nodes until one is left. Children are (first extracted, second extracted).
    """
    tree = HuffmanTree()
    pq: PriorityQueue[int] = PriorityQueue(
        lambda a, b: tree.nodes[a].weight < tree.nodes[b].weight
    )

    for sym, f in enumerate(freq):
        if f > 0:
            pq.insert(tree.add(HuffmanNode(weight=f, symbol=sym)))

    if pq.is_empty():
        raise EmptyInput("cannot build a Huffman tree from empty input")

    while pq.size() > 1:
        a = pq.extract_min()
        b = pq.extract_min()
        w = tree.nodes[a].weight + tree.nodes[b].weight
        pq.insert(tree.add(HuffmanNode(weight=w, left=a, right=b)))

    tree.root = pq.extract_min()
    return tree


def build_code_table(tree: HuffmanTree) -> List[Optional[Code]]:
    """
    Per-byte code table, ``None`` for bytes absent from the tree.

    A lone leaf gets the one-bit code ``(0,)``: an empty code could not be
    counted by the decoder.
    """
    codes: List[Optional[Code]] = [None] * 256

    def dfs(idx: int, path: Code) -> None:
        node = tree.nodes[idx]
        if node.is_leaf:
            codes[node.symbol] = path if path else (0,)  # type: ignore[index]
            return
        dfs(node.left, path + (0,))
        dfs(node.right, path + (1,))

    dfs(tree.root, ())
    return codes


# -------------------
# Tree (de)serialization
# -------------------
def write_tree(writer: BitWriter, tree: HuffmanTree) -> None:
    """Pre-order: leaf = 1 + 8-bit symbol, internal = 0 + left + right."""

    def emit(idx: int) -> None:
        node = tree.nodes[idx]
        if node.is_leaf:
            writer.write_bit(1)
            writer.write_byte(node.symbol)  # type: ignore[arg-type]
            return
        writer.write_bit(0)
        emit(node.left)
        emit(node.right)

    emit(tree.root)


def _read_subtree(reader: BitReader, tree: HuffmanTree, bit: int, depth: int) -> int:
    if depth > MAX_TREE_DEPTH:
        raise CorruptPayload("serialized Huffman tree too deep")
    if bit == 1:
        return tree.add(HuffmanNode(weight=0, symbol=reader.read_byte()))
    if bit == 0:
        left = _read_subtree(reader, tree, reader.read_bit(), depth + 1)
        right = _read_subtree(reader, tree, reader.read_bit(), depth + 1)
        return tree.add(HuffmanNode(weight=0, left=left, right=right))
    raise CorruptPayload(f"invalid discriminator bit in Huffman tree: {bit!r}")


def read_tree(reader: BitReader, first_bit: Optional[int] = None) -> HuffmanTree:
    """Inverse of write_tree. Weights are not serialized and come back as 0."""
    tree = HuffmanTree()
    try:
        bit = reader.read_bit() if first_bit is None else first_bit
        tree.root = _read_subtree(reader, tree, bit, 0)
    except EndOfStream as e:
        raise TruncatedStream("bit stream ended inside the Huffman tree") from e
    return tree


# -------------------
# Diagnostics
# -------------------
def _ascii(sym: int) -> str:
    return f"'{chr(sym)}'" if 32 <= sym <= 126 else "-"


def _trace_occurrences(trace: Trace, freq: List[int]) -> None:
    trace("---=== Occurrences table ===---")
    for sym, f in enumerate(freq):
        if f > 0:
            trace(f"byte {sym:3d} 0x{sym:02X} {_ascii(sym):>3} occurrences={f}")


def _trace_tree(trace: Trace, tree: HuffmanTree) -> None:
    trace("---=== Huffman tree ===---")

    def walk(idx: int, indent: str) -> None:
        node = tree.nodes[idx]
        if node.is_leaf:
            trace(f"{indent}Leaf: byte=0x{node.symbol:02X} {_ascii(node.symbol)} weight={node.weight}")  # type: ignore[arg-type]
            return
        trace(f"{indent}Node: weight={node.weight}")
        walk(node.left, indent + "  ")
        walk(node.right, indent + "  ")

    walk(tree.root, "")


def _trace_codes(trace: Trace, codes: List[Optional[Code]]) -> None:
    trace("---=== Huffman codes ===---")
    for sym, code in enumerate(codes):
        if code is not None:
            trace(f"byte 0x{sym:02X} {_ascii(sym):>3} code={''.join(map(str, code))}")


# -------------------
# Encode / decode
# -------------------
def huffman_encode(data: bytes, writer: BitWriter, trace: Trace = None) -> None:
    """Write tree + codes for ``data``. Empty input writes nothing."""
    if not data:
        if trace:
            trace("empty input: no tree, no payload")
        return

    freq = count_bytes(data)
    tree = build_huffman_tree(freq)
    codes = build_code_table(tree)
    if trace:
        _trace_occurrences(trace, freq)
        _trace_tree(trace, tree)
        _trace_codes(trace, codes)

    write_tree(writer, tree)
    tree_bits = writer.bits_written
    for b in data:
        for bit in codes[b]:  # type: ignore[union-attr]
            writer.write_bit(bit)

    if trace:
        trace(f"tree={tree_bits} bits payload={writer.bits_written - tree_bits} bits")


def huffman_decode(reader: BitReader, trace: Trace = None) -> bytes:
    """Read a tree, then decode symbols until the stream ends on a code boundary."""
    try:
        first = reader.read_bit()
    except EndOfStream:
        return b""

    tree = read_tree(reader, first)
    if trace:
        _trace_tree(trace, tree)

    out = bytearray()
    root = tree.nodes[tree.root]

    if root.is_leaf:
        # lone leaf: one 0 bit per occurrence
        sym = root.symbol
        while True:
            try:
                bit = reader.read_bit()
            except EndOfStream:
                break
            if bit != 0:
                raise CorruptPayload("single-symbol Huffman stream with a 1 bit")
            out.append(sym)  # type: ignore[arg-type]
        return bytes(out)

    nodes = tree.nodes
    while True:
        try:
            bit = reader.read_bit()
        except EndOfStream:
            break
        path = [bit] if trace else None
        node = nodes[root.left if bit == 0 else root.right]
        while not node.is_leaf:
            try:
                bit = reader.read_bit()
            except EndOfStream as e:
                raise TruncatedStream("bit stream ended inside a Huffman code") from e
            if path is not None:
                path.append(bit)
            node = nodes[node.left if bit == 0 else node.right]
        out.append(node.symbol)  # type: ignore[arg-type]
        if trace:
            trace(f"{''.join(map(str, path))} -> 0x{node.symbol:02X}")  # type: ignore[arg-type]

    return bytes(out)


def huffman_compress(data: bytes, trace: Trace = None) -> bytes:
    writer = BitWriter.to_buffer()
    with writer:
        huffman_encode(bytes(data), writer, trace)
    return writer.getvalue()


def huffman_decompress(blob: bytes, trace: Trace = None) -> bytes:
    with BitReader.from_bytes(blob) as reader:
        return huffman_decode(reader, trace)


class CodecHuffman(Codec):
    codec_id = "huffman"

    def compress(self, data: bytes, trace: Trace = None) -> bytes:
        return huffman_compress(data, trace)

    def decompress(self, blob: bytes, trace: Trace = None) -> bytes:
        return huffman_decompress(blob, trace)
