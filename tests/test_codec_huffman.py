from __future__ import annotations

import pytest

from lzwhuff.core.bitchannel import BitReader, BitWriter
from lzwhuff.core.codec_huffman import (
    CodecHuffman,
    HuffmanNode,
    HuffmanTree,
    build_code_table,
    build_huffman_tree,
    count_bytes,
    huffman_compress,
    huffman_decompress,
    read_tree,
    write_tree,
)
from lzwhuff.errors import CorruptPayload, EmptyInput, TruncatedStream


def _abc_tree() -> HuffmanTree:
    # root -> (a, (b, c))
    tree = HuffmanTree()
    a = tree.add(HuffmanNode(weight=0, symbol=ord("a")))
    b = tree.add(HuffmanNode(weight=0, symbol=ord("b")))
    c = tree.add(HuffmanNode(weight=0, symbol=ord("c")))
    inner = tree.add(HuffmanNode(weight=0, left=b, right=c))
    tree.root = tree.add(HuffmanNode(weight=0, left=a, right=inner))
    return tree


def _stream(tree: HuffmanTree, payload: list[int]) -> bytes:
    w = BitWriter.to_buffer()
    with w:
        write_tree(w, tree)
        for bit in payload:
            w.write_bit(bit)
    return w.getvalue()


def test_count_bytes() -> None:
    freq = count_bytes(b"abracadabra")
    assert len(freq) == 256
    assert freq[ord("a")] == 5
    assert freq[ord("b")] == 2
    assert freq[ord("r")] == 2
    assert freq[ord("c")] == 1
    assert freq[ord("d")] == 1
    assert sum(freq) == 11


def test_empty_frequency_table_fails() -> None:
    with pytest.raises(EmptyInput):
        build_huffman_tree([0] * 256)


def test_single_symbol_tree_is_a_leaf() -> None:
    tree = build_huffman_tree(count_bytes(b"AAAA"))
    root = tree.node(tree.root)
    assert root.is_leaf
    assert root.symbol == 0x41
    assert root.weight == 4
    codes = build_code_table(tree)
    assert codes[0x41] == (0,)


def test_scenario_aaaa() -> None:
    # tree "1 01000001", then one 0 bit per occurrence, then padding
    blob = huffman_compress(b"AAAA")
    assert blob == b"\xa0\x83"
    assert huffman_decompress(blob) == b"AAAA"


def test_two_symbols_exact_bits() -> None:
    # tree 0 1[a] 1[b], payload a=0 b=1
    blob = huffman_compress(b"ab")
    assert blob == bytes([0x58, 0x6C, 0x4B])
    assert huffman_decompress(blob) == b"ab"


def test_leaf_coverage_and_code_table() -> None:
    data = b"abracadabra"
    tree = build_huffman_tree(count_bytes(data))
    assert sorted(tree.leaves()) == sorted(set(data))

    codes = build_code_table(tree)
    present = {sym for sym, code in enumerate(codes) if code is not None}
    assert present == set(data)

    # prefix-free
    all_codes = [codes[s] for s in present]
    for x in all_codes:
        for y in all_codes:
            if x is not y:
                assert x[: len(y)] != y


def test_internal_nodes_have_two_children_and_weights_sum() -> None:
    tree = build_huffman_tree(count_bytes(b"the quick brown fox jumps over the lazy dog"))
    for node in tree.nodes:
        if node.is_leaf:
            assert node.left == -1 and node.right == -1
        else:
            assert node.left >= 0 and node.right >= 0
            assert node.weight == tree.node(node.left).weight + tree.node(node.right).weight
    assert tree.node(tree.root).weight == 43


def test_frequent_symbols_get_shorter_codes() -> None:
    data = b"a" * 50 + b"b" * 20 + b"c" * 5 + b"d"
    codes = build_code_table(build_huffman_tree(count_bytes(data)))
    assert len(codes[ord("a")]) <= len(codes[ord("b")]) <= len(codes[ord("d")])


def test_tree_serialization_roundtrip() -> None:
    tree = build_huffman_tree(count_bytes(b"mississippi river"))
    w = BitWriter.to_buffer()
    with w:
        write_tree(w, tree)
    n_leaves = len(tree.leaves())
    # one bit per node + 8 bits per leaf
    assert w.bits_written == (2 * n_leaves - 1) + 8 * n_leaves

    back = read_tree(BitReader.from_bytes(w.getvalue()))
    assert back.leaves() == tree.leaves()
    assert build_code_table(back) == build_code_table(tree)


def test_decode_handcrafted_tree() -> None:
    tree = _abc_tree()
    assert huffman_decompress(_stream(tree, [0, 1, 0, 1, 1, 0])) == b"abca"


def test_end_of_stream_mid_code_is_truncation() -> None:
    with pytest.raises(TruncatedStream):
        huffman_decompress(_stream(_abc_tree(), [0, 1]))


def test_end_of_stream_inside_tree_is_truncation() -> None:
    w = BitWriter.to_buffer()
    with w:
        w.write_bit(0)
        w.write_bit(1)
        w.write_bits(4, 0b0110)
    with pytest.raises(TruncatedStream):
        huffman_decompress(w.getvalue())


def test_single_leaf_stream_rejects_one_bits() -> None:
    w = BitWriter.to_buffer()
    with w:
        w.write_bit(1)
        w.write_byte(0x41)
        w.write_bit(0)
        w.write_bit(1)
    with pytest.raises(CorruptPayload):
        huffman_decompress(w.getvalue())


def test_degenerate_deep_tree_is_rejected() -> None:
    w = BitWriter.to_buffer()
    with w:
        for _ in range(300):
            w.write_bit(0)
    with pytest.raises(CorruptPayload, match="too deep"):
        huffman_decompress(w.getvalue())


def test_empty_input_roundtrip() -> None:
    assert huffman_compress(b"") == b"\x7f"
    assert huffman_decompress(b"\x7f") == b""
    assert huffman_decompress(b"") == b""


@pytest.mark.parametrize(
    "data",
    [
        b"x",
        b"\x00",
        b"\xff" * 17,
        b"abracadabra",
        bytes(range(256)),
        bytes(range(256)) * 3 + b"tail",
        "caffè ☕ naïve façade".encode("utf-8"),
        b"\x00\x01" * 500,
    ],
)
def test_roundtrip(data: bytes) -> None:
    assert huffman_decompress(huffman_compress(data)) == data


def test_trace_does_not_change_output() -> None:
    lines: list[str] = []
    data = b"hello huffman"
    assert huffman_compress(data, lines.append) == huffman_compress(data)
    assert any("Occurrences" in ln for ln in lines)
    assert any("code=" in ln for ln in lines)

    dec_lines: list[str] = []
    assert huffman_decompress(huffman_compress(data), dec_lines.append) == data
    assert sum(1 for ln in dec_lines if "->" in ln) == len(data)


def test_codec_class() -> None:
    codec = CodecHuffman()
    assert codec.codec_id == "huffman"
    assert codec.decompress(codec.compress(b"codec class")) == b"codec class"
