import io
import random
import pytest

from huffman import NO_NODE, HuffmanTree, build_tree, count_frequencies, generate_codes


def _assert_prefix_free(codes):
    values = sorted(codes.values())
    for a, b in zip(values, values[1:]):
        assert not b.startswith(a)


def test_count_frequencies_rewinds_and_sorts():
    stream = io.BytesIO(b"cabbac")
    stream.seek(0, io.SEEK_END)
    freqs = count_frequencies(stream, chunk_size=4)
    assert freqs == {ord("a"): 2, ord("b"): 2, ord("c"): 2}
    assert list(freqs) == sorted(freqs)


def test_count_frequencies_empty_stream():
    assert count_frequencies(io.BytesIO(b"")) == {}


def test_build_tree_empty_table_raises():
    with pytest.raises(ValueError):
        build_tree({})


def test_generate_codes_empty_tree():
    assert generate_codes(HuffmanTree()) == {}


def test_single_symbol_gets_synthetic_root():
    tree = build_tree({65: 10})
    assert not tree.is_leaf(tree.root)
    assert tree.right[tree.root] == NO_NODE
    assert tree.symbols[tree.left[tree.root]] == 65
    assert tree.total == 10
    assert generate_codes(tree) == {65: "0"}


def test_aaabbc_code_lengths_and_tie_break():
    freqs = count_frequencies(io.BytesIO(b"aaabbc"))
    assert freqs == {ord("a"): 3, ord("b"): 2, ord("c"): 1}
    codes = generate_codes(build_tree(freqs))
    assert {chr(s): len(c) for s, c in codes.items()} == {"a": 1, "b": 2, "c": 2}
    assert codes == {ord("a"): "0", ord("c"): "10", ord("b"): "11"}


def test_tree_shape_invariants():
    rng = random.Random(1234)
    freqs = {s: rng.randint(1, 500) for s in rng.sample(range(256), 60)}
    tree = build_tree(freqs)
    assert tree.total == sum(freqs.values())
    leaves = [i for i in range(len(tree)) if tree.is_leaf(i)]
    assert sorted(tree.symbols[i] for i in leaves) == sorted(freqs)
    for node in range(len(tree)):
        if not tree.is_leaf(node):
            assert tree.left[node] != NO_NODE and tree.right[node] != NO_NODE
            assert tree.freqs[node] == (
                tree.freqs[tree.left[node]] + tree.freqs[tree.right[node]]
            )
    assert len(tree) == 2 * len(freqs) - 1


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_codes_are_prefix_free_and_non_empty(seed):
    rng = random.Random(seed)
    size = rng.choice([2, 3, 17, 256])
    freqs = {s: rng.randint(1, 1000) for s in rng.sample(range(256), size)}
    codes = generate_codes(build_tree(freqs))
    assert set(codes) == set(freqs)
    assert all(code and set(code) <= {"0", "1"} for code in codes.values())
    _assert_prefix_free(codes)


def test_build_is_deterministic_and_order_independent():
    freqs = {s: (s % 7) + 1 for s in range(256)}
    reordered = dict(reversed(list(freqs.items())))
    assert generate_codes(build_tree(freqs)) == generate_codes(build_tree(freqs))
    assert generate_codes(build_tree(freqs)) == generate_codes(build_tree(reordered))


def test_maximally_unbalanced_tree():
    fib = [1, 1]
    while len(fib) < 256:
        fib.append(fib[-1] + fib[-2])
    freqs = dict(enumerate(fib))
    codes = generate_codes(build_tree(freqs))
    lengths = sorted(len(c) for c in codes.values())
    assert lengths[0] == 1
    assert lengths[-1] == 255
    _assert_prefix_free(codes)
