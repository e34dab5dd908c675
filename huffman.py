import heapq
from collections import Counter
from typing import BinaryIO, Dict, List, Optional

from bitops import CHUNK_SIZE

NO_NODE = -1  #: Index used for an absent child or an empty tree


def count_frequencies(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Dict[int, int]:
    """Count byte occurrences over the whole of ``stream``.

    The stream is rewound to its start first, then read to the end.

    :param stream: Seekable readable binary stream.
    :type stream: BinaryIO
    :param chunk_size: Number of bytes requested per read.
    :type chunk_size: int
    :returns: Mapping from byte value to count, ordered by byte value.
        Bytes that never occur are absent; an empty stream gives ``{}``.
    :rtype: Dict[int, int]
    """
    stream.seek(0)
    counter = Counter()
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        counter.update(chunk)
    return dict(sorted(counter.items()))


class HuffmanTree:
    """Binary Huffman tree stored as an arena of nodes addressed by index.

    Node ``i`` is described by ``symbols[i]``, ``freqs[i]``, ``left[i]`` and
    ``right[i]``. Leaves carry a symbol and no children; internal nodes carry
    ``None`` and two children. The only exception is the synthetic root built
    for a one-symbol table, whose right child is ``NO_NODE``.

    :ivar symbols: Symbol of each leaf, ``None`` for internal nodes.
    :type symbols: List[int | None]
    :ivar freqs: Aggregate frequency of the subtree rooted at each node.
    :type freqs: List[int]
    :ivar left: Index of each node's left child, or ``NO_NODE``.
    :type left: List[int]
    :ivar right: Index of each node's right child, or ``NO_NODE``.
    :type right: List[int]
    :ivar root: Index of the root node, ``NO_NODE`` for an empty tree.
    :type root: int
    """

    def __init__(self):
        """Create an empty tree with no nodes and no root.

        :returns: None
        :rtype: None
        """
        self.symbols: List[Optional[int]] = []
        self.freqs: List[int] = []
        self.left: List[int] = []
        self.right: List[int] = []
        self.root = NO_NODE

    def __len__(self) -> int:
        """Number of nodes in the arena."""
        return len(self.freqs)

    def add_leaf(self, symbol: int, freq: int) -> int:
        """Append a leaf node and return its index."""
        return self._add(symbol, freq, NO_NODE, NO_NODE)

    def add_internal(self, left: int, right: int = NO_NODE) -> int:
        """Append an internal node over ``left`` and ``right``.

        Its frequency is the sum of its children's frequencies.

        :returns: Index of the new node.
        :rtype: int
        """
        freq = self.freqs[left]
        if right != NO_NODE:
            freq += self.freqs[right]
        return self._add(None, freq, left, right)

    def _add(self, symbol: Optional[int], freq: int, left: int, right: int) -> int:
        """Append one node to every arena list.

        :param symbol: Leaf symbol, or ``None`` for an internal node.
        :type symbol: int | None
        :param freq: Aggregate frequency of the node.
        :type freq: int
        :param left: Index of the left child, or ``NO_NODE``.
        :type left: int
        :param right: Index of the right child, or ``NO_NODE``.
        :type right: int
        :returns: Index of the new node.
        :rtype: int
        """
        self.symbols.append(symbol)
        self.freqs.append(freq)
        self.left.append(left)
        self.right.append(right)
        return len(self.freqs) - 1

    def is_leaf(self, node: int) -> bool:
        """Check whether ``node`` has no children.

        :param node: Node index.
        :type node: int
        :returns: ``True`` for a leaf.
        :rtype: bool
        """
        return self.left[node] == NO_NODE and self.right[node] == NO_NODE

    def child(self, node: int, bit: int) -> int:
        """Follow the edge labelled ``bit`` (0 = left, 1 = right)."""
        return self.right[node] if bit else self.left[node]

    @property
    def total(self) -> int:
        """Total frequency at the root, i.e. the number of encoded symbols."""
        if self.root == NO_NODE:
            return 0
        return self.freqs[self.root]


def build_tree(frequencies: Dict[int, int]) -> HuffmanTree:
    """Build a Huffman tree by repeatedly merging the two rarest nodes.

    Leaves are created in ascending symbol order and every merge appends a
    new node, so node indices follow creation order. Heap entries are
    ``(frequency, index)``: ties go to the node created first. The first node
    popped becomes the left child. Encoder and decoder get the same tree from
    the same table because the result depends only on the table contents.

    A one-symbol table gets a synthetic root whose only child is the leaf
    (on the left), so the symbol is coded as ``"0"``.

    :param frequencies: Mapping from symbol to a positive count.
    :type frequencies: Dict[int, int]
    :returns: The built tree.
    :rtype: HuffmanTree
    :raises ValueError: If ``frequencies`` is empty.
    """
    if not frequencies:
        raise ValueError("Cannot build a Huffman tree from an empty table")

    tree = HuffmanTree()
    heap = []
    for symbol, freq in sorted(frequencies.items()):
        node = tree.add_leaf(symbol, freq)
        heap.append((freq, node))
    heapq.heapify(heap)

    if len(heap) == 1:
        _, leaf = heap[0]
        tree.root = tree.add_internal(leaf)
        return tree

    while len(heap) > 1:
        _, left = heapq.heappop(heap)
        _, right = heapq.heappop(heap)
        merged = tree.add_internal(left, right)
        heapq.heappush(heap, (tree.freqs[merged], merged))

    tree.root = heap[0][1]
    return tree


def generate_codes(tree: HuffmanTree) -> Dict[int, str]:
    """Assign every leaf the bit-string of its path from the root.

    Walks the tree with an explicit stack, so arbitrarily deep trees are fine.

    :param tree: Tree produced by :func:`build_tree`.
    :type tree: HuffmanTree
    :returns: Mapping from symbol to its code, a string of ``'0'``/``'1'``.
    :rtype: Dict[int, str]
    """
    codes: Dict[int, str] = {}
    if tree.root == NO_NODE:
        return codes

    stack = [(tree.root, "")]
    while stack:
        node, prefix = stack.pop()
        if tree.is_leaf(node):
            codes[tree.symbols[node]] = prefix
            continue
        if tree.right[node] != NO_NODE:
            stack.append((tree.right[node], prefix + "1"))
        if tree.left[node] != NO_NODE:
            stack.append((tree.left[node], prefix + "0"))
    return codes
