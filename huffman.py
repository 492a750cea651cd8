import heapq
import itertools
import string
from typing import Dict, Iterable, List, Optional, Tuple

from bitops import Bit, ONE, ZERO
from errors import InsufficientSymbols, MalformedTree, UnknownSymbol

_UPPERCASE_TABLE = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


class EncodingTreeNode:
    """Node of a Huffman encoding tree.

    A node is either a leaf holding one symbol, or an internal node with
    both a ``zero`` and a ``one`` child and no symbol. Each node owns its
    children; subtrees are never shared between trees.

    :ivar symbol: The symbol stored at a leaf; ``None`` for internal nodes.
    :type symbol: str | None
    :ivar zero: Child reached by a 0 bit.
    :type zero: EncodingTreeNode | None
    :ivar one: Child reached by a 1 bit.
    :type one: EncodingTreeNode | None
    """

    __slots__ = ("symbol", "zero", "one")

    def __init__(self, symbol=None, zero=None, one=None):
        """Create a leaf (``symbol`` only) or an internal node (both children).

        :raises MalformedTree: If the arguments describe neither a leaf nor
            a node with exactly two children.
        """
        if (zero is None) != (one is None):
            raise MalformedTree("An internal node needs exactly two children")
        if zero is None and symbol is None:
            raise MalformedTree("A leaf node needs a symbol")
        if zero is not None and symbol is not None:
            raise MalformedTree("An internal node cannot hold a symbol")
        self.symbol = symbol
        self.zero = zero
        self.one = one

    @property
    def is_leaf(self) -> bool:
        return self.zero is None

    def __eq__(self, other):
        """Structural equality: same shape with the same symbols at the leaves."""
        if not isinstance(other, EncodingTreeNode):
            return NotImplemented
        if self.is_leaf or other.is_leaf:
            return self.is_leaf and other.is_leaf and self.symbol == other.symbol
        return self.zero == other.zero and self.one == other.one

    __hash__ = None

    def __repr__(self):
        if self.is_leaf:
            return f"EncodingTreeNode({self.symbol!r})"
        return f"EncodingTreeNode(zero={self.zero!r}, one={self.one!r})"


class EncodedData:
    """Result of :func:`compress`: a flattened tree plus the message bits.

    :ivar tree_shape: Pre-order shape bits (1 = internal node, 0 = leaf).
    :type tree_shape: List[Bit]
    :ivar tree_leaves: Leaf symbols in pre-order.
    :type tree_leaves: List[str]
    :ivar message_bits: The encoded message.
    :type message_bits: List[Bit]
    """

    def __init__(self, tree_shape=None, tree_leaves=None, message_bits=None):
        self.tree_shape: List[Bit] = list(tree_shape or [])
        self.tree_leaves: List[str] = list(tree_leaves or [])
        self.message_bits: List[Bit] = list(message_bits or [])

    def __eq__(self, other):
        if not isinstance(other, EncodedData):
            return NotImplemented
        return (
            self.tree_shape == other.tree_shape
            and self.tree_leaves == other.tree_leaves
            and self.message_bits == other.message_bits
        )

    __hash__ = None

    def __repr__(self):
        return (
            "EncodedData("
            f"tree_shape={''.join(map(str, self.tree_shape))!r}, "
            f"tree_leaves={self.tree_leaves!r}, "
            f"message_bits={''.join(map(str, self.message_bits))!r})"
        )


def uppercase_ascii(text: str) -> str:
    """Uppercase the ASCII letters of ``text``, leaving other characters alone.

    Only ``a``-``z`` are changed, so the length of the text and the byte
    range of every character are preserved.
    """
    return text.translate(_UPPERCASE_TABLE)


def count_frequencies(text: Iterable[str]) -> Dict[str, int]:
    """Count symbol occurrences, keeping keys in first-seen order.

    :param text: Symbols to count.
    :type text: Iterable[str]
    :returns: Mapping from symbol to number of occurrences.
    :rtype: Dict[str, int]
    """
    frequencies: Dict[str, int] = {}
    for symbol in text:
        frequencies[symbol] = frequencies.get(symbol, 0) + 1
    return frequencies


def build_huffman_tree(text: str, fold_case: bool = True) -> EncodingTreeNode:
    """Build an optimal Huffman encoding tree for ``text``.

    Leaves are seeded in first-seen order of their symbols. The two
    lightest entries are merged repeatedly, the first one dequeued
    becoming the ``zero`` child. Among entries of equal weight the most
    recently enqueued one is dequeued first, which makes the resulting
    tree fully determined by the input.

    :param text: Text to build the tree for.
    :type text: str
    :param fold_case: Uppercase ASCII letters before counting.
    :type fold_case: bool
    :returns: Root of the tree.
    :rtype: EncodingTreeNode
    :raises InsufficientSymbols: If ``text`` has fewer than two distinct symbols.
    """
    if fold_case:
        text = uppercase_ascii(text)
    frequencies = count_frequencies(text)
    if len(frequencies) < 2:
        raise InsufficientSymbols(
            "Input text must contain at least two distinct characters"
        )

    counter = itertools.count()
    heap: List[Tuple[int, int, EncodingTreeNode]] = []
    for symbol, freq in frequencies.items():
        heapq.heappush(heap, (freq, -next(counter), EncodingTreeNode(symbol)))

    while len(heap) > 1:
        zero_freq, _, zero = heapq.heappop(heap)
        one_freq, _, one = heapq.heappop(heap)
        merged = EncodingTreeNode(zero=zero, one=one)
        heapq.heappush(heap, (zero_freq + one_freq, -next(counter), merged))

    return heap[0][2]


def build_code_table(tree: Optional[EncodingTreeNode]) -> Dict[str, List[Bit]]:
    """Map every leaf symbol of ``tree`` to its root-to-leaf bit path."""
    table: Dict[str, List[Bit]] = {}
    _collect_codes(tree, [], table)
    return table


def _collect_codes(node, path, table):
    if node is None:
        return
    if node.is_leaf:
        table[node.symbol] = path
        return
    _collect_codes(node.zero, path + [ZERO], table)
    _collect_codes(node.one, path + [ONE], table)


def flatten_tree(tree: Optional[EncodingTreeNode]) -> Tuple[List[Bit], List[str]]:
    """Flatten ``tree`` into its pre-order shape bits and leaf symbols.

    Each internal node contributes a 1 bit, each leaf a 0 bit and its
    symbol. An empty tree flattens to two empty lists.

    :param tree: Root of the tree, or ``None``.
    :type tree: EncodingTreeNode | None
    :returns: ``(tree_shape, tree_leaves)``.
    :rtype: Tuple[List[Bit], List[str]]
    """
    shape: List[Bit] = []
    leaves: List[str] = []
    _flatten(tree, shape, leaves)
    return shape, leaves


def _flatten(node, shape, leaves):
    if node is None:
        return
    if node.is_leaf:
        shape.append(ZERO)
        leaves.append(node.symbol)
    else:
        shape.append(ONE)
        _flatten(node.zero, shape, leaves)
        _flatten(node.one, shape, leaves)


def unflatten_tree(
    tree_shape: Iterable[int], tree_leaves: Iterable[str]
) -> Optional[EncodingTreeNode]:
    """Rebuild the tree described by :func:`flatten_tree` output.

    Empty inputs give ``None``.

    :param tree_shape: Pre-order shape bits.
    :type tree_shape: Iterable[Bit]
    :param tree_leaves: Leaf symbols in pre-order.
    :type tree_leaves: Iterable[str]
    :returns: Root of the rebuilt tree.
    :rtype: EncodingTreeNode | None
    :raises MalformedTree: If the shape and leaves do not describe exactly
        one full binary tree.
    """
    shape = iter(tree_shape)
    leaves = iter(tree_leaves)
    first = next(shape, None)
    if first is None:
        if next(leaves, None) is not None:
            raise MalformedTree("Tree leaves given without a tree shape")
        return None
    root = _unflatten(first, shape, leaves)
    if next(shape, None) is not None:
        raise MalformedTree("Tree shape has bits left over")
    if next(leaves, None) is not None:
        raise MalformedTree("Tree leaves left over")
    return root


def _unflatten(bit, shape, leaves):
    if bit == 0:
        symbol = next(leaves, None)
        if symbol is None:
            raise MalformedTree("Ran out of tree leaves")
        return EncodingTreeNode(symbol)
    children = []
    for _ in range(2):
        child_bit = next(shape, None)
        if child_bit is None:
            raise MalformedTree("Ran out of tree shape bits")
        children.append(_unflatten(child_bit, shape, leaves))
    return EncodingTreeNode(zero=children[0], one=children[1])


def encode_text(tree: EncodingTreeNode, text: str) -> List[Bit]:
    """Encode ``text`` as the concatenation of each symbol's code in ``tree``.

    :param tree: Encoding tree containing every symbol of ``text``.
    :type tree: EncodingTreeNode
    :param text: Text to encode.
    :type text: str
    :returns: Message bits.
    :rtype: List[Bit]
    :raises UnknownSymbol: If a symbol of ``text`` is not in ``tree``.
    """
    table = build_code_table(tree)
    bits: List[Bit] = []
    for symbol in text:
        try:
            bits.extend(table[symbol])
        except KeyError:
            raise UnknownSymbol(
                f"Symbol {symbol!r} does not appear in the encoding tree"
            ) from None
    return bits


def decode_text(tree: Optional[EncodingTreeNode], message_bits: Iterable[int]) -> str:
    """Decode ``message_bits`` by walking ``tree`` from the root.

    A partial code left over when the bits run out is dropped, so trailing
    padding bits are tolerated. The tree is not modified.

    :param tree: Encoding tree, or ``None`` (which decodes to ``""``).
    :type tree: EncodingTreeNode | None
    :param message_bits: Bits to decode.
    :type message_bits: Iterable[Bit]
    :returns: The decoded text.
    :rtype: str
    :raises MalformedTree: If the root of ``tree`` is a leaf.
    """
    if tree is None:
        return ""
    if tree.is_leaf:
        raise MalformedTree("Cannot decode with a tree of a single leaf")

    symbols = []
    node = tree
    for bit in message_bits:
        if node.is_leaf:
            symbols.append(node.symbol)
            node = tree
        node = node.zero if bit == 0 else node.one
    if node.is_leaf:
        symbols.append(node.symbol)
    return "".join(symbols)


def compress(text: str, fold_case: bool = True) -> EncodedData:
    """Compress ``text`` into a flattened tree and message bits.

    :param text: Text to compress.
    :type text: str
    :param fold_case: Uppercase ASCII letters first; decompressing then
        yields the uppercased text.
    :type fold_case: bool
    :returns: The encoded data.
    :rtype: EncodedData
    :raises InsufficientSymbols: If ``text`` has fewer than two distinct symbols.
    """
    if fold_case:
        text = uppercase_ascii(text)
    tree = build_huffman_tree(text, fold_case=False)
    tree_shape, tree_leaves = flatten_tree(tree)
    message_bits = encode_text(tree, text)
    return EncodedData(tree_shape, tree_leaves, message_bits)


def decompress(data: EncodedData) -> str:
    """Recover the text held by ``data``. ``data`` is left untouched.

    :param data: Encoded data produced by :func:`compress`.
    :type data: EncodedData
    :returns: The decoded text.
    :rtype: str
    :raises MalformedTree: If the flattened tree in ``data`` is invalid.
    """
    tree = unflatten_tree(list(data.tree_shape), list(data.tree_leaves))
    return decode_text(tree, list(data.message_bits))
