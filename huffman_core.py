# filename: huffman_core.py

import logging
from collections import Counter

from huffman_config import ALPHABET_SIZE, CHUNK_SIZE, HuffmanConfig
from huffman_errors import CapacityExceededError, HeapUnderflowError, SymbolOutOfRangeError

logger = logging.getLogger(__name__)


class HuffmanNode:
    __slots__ = ("symbol", "freq", "left", "right")

    def __init__(self, symbol=None, freq=0):
        # symbol is None for internal nodes
        self.symbol = symbol
        self.freq = freq
        self.left = None
        self.right = None

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        return f"HuffmanNode(symbol={self.symbol!r}, freq={self.freq}, left={self.left}, right={self.right})"


class NodeArena:
    """Fixed pool of tree nodes owned by one encoding run.

    Slots are preallocated up front and handed out in order by allocate().
    Nodes refer to their children by slot index, never by reference, and
    nothing is released until reset() rewinds the whole pool.
    """

    def __init__(self, capacity):
        self.capacity = capacity
        self._nodes = [HuffmanNode() for _ in range(capacity)]
        self._next_free = 0

    def allocate(self, symbol, freq):
        if self._next_free >= self.capacity:
            raise CapacityExceededError(f"node arena is full ({self.capacity} nodes)")
        node = self._nodes[self._next_free]
        node.symbol = symbol
        node.freq = freq
        node.left = None
        node.right = None
        self._next_free += 1
        return self._next_free - 1

    def reset(self):
        self._next_free = 0

    def __getitem__(self, index):
        if not 0 <= index < self._next_free:
            raise IndexError(f"node {index} is not allocated")
        return self._nodes[index]

    def __len__(self):
        return self._next_free

    def __iter__(self):
        return iter(self._nodes[:self._next_free])


class MinHeap:
    """Array-backed binary min-heap over arena indices.

    Entries are ordered by (freq, index). Leaves are allocated in ascending
    symbol order before any merge, so on equal weight the lower symbol comes
    out first, leaves come out before internal nodes, and internal nodes come
    out in the order they were created.
    """

    def __init__(self, arena, capacity):
        self.arena = arena
        self.capacity = capacity
        self._array = [0] * capacity
        self.size = 0

    def _less(self, i, j):
        a = self._array[i]
        b = self._array[j]
        freq_a = self.arena[a].freq
        freq_b = self.arena[b].freq
        return freq_a < freq_b or (freq_a == freq_b and a < b)

    def _swap(self, i, j):
        self._array[i], self._array[j] = self._array[j], self._array[i]

    def _sift_up(self, i):
        while i > 0:
            parent = (i - 1) // 2
            if not self._less(i, parent):
                break
            self._swap(i, parent)
            i = parent

    def _sift_down(self, i):
        while True:
            smallest = i
            left = 2 * i + 1
            right = left + 1
            if left < self.size and self._less(left, smallest):
                smallest = left
            if right < self.size and self._less(right, smallest):
                smallest = right
            if smallest == i:
                return
            self._swap(i, smallest)
            i = smallest

    def insert(self, index):
        if self.size >= self.capacity:
            raise CapacityExceededError(f"heap is full ({self.capacity} entries)")
        self._array[self.size] = index
        self.size += 1
        self._sift_up(self.size - 1)

    def extract_min(self):
        if self.size == 0:
            raise HeapUnderflowError("extract_min called on an empty heap")
        top = self._array[0]
        self.size -= 1
        self._array[0] = self._array[self.size]
        self._sift_down(0)
        return top

    def build(self, indices):
        indices = list(indices)
        if len(indices) > self.capacity:
            raise CapacityExceededError(
                f"cannot build a heap of {len(indices)} entries with capacity {self.capacity}")
        self._array[:len(indices)] = indices
        self.size = len(indices)
        for i in range(self.size // 2 - 1, -1, -1):
            self._sift_down(i)

    def peek(self):
        if self.size == 0:
            raise HeapUnderflowError("peek called on an empty heap")
        return self._array[0]

    def __len__(self):
        return self.size


def as_symbols(data):
    """Normalize input to a sliceable sequence of int symbols."""
    if isinstance(data, str):
        try:
            return data.encode("latin-1")
        except UnicodeEncodeError as e:
            raise SymbolOutOfRangeError(f"character {data[e.start]!r} does not fit in one byte") from None
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return list(data)


def count_frequencies(data, alphabet_size=ALPHABET_SIZE, chunk_size=CHUNK_SIZE):
    # Frequency analysis in fixed-size chunks of the input
    freqs = Counter()
    for start in range(0, len(data), chunk_size):
        freqs.update(data[start:start + chunk_size])

    for symbol in freqs:
        if not isinstance(symbol, int) or not 0 <= symbol < alphabet_size:
            raise SymbolOutOfRangeError(f"symbol {symbol!r} outside alphabet of size {alphabet_size}")
    return freqs


class HuffmanLogic:
    def __init__(self, config=None):
        self.config = config or HuffmanConfig()

    def build_tree(self, frequencies):
        """Build the Huffman tree for a symbol -> count mapping.

        Returns ``(arena, root)`` where root is an index into the arena, or
        None when no symbol has a nonzero count. With a single distinct
        symbol the root is that symbol's leaf.
        """
        alphabet_size = self.config.alphabet_size
        for symbol, freq in frequencies.items():
            if not isinstance(symbol, int) or not 0 <= symbol < alphabet_size:
                raise SymbolOutOfRangeError(f"symbol {symbol!r} outside alphabet of size {alphabet_size}")
            if freq < 0:
                raise ValueError(f"negative frequency {freq} for symbol {symbol}")

        symbols = sorted(symbol for symbol, freq in frequencies.items() if freq > 0)
        arena = NodeArena(self.config.arena_capacity)
        if not symbols:
            return arena, None

        leaves = [arena.allocate(symbol, frequencies[symbol]) for symbol in symbols]
        priority_queue = MinHeap(arena, len(leaves))
        priority_queue.build(leaves)

        # Iteratively merge the two lightest nodes
        while len(priority_queue) > 1:
            left = priority_queue.extract_min()
            right = priority_queue.extract_min()
            merged = arena.allocate(None, arena[left].freq + arena[right].freq)
            arena[merged].left = left
            arena[merged].right = right
            priority_queue.insert(merged)
            logger.debug("merged nodes %d+%d -> %d (freq %d)", left, right, merged, arena[merged].freq)

        root = priority_queue.extract_min()
        logger.debug("built tree: %d leaves, %d nodes, root freq %d", len(leaves), len(arena), arena[root].freq)
        return arena, root

    def generate_codes(self, arena, root):
        """Walk the tree depth-first without recursion and collect leaf paths.

        Left edges contribute '0' and right edges '1'. A tree made of a single
        leaf gives that symbol the code "0".
        """
        codes = {}
        if root is None:
            return codes
        if arena[root].is_leaf:
            codes[arena[root].symbol] = "0"
            return codes

        max_length = self.config.max_code_length
        stack = []
        path = []
        visited = []
        current = root
        bit = ""
        while stack or current is not None:
            while current is not None:
                if len(stack) > max_length:
                    raise CapacityExceededError(f"code length exceeds {max_length} bits")
                stack.append(current)
                path.append(bit)
                visited.append(False)
                current = arena[current].left
                bit = "0"

            node = stack[-1]
            if arena[node].right is not None and not visited[-1]:
                # Each right subtree is entered once per visit of its parent
                visited[-1] = True
                current = arena[node].right
                bit = "1"
            else:
                if arena[node].is_leaf:
                    codes[arena[node].symbol] = "".join(path)
                stack.pop()
                path.pop()
                visited.pop()
                current = None

        return dict(sorted(codes.items()))

    def build_codes(self, frequencies):
        arena, root = self.build_tree(frequencies)
        return self.generate_codes(arena, root)
