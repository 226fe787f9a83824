import os
import sys
import logging
import random
from fractions import Fraction
import pytest

# Add the repository root to path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import huffman_core as hc
from huffman_config import HuffmanConfig
from huffman_errors import CapacityExceededError, HeapUnderflowError, SymbolOutOfRangeError

CLASSIC = {ord('a'): 5, ord('b'): 9, ord('c'): 12, ord('d'): 13, ord('e'): 16, ord('f'): 45}


def _heap_of(freqs):
	arena = hc.NodeArena(len(freqs))
	indices = [arena.allocate(i, f) for i, f in enumerate(freqs)]
	heap = hc.MinHeap(arena, len(indices))
	return arena, heap, indices


def _drain(heap):
	out = []
	while heap:
		out.append(heap.extract_min())
	return out


def test_arena_allocates_in_order():
	arena = hc.NodeArena(3)
	assert arena.allocate(1, 10) == 0
	assert arena.allocate(2, 20) == 1
	assert len(arena) == 2
	assert arena[1].symbol == 2
	assert arena[1].freq == 20
	assert arena[1].is_leaf


def test_arena_capacity_exceeded():
	arena = hc.NodeArena(2)
	arena.allocate(0, 1)
	arena.allocate(1, 1)
	with pytest.raises(CapacityExceededError):
		arena.allocate(2, 1)


def test_arena_reset_reuses_slots():
	arena = hc.NodeArena(1)
	first = arena.allocate(5, 3)
	arena[first].left = 0
	arena.reset()
	assert len(arena) == 0
	with pytest.raises(IndexError):
		arena[0]
	again = arena.allocate(6, 4)
	assert again == first
	assert arena[again].symbol == 6
	assert arena[again].left is None


def test_heap_build_extracts_in_weight_order():
	_, heap, indices = _heap_of([7, 3, 9, 3, 1])
	heap.build(indices)
	# equal weights come out by index
	assert _drain(heap) == [4, 1, 3, 0, 2]


def test_heap_insert_matches_build():
	rng = random.Random(5)
	freqs = [rng.randint(1, 20) for _ in range(40)]
	_, built, indices = _heap_of(freqs)
	built.build(indices)

	_, inserted, indices = _heap_of(freqs)
	for i in reversed(indices):
		inserted.insert(i)

	assert _drain(built) == _drain(inserted)


def test_heap_peek_and_len():
	_, heap, indices = _heap_of([4, 2, 8])
	heap.build(indices)
	assert len(heap) == 3
	assert heap.peek() == 1
	assert len(heap) == 3


def test_heap_underflow():
	_, heap, indices = _heap_of([1])
	heap.build(indices)
	heap.extract_min()
	with pytest.raises(HeapUnderflowError):
		heap.extract_min()
	with pytest.raises(HeapUnderflowError):
		heap.peek()


def test_heap_capacity():
	_, heap, indices = _heap_of([1, 2])
	heap.build(indices)
	with pytest.raises(CapacityExceededError):
		heap.insert(0)
	with pytest.raises(CapacityExceededError):
		heap.build(indices + [0])


def test_count_frequencies_in_chunks():
	data = b'abracadabra' * 3
	freqs = hc.count_frequencies(data, chunk_size=4)
	assert freqs == {ord('a'): 15, ord('b'): 6, ord('r'): 6, ord('c'): 3, ord('d'): 3}
	assert hc.count_frequencies(data, chunk_size=4) == hc.count_frequencies(data, chunk_size=4096)


def test_count_frequencies_rejects_out_of_range():
	with pytest.raises(SymbolOutOfRangeError):
		hc.count_frequencies(b'\x80', alphabet_size=128)
	with pytest.raises(SymbolOutOfRangeError):
		hc.count_frequencies([-1])


def test_as_symbols():
	assert hc.as_symbols("ab") == b"ab"
	assert hc.as_symbols(bytearray(b"xy")) == b"xy"
	assert hc.as_symbols(iter([1, 2])) == [1, 2]
	with pytest.raises(SymbolOutOfRangeError):
		hc.as_symbols("€")


def test_classic_weights_merge_order():
	logic = hc.HuffmanLogic()
	arena, root = logic.build_tree(CLASSIC)

	internal = [node.freq for node in arena if not node.is_leaf]
	assert internal == [14, 25, 30, 55, 100]
	assert arena[root].freq == 100
	assert len(arena) == 2 * len(CLASSIC) - 1

	# every internal node has two children
	for node in arena:
		assert (node.left is None) == (node.right is None)
		if not node.is_leaf:
			assert node.symbol is None
			assert node.freq == arena[node.left].freq + arena[node.right].freq


def test_classic_weights_codes():
	codes = hc.HuffmanLogic().build_codes(CLASSIC)
	assert codes == {
		ord('a'): "1100",
		ord('b'): "1101",
		ord('c'): "100",
		ord('d'): "101",
		ord('e'): "111",
		ord('f'): "0",
	}
	assert sum(CLASSIC[s] * len(c) for s, c in codes.items()) == 224
	assert sum(Fraction(1, 2 ** len(c)) for c in codes.values()) == 1


def test_kraft_equality_for_random_tables():
	rng = random.Random(1)
	for _ in range(20):
		freqs = {s: rng.randint(1, 1000) for s in rng.sample(range(256), rng.randint(2, 256))}
		codes = hc.HuffmanLogic().build_codes(freqs)
		assert set(codes) == set(freqs)
		assert sum(Fraction(1, 2 ** len(c)) for c in codes.values()) == 1


def test_tie_break_independent_of_insertion_order():
	forward = {s: 3 for s in range(8)}
	backward = {s: 3 for s in reversed(range(8))}
	logic = hc.HuffmanLogic()
	assert logic.build_codes(forward) == logic.build_codes(backward)
	assert list(logic.build_codes(backward)) == list(range(8))


def test_lower_symbol_wins_ties():
	arena, root = hc.HuffmanLogic().build_tree({9: 1, 4: 1})
	assert arena[arena[root].left].symbol == 4
	assert arena[arena[root].right].symbol == 9


def test_empty_table():
	logic = hc.HuffmanLogic()
	arena, root = logic.build_tree({})
	assert root is None
	assert len(arena) == 0
	assert logic.generate_codes(arena, root) == {}
	assert logic.build_codes({5: 0}) == {}


def test_single_symbol_gets_one_bit_code():
	logic = hc.HuffmanLogic()
	arena, root = logic.build_tree({ord('a'): 4})
	assert arena[root].is_leaf
	assert len(arena) == 1
	assert logic.generate_codes(arena, root) == {ord('a'): "0"}


def test_build_tree_validates_table():
	logic = hc.HuffmanLogic(HuffmanConfig(alphabet_size=16))
	with pytest.raises(SymbolOutOfRangeError):
		logic.build_tree({16: 1})
	with pytest.raises(ValueError):
		logic.build_tree({1: -1})


def test_code_length_bound():
	# Fibonacci weights give the deepest tree: five leaves, depth four
	fib = {0: 1, 1: 1, 2: 2, 3: 3, 4: 5}
	with pytest.raises(CapacityExceededError):
		hc.HuffmanLogic(HuffmanConfig(max_code_length=3)).build_codes(fib)

	codes = hc.HuffmanLogic(HuffmanConfig(max_code_length=4)).build_codes(fib)
	assert max(len(c) for c in codes.values()) == 4


def test_deep_tree_does_not_recurse():
	# 90 Fibonacci weights build a chain 89 levels deep
	a, b = 1, 1
	freqs = {}
	for s in range(90):
		freqs[s] = a
		a, b = b, a + b
	codes = hc.HuffmanLogic().build_codes(freqs)
	assert max(len(c) for c in codes.values()) == 89


def test_merges_are_logged(caplog):
	caplog.set_level(logging.DEBUG, logger="huffman_core")
	hc.HuffmanLogic().build_tree(CLASSIC)
	assert caplog.text.count("merged nodes") == len(CLASSIC) - 1
