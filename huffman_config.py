# filename: huffman_config.py

from dataclasses import dataclass

ALPHABET_SIZE = 256
MAX_CODE_LENGTH = 100
CHUNK_SIZE = 4096
MAGIC = b"HUF1"


@dataclass(frozen=True)
class HuffmanConfig:
    alphabet_size: int = ALPHABET_SIZE
    max_code_length: int = MAX_CODE_LENGTH
    chunk_size: int = CHUNK_SIZE

    def __post_init__(self):
        # Symbols are single bytes
        if not 1 <= self.alphabet_size <= 256:
            raise ValueError(f"alphabet_size must be in [1, 256], got {self.alphabet_size}")
        if self.max_code_length < 1:
            raise ValueError(f"max_code_length must be positive, got {self.max_code_length}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    @property
    def arena_capacity(self):
        # n leaves plus n - 1 internal nodes
        return 2 * self.alphabet_size - 1
