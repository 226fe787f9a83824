# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every failure raised by the encoder."""


class CapacityExceededError(HuffmanError):
    """A fixed structural bound was hit: arena slots, heap slots or code length."""


class HeapUnderflowError(HuffmanError):
    """extract_min was called on an empty heap."""


class SymbolOutOfRangeError(HuffmanError, ValueError):
    """A symbol lies outside the alphabet or has no entry in the code table."""


class CorruptStreamError(HuffmanError, ValueError):
    """Packed data or a container could not be decoded."""
