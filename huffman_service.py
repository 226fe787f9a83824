# filename: huffman_service.py

import logging
import struct
from collections import Counter
from typing import Dict, NamedTuple

from huffman_config import ALPHABET_SIZE, MAGIC, HuffmanConfig
from huffman_core import HuffmanLogic, as_symbols, count_frequencies
from huffman_errors import CorruptStreamError, SymbolOutOfRangeError

logger = logging.getLogger(__name__)

# magic, alphabet size, payload bit length, number of table entries
_HEADER = struct.Struct(">4sHQH")
# symbol, frequency
_ENTRY = struct.Struct(">HQ")


class EncodeResult(NamedTuple):
    codes: Dict[int, str]
    data: bytes
    bit_length: int


class HuffmanService:
    def __init__(self, config=None):
        self.config = config or HuffmanConfig()
        self.logic = HuffmanLogic(self.config)

    def frequencies(self, data):
        symbols = as_symbols(data)
        return count_frequencies(symbols, self.config.alphabet_size, self.config.chunk_size)

    def analyze(self, data):
        """Count, build codes and pack in one pass; returns ``(frequencies, EncodeResult)``."""
        symbols = as_symbols(data)
        if not symbols:
            return Counter(), EncodeResult({}, b"", 0)
        freqs = count_frequencies(symbols, self.config.alphabet_size, self.config.chunk_size)
        codes = self.logic.build_codes(freqs)
        packed, bit_length = self.pack(symbols, codes)
        logger.debug("encoded %d symbols (%d distinct) into %d bits", len(symbols), len(codes), bit_length)
        return freqs, EncodeResult(codes, packed, bit_length)

    def encode(self, data):
        _, result = self.analyze(data)
        return result

    def pack(self, symbols, codes):
        """Concatenate codes in input order and pack them big-endian into bytes.

        The last byte is padded with zero bits. Returns ``(packed, bit_length)``
        where bit_length counts the bits before padding.
        """
        symbols = as_symbols(symbols)
        try:
            encoded_str = "".join([codes[symbol] for symbol in symbols])
        except KeyError as e:
            raise SymbolOutOfRangeError(f"symbol {e.args[0]!r} has no code") from None
        bit_length = len(encoded_str)

        # Padding needed for byte alignment; none when already aligned
        padding = -bit_length % 8
        encoded_str += "0" * padding

        b = bytearray()
        for i in range(0, len(encoded_str), 8):
            byte = encoded_str[i:i + 8]
            b.append(int(byte, 2))
        return bytes(b), bit_length

    def unpack(self, data, codes, bit_length):
        """Decode exactly bit_length bits of packed data with a code table."""
        if bit_length < 0:
            raise CorruptStreamError(f"negative bit length {bit_length}")
        if len(data) != (bit_length + 7) // 8:
            raise CorruptStreamError(f"{len(data)} bytes cannot hold exactly {bit_length} bits")

        decode_table = {code: symbol for symbol, code in codes.items()}
        longest = max(map(len, decode_table), default=0)
        bits = "".join(format(byte, "08b") for byte in data)[:bit_length]

        out = bytearray()
        current = ""
        for bit in bits:
            current += bit
            symbol = decode_table.get(current)
            if symbol is not None:
                out.append(symbol)
                current = ""
            elif len(current) >= longest:
                raise CorruptStreamError(f"bit sequence {current!r} matches no code")
        if current:
            raise CorruptStreamError("stream ends in the middle of a code")
        return bytes(out)

    def compress(self, data):
        return self.to_container(*self.analyze(data))

    def to_container(self, frequencies, result):
        if not frequencies:
            return b""
        header = _HEADER.pack(MAGIC, self.config.alphabet_size, result.bit_length, len(frequencies))
        table = b"".join(_ENTRY.pack(symbol, frequencies[symbol]) for symbol in sorted(frequencies))
        return header + table + result.data

    def decompress(self, blob):
        if not blob:
            return b""
        if len(blob) < _HEADER.size:
            raise CorruptStreamError("truncated header")

        magic, alphabet_size, bit_length, count = _HEADER.unpack_from(blob, 0)
        if magic != MAGIC:
            raise CorruptStreamError(f"bad magic {magic!r}")
        # n leaves cannot sit deeper than n - 1, whatever bound the writer used
        max_code_length = max(self.config.max_code_length, count - 1)
        try:
            config = HuffmanConfig(alphabet_size, max_code_length, self.config.chunk_size)
        except ValueError as e:
            raise CorruptStreamError(f"bad header: {e}") from None

        offset = _HEADER.size
        end = offset + count * _ENTRY.size
        if len(blob) < end:
            raise CorruptStreamError("truncated frequency table")
        freqs = {}
        for symbol, freq in _ENTRY.iter_unpack(blob[offset:end]):
            if symbol >= alphabet_size or freq == 0 or symbol in freqs:
                raise CorruptStreamError(f"invalid table entry ({symbol}, {freq})")
            freqs[symbol] = freq

        # Same table and tie-break rule rebuild the encoder's tree
        codes = HuffmanLogic(config).build_codes(freqs)
        expected = sum(freq * len(codes[symbol]) for symbol, freq in freqs.items())
        if expected != bit_length:
            raise CorruptStreamError(f"header claims {bit_length} bits, table implies {expected}")

        out = self.unpack(blob[end:], codes, bit_length)
        if len(out) != sum(freqs.values()):
            raise CorruptStreamError("decoded length does not match the frequency table")
        return out


def encode(symbols, alphabet_size=ALPHABET_SIZE):
    return HuffmanService(HuffmanConfig(alphabet_size=alphabet_size)).encode(symbols)


def _symbol_label(symbol):
    if 0x20 <= symbol < 0x7F:
        return f"'{chr(symbol)}'"
    return str(symbol)


def format_code_table(codes, frequencies):
    """Render one row per symbol with its code and frequency."""
    width = max([len("code")] + [len(code) for code in codes.values()])
    lines = [f"{'symbol':<8} {'code':<{width}} {'frequency':>10}", "-" * (width + 20)]
    for symbol, code in codes.items():
        lines.append(f"{_symbol_label(symbol):<8} {code:<{width}} {frequencies[symbol]:>10}")
    return "\n".join(lines)
