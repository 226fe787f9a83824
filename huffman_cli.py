# filename: huffman_cli.py

import argparse
import logging
import sys
from pathlib import Path

from huffman_config import ALPHABET_SIZE, CHUNK_SIZE, MAX_CODE_LENGTH, HuffmanConfig
from huffman_errors import HuffmanError
from huffman_service import HuffmanService, format_code_table

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="huffman-pack",
        description="Compress a file with a static Huffman code, or expand a compressed file.",
    )
    parser.add_argument("input", help="file to read")
    parser.add_argument("-o", "--output", default=None, help="file to write the result to")
    parser.add_argument("-x", "--expand", action="store_true", help="expand INPUT instead of compressing it")
    parser.add_argument("-d", "--dump", action="store_true", help="print the code table and packed bytes")
    parser.add_argument("-v", "--verbose", action="store_true", help="log tree construction at DEBUG level")
    parser.add_argument("--alphabet-size", type=int, default=ALPHABET_SIZE)
    parser.add_argument("--max-code-length", type=int, default=MAX_CODE_LENGTH)
    parser.add_argument("--chunk-size", type=int, default=CHUNK_SIZE)
    return parser


def print_ratios(input_size, output_size, expand=False):
    print(f"Input bytes:             {input_size}")
    print(f"Output bytes:            {output_size}")
    if expand:
        print(f"Expansion factor:        {output_size / (input_size or 1):.2f}")
    else:
        ratio = 100 - int((output_size * 100) / (input_size or 1))
        print(f"Compression ratio:       {ratio}%")


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        data = Path(args.input).read_bytes()
    except FileNotFoundError:
        print(f"Error: Input file '{args.input}' not found.", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot read input file '{args.input}': {e.strerror}", file=sys.stderr)
        return 1

    try:
        config = HuffmanConfig(args.alphabet_size, args.max_code_length, args.chunk_size)
        service = HuffmanService(config)

        if args.expand:
            out = service.decompress(data)
        else:
            freqs, result = service.analyze(data)
            if args.dump:
                print(format_code_table(result.codes, freqs))
                print(f"Encoded bits:            {result.bit_length}")
                print(f"Packed:                  {result.data.hex(' ')}")
            out = service.to_container(freqs, result)
    except (HuffmanError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            Path(args.output).write_bytes(out)
        except OSError as e:
            print(f"Error: cannot write output file '{args.output}': {e.strerror}", file=sys.stderr)
            return 1
        logger.debug("wrote %d bytes to %s", len(out), args.output)

    print_ratios(len(data), len(out), expand=args.expand)
    return 0


if __name__ == "__main__":
    sys.exit(main())
