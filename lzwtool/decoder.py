"""
LZW decompression

Algorithm:
1. Read the header to get compression parameters and alphabet
2. Seed the dictionary exactly as the encoder did
3. Read codeCount codes, widening exactly when the encoder widened
4. Decode each code, and complete the dictionary entry the encoder made
   after the previous code (previous pattern + first byte of this one)
5. Write decompressed output incrementally (streaming for memory efficiency)
"""

import io
from typing import Iterator

from .bitio import BitReader
from .dictionary import Dictionary
from .errors import InvalidCodeError
from .header import Header, read_header

# Decoded output is written in blocks of about this size
WRITE_BLOCK = 1 << 16


class Decoder:
    """Turns codewords back into bytes; one instance per stream."""

    def __init__(self, header: Header, observer=None):
        self.header = header
        self.dictionary = Dictionary(header.alphabet, header.min_width, header.max_width,
                                     header.policy, observer)

    def decode(self, reader: BitReader) -> Iterator[bytes]:
        """
        Yield the pattern of each codeword in turn.

        Raises TruncatedStreamError when the stream ends early (everything
        yielded so far is valid output) and InvalidCodeError on a code no
        encoder could have produced.
        """
        d = self.dictionary
        count = self.header.code_count
        if count == 0:
            return

        # First code is always an alphabet symbol, nothing can be pending yet
        d.check_width()
        code = reader.read(d.width)
        prev = d.lookup_by_code(code)
        if prev is None:
            raise InvalidCodeError(f"Invalid codeword: {code}")
        d.reference(code)
        yield bytes(prev)

        for _ in range(count - 1):
            # The encoder offered a new pattern right after the previous code;
            # claim the same slot now, its last byte comes from this code
            d.try_insert(None)

            d.check_width()
            code = reader.read(d.width)

            entry = d.lookup_by_code(code)
            if entry is None:
                if code != d.pending:
                    raise InvalidCodeError(f"Invalid codeword: {code}")
                # SPECIAL LZW EDGE CASE:
                # The encoder emitted the code it had just created, before the
                # decoder could fill it in. Its pattern must be prev + prev[0].
                entry = d.extend(prev, prev.first)

            if d.pending is not None:
                d.bind(d.pending, d.extend(prev, entry.first))

            d.reference(code)
            yield bytes(entry)
            prev = entry


def expand_stream(infile, outfile, observer=None):
    """
    Decompress a binary file object into another.

    Output is written as it is decoded; on a stream error the bytes decoded
    before the bad point have already been written.

    Returns:
        (header, number of bytes written)
    """
    reader = BitReader(infile)
    header = read_header(reader)
    decoder = Decoder(header, observer)

    written = 0
    block = bytearray()
    try:
        for chunk in decoder.decode(reader):
            block += chunk
            if len(block) >= WRITE_BLOCK:
                outfile.write(block)
                written += len(block)
                block.clear()
    finally:
        if block:
            outfile.write(block)
            written += len(block)
    return header, written


def expand(data, observer=None):
    """Decompress a bytes object and return the original bytes."""
    out = io.BytesIO()
    expand_stream(io.BytesIO(data), out, observer)
    return out.getvalue()
