"""
LZW compression

Algorithm:
1. Seed the dictionary with the single-byte alphabet symbols
2. Read input byte by byte (streaming - handles huge files)
3. Extend the current phrase while it stays in the dictionary
4. On a miss, emit the phrase's code, then offer phrase + byte to the
   dictionary (which grows, or applies the full-dictionary policy)
5. Restart the phrase at the byte that missed

The codeword count goes in the header, ahead of the codes, but is only known
at the end, so packed codes are spooled to a temporary file first.
"""

import io
import shutil
import tempfile
from typing import Iterator, NamedTuple, Tuple

from .bitio import BitWriter, file_bytes
from .dictionary import Dictionary
from .errors import UnknownSymbolError
from .header import Header, write_header
from .policies import Policy

DEFAULT_MIN_WIDTH = 9
DEFAULT_MAX_WIDTH = 16
DEFAULT_POLICY = Policy.FREEZE

# Spooled codes stay in memory up to this size, then move to disk
SPOOL_SIZE = 1 << 24


class CompressStats(NamedTuple):
    input_size: int
    output_size: int
    code_count: int
    evictions: int
    resets: int


class Encoder:
    """Turns bytes into (code, width) pairs; one instance per stream."""

    def __init__(self, alphabet, min_width=DEFAULT_MIN_WIDTH, max_width=DEFAULT_MAX_WIDTH,
                 policy=DEFAULT_POLICY, observer=None):
        self.dictionary = Dictionary(alphabet, min_width, max_width, policy, observer)
        self.input_size = 0
        self.code_count = 0

    def encode(self, data) -> Iterator[Tuple[int, int]]:
        """
        Yield (code, width) for each codeword, in stream order.

        Raises UnknownSymbolError for a byte outside the alphabet.
        """
        d = self.dictionary
        current = None   # Longest phrase of pending input known to the dictionary

        for pos, byte in enumerate(data):
            root = d.roots.get(byte)
            if root is None:
                raise UnknownSymbolError(byte, pos)
            self.input_size += 1

            if current is None:
                current = root
                continue

            extended = d.child(current, byte)
            if extended is not None:
                # Phrase exists in dictionary - keep extending
                current = extended
                continue

            yield self._emit(current)

            # 'current' is the pattern of the code just emitted, so the
            # candidate is exactly what the decoder rebuilds from the next
            # code: previous pattern + first byte of the next one.
            d.try_insert(d.extend(current, byte))
            current = root

        if current is not None:
            yield self._emit(current)

    def _emit(self, pattern):
        d = self.dictionary
        d.check_width()
        code = pattern.code
        d.reference(code)
        self.code_count += 1
        return code, d.width


def compress_stream(infile, outfile, alphabet, min_width=DEFAULT_MIN_WIDTH,
                    max_width=DEFAULT_MAX_WIDTH, policy=DEFAULT_POLICY, observer=None):
    """
    Compress a binary file object into another.

    Nothing is written to 'outfile' unless the whole input encodes.

    Returns:
        CompressStats for the run.
    """
    alphabet = bytes(alphabet)
    policy = Policy(policy)
    encoder = Encoder(alphabet, min_width, max_width, policy, observer)

    with tempfile.SpooledTemporaryFile(max_size=SPOOL_SIZE) as spool:
        codes = BitWriter(spool)
        for code, width in encoder.encode(file_bytes(infile)):
            codes.write(code, width)
        codes.flush()

        header = Header(min_width, max_width, policy, alphabet, encoder.code_count)
        writer = BitWriter(outfile)
        write_header(writer, header)
        writer.flush()

        spool.seek(0)
        shutil.copyfileobj(spool, outfile)
        code_bytes = spool.tell()

    d = encoder.dictionary
    return CompressStats(encoder.input_size, header.size + code_bytes,
                         encoder.code_count, d.evictions, d.resets)


def compress(data, alphabet, min_width=DEFAULT_MIN_WIDTH, max_width=DEFAULT_MAX_WIDTH,
             policy=DEFAULT_POLICY, observer=None):
    """Compress a bytes object and return the compressed stream."""
    out = io.BytesIO()
    compress_stream(io.BytesIO(data), out, alphabet, min_width, max_width, policy, observer)
    return out.getvalue()
