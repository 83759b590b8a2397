"""
Bit-level I/O

LZW uses variable-width codes (3 bits, 9 bits, 12 bits...) but streams are
stored as bytes. BitWriter and BitReader handle the bit-to-byte conversion,
MSB-first, as one continuous bitstream with no per-field alignment.
"""

from .errors import TruncatedStreamError

MAX_FIELD_BITS = 32


def _check_width(num_bits):
    if not 1 <= num_bits <= MAX_FIELD_BITS:
        raise ValueError(f"Field width must be 1..{MAX_FIELD_BITS} bits, got {num_bits}")


class BitWriter:
    """
    Writes fixed-width unsigned integers as a stream of bits to a binary file.

    How it works:
    1. Accumulates bits in an integer buffer
    2. When buffer has >=8 bits, extract and write one byte to file
    3. Clear written bits so the buffer never holds more than 7 bits

    Buffer structure: [HIGH bits: ready to write] [LOW bits: remaining, waiting for more]
    """

    def __init__(self, file):
        self.file = file
        self.buffer = 0   # Integer accumulating bits
        self.n_bits = 0   # Count of bits in buffer not yet written

    def write(self, value, num_bits):
        """
        Write 'num_bits' bits from 'value' to output.

        Example: write(5, 3) writes 0b101
        """
        _check_width(num_bits)
        if value < 0 or value >> num_bits:
            raise ValueError(f"Value {value} does not fit in {num_bits} bits")

        # New bits go on the RIGHT (low bits), old bits shift LEFT (high bits)
        self.buffer = (self.buffer << num_bits) | value
        self.n_bits += num_bits

        out = bytearray()
        while self.n_bits >= 8:
            self.n_bits -= 8
            out.append(self.buffer >> self.n_bits)
            self.buffer &= (1 << self.n_bits) - 1
        if out:
            self.file.write(out)

    def write_bytes(self, data):
        """Write raw bytes; byte-aligned streams take the fast path."""
        if self.n_bits == 0:
            self.file.write(data)
            return
        for byte in data:
            self.write(byte, 8)

    def flush(self):
        """Pad any remaining bits with zeros to a whole byte and write it."""
        if self.n_bits > 0:
            # Remaining bits sit in LOW positions, shift LEFT to fill a byte
            self.file.write(bytes([self.buffer << (8 - self.n_bits)]))
            self.buffer = 0
            self.n_bits = 0

    def close(self):
        """Flush padding. The underlying file stays open; its owner closes it."""
        self.flush()


class BitReader:
    """
    Reads fixed-width unsigned integers from a stream of bits in a binary file.

    Mirrors BitWriter: accumulates bytes into buffer, extracts requested bits
    from the HIGH end.
    """

    def __init__(self, file, block_size=1 << 16):
        self.file = file
        self.block_size = block_size
        self.buffer = 0   # Integer holding bits not yet extracted
        self.n_bits = 0   # Count of bits in buffer
        self.chunk = b''  # Bytes read from file, not yet moved into buffer
        self.pos = 0
        self.eof = False

    def _fill(self, num_bits):
        """Move bytes into the buffer until num_bits are held. False at EOF."""
        while self.n_bits < num_bits:
            if self.pos >= len(self.chunk):
                if self.eof:
                    return False
                self.chunk = self.file.read(self.block_size)
                self.pos = 0
                if not self.chunk:
                    self.eof = True
                    return False
            self.buffer = (self.buffer << 8) | self.chunk[self.pos]
            self.pos += 1
            self.n_bits += 8
        return True

    def read(self, num_bits):
        """
        Read 'num_bits' bits from input.

        Raises TruncatedStreamError if fewer bits remain.
        """
        _check_width(num_bits)
        if not self._fill(num_bits):
            raise TruncatedStreamError(
                f"Unexpected end of stream: wanted {num_bits} bits, {self.n_bits} left")

        self.n_bits -= num_bits
        value = self.buffer >> self.n_bits
        self.buffer &= (1 << self.n_bits) - 1
        return value

    def read_bytes(self, count):
        return bytes(self.read(8) for _ in range(count))

    def has_more(self, num_bits=1):
        """True if at least num_bits remain, padding bits of the last byte included."""
        return self._fill(num_bits)

    def is_empty(self):
        return not self.has_more(1)


def file_bytes(file, block_size=1 << 20):
    """
    Generator for reading the bytes of a binary file object in a for loop.

    Params:
        file       - file object to read from
        block_size - the maximum number of bytes to read at a time
    """
    buffer = bytearray(block_size)

    while True:
        read_size = file.readinto(buffer)
        if not read_size:
            break

        with memoryview(buffer)[:read_size] as view:
            yield from view
