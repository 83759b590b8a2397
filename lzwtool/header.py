"""
Stream header

    minW        :  8 bits
    maxW        :  8 bits
    policy      :  8 bits  (0=freeze 1=reset 2=lru 3=lfu)
    alphabetLen : 16 bits
    alphabet[i] :  8 bits each
    codeCount   : 32 bits

followed by codeCount codewords. The header is always a whole number of
bytes, so the codewords start byte-aligned.
"""

from typing import NamedTuple

from .dictionary import validate_params
from .errors import ConfigError, HeaderError
from .policies import Policy

MAX_CODE_COUNT = (1 << 32) - 1


class Header(NamedTuple):
    min_width: int
    max_width: int
    policy: Policy
    alphabet: bytes
    code_count: int

    @property
    def size(self):
        """Header length in bytes."""
        return 9 + len(self.alphabet)


def write_header(writer, header):
    validate_params(header.min_width, header.max_width, header.alphabet, ConfigError)
    if not 0 <= header.code_count <= MAX_CODE_COUNT:
        raise ConfigError(f"Too many codewords for one stream: {header.code_count}")

    writer.write(header.min_width, 8)
    writer.write(header.max_width, 8)
    writer.write(int(header.policy), 8)
    writer.write(len(header.alphabet), 16)
    writer.write_bytes(header.alphabet)
    writer.write(header.code_count, 32)


def read_header(reader):
    """Read and validate a header. Raises HeaderError or TruncatedStreamError."""
    min_width = reader.read(8)
    max_width = reader.read(8)
    policy_code = reader.read(8)
    try:
        policy = Policy(policy_code)
    except ValueError:
        raise HeaderError(f"Unknown policy code {policy_code}") from None
    alphabet = reader.read_bytes(reader.read(16))
    code_count = reader.read(32)

    validate_params(min_width, max_width, alphabet, HeaderError)
    return Header(min_width, max_width, policy, alphabet, code_count)
