"""Symbol alphabets: built-in presets and the one-symbol-per-line file format."""

import os

from .errors import ConfigError

# Predefined alphabets - add more here as needed
ALPHABETS = {
    'ascii': bytes(range(128)),          # Standard ASCII (0-127)
    'extendedascii': bytes(range(256)),  # Extended ASCII (0-255)
    'ab': b'ab',                         # Binary alphabet for testing
}


def parse_alphabet(lines):
    """
    Build an alphabet from text lines.

    Line terminators are stripped, empty lines skipped and exact duplicate
    lines ignored (first occurrence wins). The symbol is the first UTF-8 byte
    of each line; a line whose first byte is already a symbol is skipped too.

    Returns:
        The symbols in insertion order, as bytes.
    """
    seen_lines = set()
    symbols = bytearray()
    seen_symbols = set()

    for line in lines:
        line = line.rstrip('\r\n')
        if not line or line in seen_lines:
            continue
        seen_lines.add(line)

        symbol = line.encode('utf-8')[0]
        if symbol in seen_symbols:
            continue
        seen_symbols.add(symbol)
        symbols.append(symbol)

    return bytes(symbols)


def load_alphabet(source):
    """
    Load an alphabet from a file path, or by built-in name.

    A path that exists on disk always wins over a built-in name.
    """
    if source is None:
        raise ConfigError("An alphabet is required to compress")

    if not os.path.exists(source):
        if source in ALPHABETS:
            return ALPHABETS[source]
        raise ConfigError(f"Alphabet file not found: {source}")

    try:
        with open(source, 'r', encoding='utf-8', newline='') as f:
            alphabet = parse_alphabet(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read alphabet {source}: {e}") from e

    if not alphabet:
        raise ConfigError(f"Alphabet {source} has no symbols")
    return alphabet
