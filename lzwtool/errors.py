"""Exceptions raised by the LZW tool.

Every error is also a ValueError, so code that only knows to catch
ValueError (as the command-line driver does) keeps working.
"""


class LZWError(ValueError):
    """Base class for all compressor/expander errors."""


class ConfigError(LZWError):
    """Bad parameters, detected before any stream I/O happens."""


class StreamError(LZWError):
    """The compressed stream cannot be decoded."""


class TruncatedStreamError(StreamError):
    """The stream ran out of bits before all codewords were read."""


class InvalidCodeError(StreamError):
    """A code is neither in the dictionary nor the pending slot."""


class UnknownSymbolError(InvalidCodeError):
    """An input byte has no code in the alphabet."""

    def __init__(self, value, position):
        super().__init__(f"Byte value {value} at position {position} not in alphabet")
        self.value = value
        self.position = position


class HeaderError(StreamError):
    """The stream header holds values no encoder could have written."""
