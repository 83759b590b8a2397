"""Adaptive LZW compression with freeze, reset, LRU and LFU dictionary policies."""

from .alphabet import ALPHABETS, load_alphabet, parse_alphabet
from .bitio import BitReader, BitWriter
from .decoder import Decoder, expand, expand_stream
from .dictionary import Dictionary, Event, Outcome, Pattern
from .encoder import CompressStats, Encoder, compress, compress_stream
from .errors import (ConfigError, HeaderError, InvalidCodeError, LZWError, StreamError,
                     TruncatedStreamError, UnknownSymbolError)
from .header import Header, read_header, write_header
from .policies import Policy

__version__ = '1.0.0'
