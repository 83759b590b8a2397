"""
Encoder and decoder tests: exact codeword streams for small inputs, the
special cases of the decoder, and round trips across every policy.
"""

import io
import random

import pytest

from lzwtool.bitio import BitReader, BitWriter
from lzwtool.decoder import Decoder, expand, expand_stream
from lzwtool.encoder import Encoder, compress, compress_stream
from lzwtool.errors import InvalidCodeError, TruncatedStreamError, UnknownSymbolError
from lzwtool.header import Header, read_header, write_header
from lzwtool.policies import Policy

AB_16 = b'ab' * 8


def codes_of(data, alphabet=b'ab', min_width=3, max_width=4, policy=Policy.FREEZE):
    return list(Encoder(alphabet, min_width, max_width, policy).encode(data))


def stream(header, codes):
    """Hand-build a compressed stream from (code, width) pairs."""
    out = io.BytesIO()
    writer = BitWriter(out)
    write_header(writer, header)
    for code, width in codes:
        writer.write(code, width)
    writer.close()
    return out.getvalue()


def random_data(alphabet, size, seed):
    rng = random.Random(seed)
    return bytes(rng.choice(alphabet) for _ in range(size))


# ============================================================================
# EXACT STREAMS
# ============================================================================

def test_ababab_codes_and_stream():
    assert codes_of(b'ababab', policy=Policy.RESET) == [(0, 3), (1, 3), (2, 3), (2, 3)]
    data = compress(b'ababab', b'ab', 3, 4, Policy.RESET)
    # header: 3, 4, reset, len 2, 'a', 'b', count 4; codes 000 001 010 010 + padding
    assert data == bytes([3, 4, 1, 0, 2, 0x61, 0x62, 0, 0, 0, 4, 0x05, 0x20])
    assert expand(data) == b'ababab'


def test_width_grows_mid_stream():
    # The last code is written after next_code reaches 8, so at 4 bits
    assert codes_of(AB_16) == [(0, 3), (1, 3), (2, 3), (4, 3), (3, 3), (6, 3), (5, 4)]
    data = compress(AB_16, b'ab', 3, 4)
    assert data[7:11] == bytes([0, 0, 0, 7])
    assert data[11:] == bytes([0x05, 0x47, 0x94])
    assert expand(data) == AB_16


def test_code_not_yet_in_decoder_dictionary():
    # 'aaaa' emits code 2 right after creating it
    assert codes_of(b'aaaa') == [(0, 3), (2, 3), (0, 3)]
    assert expand(compress(b'aaaa', b'ab', 3, 4)) == b'aaaa'


def test_empty_input():
    data = compress(b'', b'ab', 3, 4)
    assert data == bytes([3, 4, 0, 0, 2, 0x61, 0x62, 0, 0, 0, 0])
    assert expand(data) == b''


def test_single_byte_input():
    assert codes_of(b'b') == [(1, 3)]
    assert expand(compress(b'b', b'ab', 3, 4)) == b'b'


def test_stats():
    out = io.BytesIO()
    stats = compress_stream(io.BytesIO(AB_16), out, b'ab', 3, 4, Policy.FREEZE)
    assert stats.input_size == 16
    assert stats.output_size == len(out.getvalue()) == 14
    assert stats.code_count == 7
    assert stats.evictions == 0 and stats.resets == 0


# ============================================================================
# ERRORS
# ============================================================================

def test_unknown_symbol_writes_nothing():
    out = io.BytesIO()
    with pytest.raises(UnknownSymbolError) as info:
        compress_stream(io.BytesIO(b'abcab'), out, b'ab', 3, 4)
    assert info.value.value == ord('c')
    assert info.value.position == 2
    assert isinstance(info.value, InvalidCodeError)
    assert out.getvalue() == b''


def test_truncated_stream_keeps_decoded_prefix():
    data = compress(AB_16, b'ab', 3, 4)
    out = io.BytesIO()
    with pytest.raises(TruncatedStreamError):
        expand_stream(io.BytesIO(data[:-1]), out)
    # Five of the seven codes fit in the remaining 16 bits
    assert out.getvalue() == b'ababababa'


def test_code_count_beyond_stream_is_truncated():
    header = Header(3, 4, Policy.FREEZE, b'ab', 5)
    with pytest.raises(TruncatedStreamError):
        expand(stream(header, [(0, 3), (1, 3)]))


@pytest.mark.parametrize('codes', [
    [(7, 3)],                 # first code must be a symbol
    [(0, 3), (5, 3)],         # only code 2 may be unknown here
    [(0, 3), (1, 3), (6, 3)],
])
def test_invalid_code(codes):
    header = Header(3, 4, Policy.FREEZE, b'ab', len(codes))
    with pytest.raises(InvalidCodeError):
        expand(stream(header, codes))


def test_trailing_bytes_ignored():
    data = compress(b'abba', b'ab', 3, 4)
    assert expand(data + b'\xff\xff') == b'abba'


# ============================================================================
# SYNCHRONIZATION
# ============================================================================

@pytest.mark.parametrize('policy', list(Policy))
def test_decoder_dictionary_matches_encoder(policy):
    data = random_data(b'ab', 3000, seed=7)
    encoder = Encoder(b'ab', 2, 5, policy)
    codes = list(encoder.encode(data))

    reader = BitReader(io.BytesIO(compress(data, b'ab', 2, 5, policy)))
    decoder = Decoder(read_header(reader))
    assert b''.join(decoder.decode(reader)) == data

    enc, dec = encoder.dictionary, decoder.dictionary
    assert len(codes) == decoder.header.code_count
    assert [bytes(p) for p in enc.slots] == [bytes(p) for p in dec.slots]
    assert enc.frequency == dec.frequency
    assert enc.last_used == dec.last_used
    assert (enc.next_code, enc.width, enc.timestamp) == (dec.next_code, dec.width, dec.timestamp)
    assert (enc.evictions, enc.resets) == (dec.evictions, dec.resets)


@pytest.mark.parametrize('policy', list(Policy))
def test_observer_events_match(policy):
    def strip(events):
        return [(e.kind, e.code, e.width, e.next_code) for e in events]

    data = random_data(b'abc', 800, seed=3)
    enc_events, dec_events = [], []
    compressed = compress(data, b'abc', 2, 4, policy, observer=enc_events.append)
    assert expand(compressed, observer=dec_events.append) == data
    assert strip(enc_events) == strip(dec_events)
    assert 'widen' in [e.kind for e in enc_events]


def test_policies_actually_trigger():
    data = random_data(b'ab', 2000, seed=11)
    for policy in (Policy.LRU, Policy.LFU):
        stats = compress_stream(io.BytesIO(data), io.BytesIO(), b'ab', 2, 3, policy)
        assert stats.evictions > 0
    stats = compress_stream(io.BytesIO(data), io.BytesIO(), b'ab', 2, 3, Policy.RESET)
    assert stats.resets > 0


# ============================================================================
# ROUND TRIPS
# ============================================================================

TEXT = (b'It was the best of times, it was the worst of times, it was the age of '
        b'wisdom, it was the age of foolishness, it was the epoch of belief.\n') * 20

AB_CASES = [
    random_data(b'ab', 2500, seed=1),
    b'ab' * 700,
    b'a' * 600 + b'b' * 300 + b'ab' * 100,
    b'abbabbbabbbbabbbbbab' * 40,
]


@pytest.mark.parametrize('policy', list(Policy))
@pytest.mark.parametrize('min_width,max_width', [(1, 1), (1, 2), (2, 3), (3, 4), (3, 8), (9, 12)])
def test_round_trip_ab(policy, min_width, max_width):
    for data in AB_CASES:
        compressed = compress(data, b'ab', min_width, max_width, policy)
        assert expand(compressed) == data


@pytest.mark.parametrize('policy', list(Policy))
@pytest.mark.parametrize('min_width,max_width', [(8, 8), (8, 9), (9, 10), (9, 16)])
def test_round_trip_bytes(policy, min_width, max_width):
    alphabet = bytes(range(256))
    for data in [TEXT, random_data(alphabet, 4000, seed=5), bytes(range(256)) * 4]:
        compressed = compress(data, alphabet, min_width, max_width, policy)
        assert expand(compressed) == data


@pytest.mark.parametrize('policy', list(Policy))
def test_round_trip_single_symbol(policy):
    # One dynamic code at most: the pool is evicted or reset over and over
    for min_width, max_width in [(1, 1), (1, 2), (2, 3)]:
        for size in (1, 2, 3, 4, 5, 50):
            data = b'a' * size
            assert expand(compress(data, b'a', min_width, max_width, policy)) == data


def test_repetitive_data_compresses():
    compressed = compress(b'ab' * 5000, b'ab', 3, 12)
    assert len(compressed) < 500


def test_benchmark_runs_every_policy():
    from benchmark_policies import generate_ab_random, run_benchmark

    result = run_benchmark('tiny', generate_ab_random(300), b'ab', (2, [3, 4]))
    assert set(result['results']) == {'freeze', 'reset', 'lru', 'lfu'}
    for by_width in result['results'].values():
        assert all(cell is not None for cell in by_width.values())


def test_width_never_shrinks_between_resets():
    events = []
    data = random_data(b'ab', 3000, seed=9)
    assert expand(compress(data, b'ab', 2, 5, Policy.RESET), observer=events.append) == data

    width = 0
    for event in events:
        assert event.width <= 5
        assert event.next_code <= 1 << 5
        if event.kind != 'reset':
            assert event.width >= width
        width = event.width
    assert 'reset' in [e.kind for e in events]
