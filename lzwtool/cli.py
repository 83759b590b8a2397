"""
Command-line interface

Usage:
    Compress:   lzwtool --mode compress --minW 3 --maxW 4 --policy lru --alphabet ab.txt < in.txt > out.lzw
    Expand:     lzwtool --mode expand < out.lzw > in.txt

Exit status is 1 for bad options or a failed run and 2 for an unknown flag.
"""

import argparse
import contextlib
import os
import sys
import time

from .alphabet import load_alphabet
from .decoder import expand_stream
from .dictionary import validate_params
from .encoder import DEFAULT_MAX_WIDTH, DEFAULT_MIN_WIDTH, DEFAULT_POLICY, compress_stream
from .errors import ConfigError, LZWError
from .policies import POLICY_NAMES, Policy

MODES = ('compress', 'expand')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='lzwtool',
        description='LZW compression with freeze, reset, lru or lfu dictionary policies')
    # Values are validated by hand so that bad values exit 1, not argparse's 2
    parser.add_argument('--mode', metavar='{compress,expand}')
    parser.add_argument('--minW', dest='min_width', default=str(DEFAULT_MIN_WIDTH), metavar='BITS')
    parser.add_argument('--maxW', dest='max_width', default=str(DEFAULT_MAX_WIDTH), metavar='BITS')
    parser.add_argument('--policy', default=DEFAULT_POLICY.label, metavar='{' + ','.join(POLICY_NAMES) + '}')
    parser.add_argument('--alphabet', metavar='PATH', help='alphabet file, one symbol per line (or ascii, extendedascii, ab)')
    parser.add_argument('-i', '--input', metavar='INFILE', help='read from INFILE instead of stdin')
    parser.add_argument('-o', '--output', metavar='OUTFILE', help='write to OUTFILE instead of stdout')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='increase stderr verbosity')
    return parser


def _int_option(name, value):
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def validate(args):
    """Check options before any stream I/O. Raises ConfigError."""
    if args.mode is None:
        raise ConfigError("--mode is required")
    if args.mode not in MODES:
        raise ConfigError(f"unknown mode {args.mode}")

    args.min_width = _int_option('--minW', args.min_width)
    args.max_width = _int_option('--maxW', args.max_width)
    if args.min_width > args.max_width:
        raise ConfigError("minW must be <= maxW")

    try:
        args.policy = Policy.from_name(args.policy)
    except ValueError as e:
        raise ConfigError(str(e)) from None

    if args.mode == 'compress':
        if args.alphabet is None:
            raise ConfigError("--alphabet required for compress")
        args.alphabet = load_alphabet(args.alphabet)
        validate_params(args.min_width, args.max_width, args.alphabet)
    return args


def size_fmt(size, scale=1024):
    """Format a byte count in a human readable way."""
    for unit in ['', 'K', 'M', 'G', 'T']:
        if abs(size) < scale:
            return '%3.1f %sB' % (size, unit)
        size /= scale
    return '%.1f PB' % size


def print_event(event):
    pattern = '' if event.pattern is None else f' pattern={event.pattern!r}'
    code = '' if event.code is None else f' code={event.code}'
    print(f"{event.kind}:{code} W={event.width} nextCode={event.next_code}{pattern}", file=sys.stderr)


def _open(path, mode, default):
    if path:
        return open(path, mode)
    return contextlib.nullcontext(default)


def run(args):
    """Compress or expand according to validated args."""
    observer = print_event if args.verbose > 1 else None
    source = args.input or '<stdin>'
    target = args.output or '<stdout>'
    started = time.time()

    try:
        with _open(args.input, 'rb', sys.stdin.buffer) as infile, \
                _open(args.output, 'wb', sys.stdout.buffer) as outfile:
            if args.mode == 'compress':
                stats = compress_stream(infile, outfile, args.alphabet, args.min_width,
                                        args.max_width, args.policy, observer)
                original, packed = stats.input_size, stats.output_size
                summary = (f"Compressed: {source} -> {target} [{args.policy.label} "
                           f"W={args.min_width}..{args.max_width}, {stats.code_count} codes, "
                           f"{stats.evictions} evictions, {stats.resets} resets]")
            else:
                header, original = expand_stream(infile, outfile, observer)
                packed = infile.tell() if infile.seekable() else None
                summary = (f"Decompressed: {source} -> {target} [{header.policy.label} "
                           f"W={header.min_width}..{header.max_width}, {header.code_count} codes]")
            outfile.flush()
    except LZWError:
        # A failed compress leaves no partial output file behind
        if args.mode == 'compress' and args.output:
            os.remove(args.output)
        raise

    if args.verbose > 0:
        print(summary, file=sys.stderr)
        if original and packed:
            print(f"  {size_fmt(original)} <-> {size_fmt(packed)} ({packed / original * 100:.1f}%) "
                  f"in {time.time() - started:.2f} s", file=sys.stderr)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        validate(args)
        run(args)
    except (LZWError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
