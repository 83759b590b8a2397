#!/usr/bin/env python3
"""
Compression ratio benchmark for the four dictionary policies.

Generates a/b and text-like test data in memory, compresses each with
freeze, reset, lru and lfu over a range of max widths, verifies the round
trip and prints markdown tables. Files given on the command line are
benchmarked too, with the extendedascii alphabet.

Usage:
    python benchmark_policies.py [FILE ...]
"""

import os
import random
import sys
import time

from lzwtool import ALPHABETS, Policy, compress, expand

# Test configurations: (min width, max widths to try)
AB_WIDTHS = (2, [3, 4, 5, 6])
BYTE_WIDTHS = (9, [9, 10, 11, 12])

WORDS = ['the', 'of', 'and', 'dictionary', 'code', 'pattern', 'width', 'evict',
         'compress', 'stream', 'alphabet', 'reset', 'freeze', 'least', 'recently', 'used']


def generate_ab_repetitive(num_repetitions=25000):
    """Repetitive 'ab' pattern."""
    return b'ab' * num_repetitions


def generate_ab_random(size_bytes=50000, seed=1):
    """Random 'a' and 'b' characters."""
    rng = random.Random(seed)
    return bytes(rng.choice(b'ab') for _ in range(size_bytes))


def generate_text(num_words=20000, seed=2):
    """Text-like data whose vocabulary drifts, so old dictionary entries go stale."""
    rng = random.Random(seed)
    words = []
    for i in range(num_words):
        vocabulary = WORDS[(i // 2000) % 8:][:8]
        words.append(rng.choice(vocabulary))
        if rng.random() < 0.1:
            words.append(str(rng.randrange(1000)))
    return ' '.join(words).encode('ascii')


def format_size(size_bytes):
    """Format size in human-readable format."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.2f} MB"


def run_benchmark(test_name, data, alphabet, widths):
    """Compress 'data' with every policy and max width; returns the results table."""
    min_width, max_widths = widths
    print(f"\n{'=' * 80}")
    print(f"Test: {test_name} ({format_size(len(data))})")
    print(f"{'=' * 80}")

    results = {}
    for policy in Policy:
        print(f"\n{policy.label}:")
        results[policy.label] = {}

        for max_width in max_widths:
            print(f"  maxW={max_width}...", end=' ', flush=True)
            start_time = time.time()
            packed = compress(data, alphabet, min(min_width, max_width), max_width, policy)
            elapsed = time.time() - start_time

            if expand(packed) != data:
                print("ROUND TRIP FAILED")
                results[policy.label][max_width] = None
                continue

            ratio = len(packed) / len(data) * 100 if data else 0.0
            results[policy.label][max_width] = {'size': len(packed), 'ratio': ratio, 'time': elapsed}
            print(f"{format_size(len(packed))} ({ratio:.2f}%) in {elapsed:.2f}s")

    return {'name': test_name, 'original_size': len(data), 'results': results}


def print_comparison_table(benchmark_results):
    """Print a markdown table comparing policies."""
    results = benchmark_results['results']
    print(f"\n## {benchmark_results['name']} ({format_size(benchmark_results['original_size'])})")
    print()

    max_widths = sorted({w for by_width in results.values() for w in by_width})
    print("| maxW | " + " | ".join(results) + " |")
    print("|------|" + "----------|" * len(results))
    for max_width in max_widths:
        row = f"| {max_width} |"
        for by_width in results.values():
            cell = by_width.get(max_width)
            row += " FAILED |" if cell is None else f" {cell['size'] / 1024:.2f} KB ({cell['ratio']:.2f}%) |"
        print(row)
    print()


def main(argv=None):
    paths = sys.argv[1:] if argv is None else argv

    tests = [
        ('Repetitive (ab)', generate_ab_repetitive(), ALPHABETS['ab'], AB_WIDTHS),
        ('Random (a/b)', generate_ab_random(), ALPHABETS['ab'], AB_WIDTHS),
        ('Drifting text', generate_text(), ALPHABETS['extendedascii'], BYTE_WIDTHS),
    ]
    for path in paths:
        if not os.path.exists(path):
            print(f"Skipping {path}: not found")
            continue
        with open(path, 'rb') as f:
            tests.append((os.path.basename(path), f.read(), ALPHABETS['extendedascii'], BYTE_WIDTHS))

    print("LZW Policy Compression Ratio Benchmark")
    all_results = [run_benchmark(*test) for test in tests]

    print("\n" + "=" * 80)
    print("SUMMARY TABLES (Markdown Format)")
    print("=" * 80)
    for result in all_results:
        print_comparison_table(result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
