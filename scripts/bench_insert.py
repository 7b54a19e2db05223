#!/bin/bash
# -*- mode: python -*-
# vim: set ft=python:
# Polyglot bash/python script - bash delegates to venv python
"true" '''\'
SCRIPT_DIR="$(cd "$(dirname "${BASH_SOURCE[0]}")" && pwd)"
PROJECT_ROOT="$(dirname "$SCRIPT_DIR")"
exec "$PROJECT_ROOT/local.venv/bin/python" "$0" "$@"
'''

"""
Compare insert and lookup cost of ChainMap against a plain dict.

Inserts random integer keys in [0, 1000) with random single-character
values, then looks keys up through a chain of empty levels.

Usage:
    scripts/bench_insert.py [--number N] [--depth D]
"""

import argparse as _argparse
import random as _random
import string as _string
import timeit as _timeit

import scopechain

KEY_RANGE = 1000


def _random_pair(rng: _random.Random) -> tuple[int, str]:
    return rng.randrange(KEY_RANGE), rng.choice(_string.ascii_letters)


def bench_insert(number: int) -> dict[str, float]:
    """Seconds spent on `number` random inserts, per container."""
    rng = _random.Random(0)
    chain: scopechain.ChainMap[int, str] = scopechain.ChainMap()
    plain: dict[int, str] = {}

    def chain_insert() -> None:
        chain.insert(*_random_pair(rng))

    def dict_insert() -> None:
        key, value = _random_pair(rng)
        plain[key] = value

    return {
        "chainmap": _timeit.timeit(chain_insert, number=number),
        "dict": _timeit.timeit(dict_insert, number=number),
    }


def bench_deep_get(number: int, depth: int) -> float:
    """Seconds spent on `number` lookups resolved `depth` levels up."""
    rng = _random.Random(1)
    root: scopechain.ChainMap[int, str] = scopechain.ChainMap.new_with(
        dict(_random_pair(rng) for _ in range(KEY_RANGE))
    )
    leaf = root
    for _ in range(depth):
        leaf = leaf.extend()
    keys = list(root.level())

    def lookup() -> None:
        leaf.get(rng.choice(keys))

    return _timeit.timeit(lookup, number=number)


def main() -> None:
    parser = _argparse.ArgumentParser(description="ChainMap vs dict micro-benchmark")
    parser.add_argument("--number", type=int, default=100_000)
    parser.add_argument("--depth", type=int, default=16)
    args = parser.parse_args()

    for name, seconds in bench_insert(args.number).items():
        print(f"insert/{name:<9} {seconds * 1e9 / args.number:10.1f} ns/op")
    seconds = bench_deep_get(args.number, args.depth)
    print(f"get/depth={args.depth:<4} {seconds * 1e9 / args.number:10.1f} ns/op")


if __name__ == "__main__":
    main()
