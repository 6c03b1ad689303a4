"""Bit positions from a single 128-bit hash (Kirsch-Mitzenmacher).

One MurmurHash3 x64 128-bit digest is split into ``lo`` (low 64 bits) and
``hi`` (high 64 bits). Probe ``i`` lands on ``((lo + i * hi) mod 2**64) mod m``.
Wrapping at 64 bits is part of the scheme and must not be widened.

This is not the triangular ``lo, lo+hi, lo+3hi, ...`` layout of the older
Rust filter, so bitmaps written by that filter cannot be loaded with
``BloomFilter.from_raw``.
"""

from typing import Iterator, List, Union

import mmh3

MASK64 = (1 << 64) - 1

Item = Union[bytes, bytearray, memoryview, str]


def to_bytes(item: Item) -> bytes:
    if isinstance(item, bytes):
        return item
    if isinstance(item, (bytearray, memoryview)):
        return bytes(item)
    if isinstance(item, str):
        return item.encode("utf-8")
    raise TypeError(f"items must be bytes or str, not {type(item).__name__}")


class Murmur3Hasher:
    def __init__(self, seed: int = 0) -> None:
        self.seed = seed

    def hash128(self, data: bytes) -> int:
        return mmh3.hash128(data, self.seed, True, signed=False)


def iter_probes(hash128: int, k: int, m: int) -> Iterator[int]:
    if k < 1 or m < 1:
        raise ValueError(f"need k >= 1 and m >= 1, got k={k}, m={m}")
    lo = hash128 & MASK64
    hi = (hash128 >> 64) & MASK64
    for _ in range(k):
        yield lo % m
        lo = (lo + hi) & MASK64


def probe_positions(hash128: int, k: int, m: int) -> List[int]:
    """Return the ``k`` bit positions in ``[0, m)`` for a 128-bit hash value."""
    return list(iter_probes(hash128, k, m))
