"""Probabilistic membership testing with Bloom filters."""

import logging
from typing import Iterable, List, Optional

import numpy as np

from .bit_array import BitArray
from .config import MAX_EXPECTED_ITEMS, TARGET_FPR, FilterConfig
from .hashing import Item, Murmur3Hasher, iter_probes, to_bytes
from .metrics import Metrics
from .types import FilterStats, Hasher, InvalidParameter


logger = logging.getLogger(__name__)


class BloomFilter:
    def __init__(
        self,
        item_count: int = MAX_EXPECTED_ITEMS,
        false_positive_rate=TARGET_FPR,
        *,
        one_in_n: Optional[bool] = None,
        hasher: Optional[Hasher] = None,
        metrics: Optional[Metrics] = None,
        dup_check: bool = True,
    ) -> None:
        config = FilterConfig.for_capacity(item_count, false_positive_rate, one_in_n=one_in_n)
        self._setup(config, BitArray(config.bit_count), hasher, metrics, dup_check)

    @classmethod
    def from_config(
        cls,
        config: FilterConfig,
        *,
        hasher: Optional[Hasher] = None,
        metrics: Optional[Metrics] = None,
        dup_check: bool = True,
    ) -> "BloomFilter":
        bf = cls.__new__(cls)
        bf._setup(config, BitArray(config.bit_count), hasher, metrics, dup_check)
        return bf

    @classmethod
    def from_raw(
        cls,
        bits,
        hash_count: int,
        *,
        bit_count: Optional[int] = None,
        hasher: Optional[Hasher] = None,
        metrics: Optional[Metrics] = None,
        dup_check: bool = True,
    ) -> "BloomFilter":
        """Rebuild a filter around an existing bitmap.

        ``bits`` is either packed bytes (least significant bit first, as the
        filter stores them) or an iterable of booleans. The parameter
        calculator is skipped, so the caller must supply the ``hash_count``
        originally derived for these bits. The input is copied.
        """
        if hash_count < 1:
            raise InvalidParameter(f"hash count must be at least 1, got {hash_count}")
        packed = isinstance(bits, (bytes, bytearray, memoryview)) or (
            isinstance(bits, np.ndarray) and bits.dtype != np.bool_
        )
        if packed:
            if bit_count is not None and bit_count < 1:
                raise InvalidParameter(f"bit count must be positive, got {bit_count}")
            array = BitArray.from_bytes(bits, bit_count)
        else:
            array = BitArray.from_bools(bits)
            if bit_count is not None and bit_count != array.size:
                raise InvalidParameter(f"bit count {bit_count} does not match {array.size} flags")
        config = FilterConfig(
            item_count=None,
            false_positive_rate=None,
            bit_count=array.size,
            hash_count=int(hash_count),
        )
        bf = cls.__new__(cls)
        bf._setup(config, array, hasher, metrics, dup_check)
        return bf

    def _setup(
        self,
        config: FilterConfig,
        bits: BitArray,
        hasher: Optional[Hasher],
        metrics: Optional[Metrics],
        dup_check: bool,
    ) -> None:
        self._config = config
        self._bits = bits
        self._hasher = hasher or Murmur3Hasher()
        self._metrics = metrics
        self.dup_check = dup_check
        self.n_added = 0
        self._overflow_warned = False
        logger.debug(
            "BloomFilter: m=%d bits (%d bytes), k=%d, capacity=%s, p=%s",
            config.bit_count,
            bits.nbytes,
            config.hash_count,
            config.item_count,
            config.false_positive_rate,
        )

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def bit_count(self) -> int:
        return self._config.bit_count

    @property
    def hash_count(self) -> int:
        return self._config.hash_count

    @property
    def capacity(self) -> Optional[int]:
        return self._config.item_count

    @property
    def error_rate(self) -> Optional[float]:
        return self._config.false_positive_rate

    @property
    def is_empty(self) -> bool:
        return not self._bits.any()

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and self.n_added >= self.capacity

    def _probes(self, item: Item):
        h = self._hasher.hash128(to_bytes(item))
        return iter_probes(h, self._config.hash_count, self._config.bit_count)

    def add(self, item: Item) -> bool:
        """Insert ``item``. Returns True if any bit was newly set."""
        flipped = False
        for pos in self._probes(item):
            if self._bits.set(pos):
                flipped = True
        if flipped or not self.dup_check:
            self.n_added += 1
            if not self._overflow_warned and self.capacity is not None and self.n_added > self.capacity:
                self._overflow_warned = True
                logger.warning(
                    "BloomFilter holds %d items, over its capacity of %d; false positive rate will exceed %s",
                    self.n_added,
                    self.capacity,
                    self.error_rate,
                )
        if self._metrics is not None:
            self._metrics.record_add(flipped)
        return flipped

    def add_batch(self, items: Iterable[Item]) -> int:
        inserted = 0
        for item in items:
            if self.add(item):
                inserted += 1
        return inserted

    def contains(self, item: Item) -> bool:
        found = all(self._bits.get(pos) for pos in self._probes(item))
        if self._metrics is not None:
            self._metrics.record_query(found)
        return found

    def contains_batch(self, items: List[Item]) -> np.ndarray:
        results = np.ones(len(items), dtype=bool)
        for idx, item in enumerate(items):
            if not self.contains(item):
                results[idx] = False
        return results

    def get_stats(self) -> FilterStats:
        set_bits = self._bits.count()
        fill_ratio = set_bits / self.bit_count
        estimated_fpr = fill_ratio ** self.hash_count if set_bits else 0.0
        return FilterStats(
            items_added=self.n_added,
            size_bits=self.bit_count,
            num_hashes=self.hash_count,
            memory_mb=self._bits.nbytes / (1024 * 1024),
            fill_ratio=fill_ratio,
            estimated_fpr=estimated_fpr,
            set_bits=set_bits,
        )

    def __contains__(self, item: Item) -> bool:
        return self.contains(item)

    def __len__(self) -> int:
        return self.n_added

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.hash_count == other.hash_count and self._bits == other._bits

    def __repr__(self) -> str:
        return f"BloomFilter(m={self.bit_count}, k={self.hash_count}, items={self.n_added})"


def create_filter(item_count: int, false_positive_spec) -> BloomFilter:
    return BloomFilter(item_count=item_count, false_positive_rate=false_positive_spec)
