from dataclasses import dataclass
from typing import Protocol


class InvalidParameter(ValueError):
    """Raised when a filter cannot be built from the supplied parameters."""


@dataclass(frozen=True)
class FilterStats:
    items_added: int
    size_bits: int
    num_hashes: int
    memory_mb: float
    fill_ratio: float
    estimated_fpr: float
    set_bits: int


class Hasher(Protocol):
    def hash128(self, data: bytes) -> int: ...
