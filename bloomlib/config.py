from dataclasses import dataclass
from typing import Optional

from .params import derive, normalize_false_positive_rate


TARGET_FPR = 0.001
MAX_EXPECTED_ITEMS = 1_000_000


@dataclass(frozen=True)
class FilterConfig:
    item_count: Optional[int]
    false_positive_rate: Optional[float]
    bit_count: int
    hash_count: int

    @classmethod
    def for_capacity(
        cls, item_count: int, false_positive_rate, one_in_n: Optional[bool] = None
    ) -> "FilterConfig":
        p = normalize_false_positive_rate(false_positive_rate, one_in_n)
        m, k = derive(item_count, p, one_in_n=False)
        return cls(item_count=int(item_count), false_positive_rate=p, bit_count=m, hash_count=k)
