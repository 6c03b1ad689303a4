"""Optimal Bloom filter sizing.

For ``n`` expected items and a target false-positive probability ``p``:

    m = ceil((n * ln p) / ln(1 / 2^(ln 2)))
    k = round(ln 2 * m / n)

``ln(1 / 2^(ln 2))`` is ``-(ln 2)^2``, so ``m`` is the usual
``-n ln p / (ln 2)^2``.
"""

import math
import numbers
from typing import Optional, Tuple

from .types import InvalidParameter

LN2 = math.log(2.0)
BITS_DIVISOR = math.log(1.0 / math.pow(2.0, LN2))


def normalize_false_positive_rate(value, one_in_n: Optional[bool] = None) -> float:
    """Return the false-positive probability as a fraction.

    ``value`` is either a fraction such as ``0.01`` or, when ``one_in_n`` is
    true, a denominator such as ``100`` meaning 1-in-100. If ``one_in_n`` is
    None, a non-bool integer is read as a denominator.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(f"false positive rate must be a number, got {value!r}")
    if one_in_n is None:
        one_in_n = isinstance(value, numbers.Integral)
    if one_in_n:
        if not value > 0:
            raise InvalidParameter(f"1-in-N denominator must be positive, got {value!r}")
        p = 1.0 / float(value)
    else:
        p = float(value)
    # NaN fails both comparisons
    if not (0.0 < p <= 1.0):
        raise InvalidParameter(f"false positive rate must be in (0, 1], got {p!r}")
    return p


def _check_item_count(n) -> int:
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidParameter(f"item count must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidParameter(f"item count must be greater than zero, got {n!r}")
    return int(n)


def optimal_bit_count(n: int, p: float) -> int:
    return max(1, int(math.ceil((n * math.log(p)) / BITS_DIVISOR)))


def optimal_hash_count(m: int, n: int) -> int:
    # round half away from zero; builtin round() is banker's rounding
    return max(1, int(math.floor(LN2 * m / n + 0.5)))


def derive(n, p, one_in_n: Optional[bool] = None) -> Tuple[int, int]:
    """Return ``(m, k)`` for ``n`` expected items at false-positive rate ``p``."""
    n = _check_item_count(n)
    p = normalize_false_positive_rate(p, one_in_n)
    m = optimal_bit_count(n, p)
    return m, optimal_hash_count(m, n)
