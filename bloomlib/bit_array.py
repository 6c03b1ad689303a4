from typing import Iterable, Union

import numpy as np

from .types import InvalidParameter


class BitArray:
    """Fixed-length bit array packed 8 bits per byte, least significant bit first."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise InvalidParameter(f"bit array size must be positive, got {size}")
        self.size = int(size)
        self._bytes = np.zeros((self.size + 7) // 8, dtype=np.uint8)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview, np.ndarray], size: int | None = None) -> "BitArray":
        if isinstance(data, np.ndarray):
            if data.dtype != np.uint8:
                if data.dtype.kind not in "iu":
                    raise InvalidParameter(f"packed bits must be an integer array, got dtype {data.dtype}")
                if data.size and (data.min() < 0 or data.max() > 0xFF):
                    raise InvalidParameter("packed bits must hold byte values in 0..255")
            raw = data.astype(np.uint8).ravel()
        else:
            raw = np.frombuffer(bytes(data), dtype=np.uint8)
        if size is None:
            size = raw.size * 8
        if size > raw.size * 8:
            raise InvalidParameter(f"{size} bits requested but only {raw.size * 8} supplied")
        arr = cls(size)
        arr._bytes[:] = raw[: arr._bytes.size]
        arr._clear_padding()
        return arr

    @classmethod
    def from_bools(cls, bits: Iterable[bool]) -> "BitArray":
        flags = np.asarray(list(bits), dtype=np.bool_)
        arr = cls(flags.size)
        arr._bytes[:] = np.packbits(flags, bitorder="little")
        return arr

    def _clear_padding(self) -> None:
        spare = self._bytes.size * 8 - self.size
        if spare:
            self._bytes[-1] &= 0xFF >> spare

    def _check(self, pos: int) -> None:
        if not 0 <= pos < self.size:
            raise IndexError(f"bit {pos} out of range for {self.size} bits")

    def get(self, pos: int) -> bool:
        self._check(pos)
        return bool(self._bytes[pos // 8] & (1 << (pos % 8)))

    def set(self, pos: int) -> bool:
        """Set bit ``pos``; return True if it was previously clear."""
        self._check(pos)
        byte_idx = pos // 8
        mask = 1 << (pos % 8)
        if self._bytes[byte_idx] & mask:
            return False
        self._bytes[byte_idx] |= mask
        return True

    def count(self) -> int:
        return int(np.unpackbits(self._bytes).sum())

    def any(self) -> bool:
        return bool(self._bytes.any())

    @property
    def nbytes(self) -> int:
        return self._bytes.nbytes

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, pos: int) -> bool:
        return self.get(pos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitArray):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._bytes, other._bytes))
