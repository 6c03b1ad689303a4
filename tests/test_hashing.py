import mmh3
import pytest

from bloomlib.hashing import MASK64, Murmur3Hasher, iter_probes, probe_positions, to_bytes


def test_probe_positions_literal_values():
    lo, hi = 123456789, 987654321
    h = (hi << 64) | lo
    assert probe_positions(h, 3, 1000) == [789, 110, 431]
    assert probe_positions(h, 3, 1000) == [lo % 1000, (lo + hi) % 1000, (lo + 2 * hi) % 1000]


def test_probe_positions_wrap_at_64_bits():
    h = (1 << 64) | MASK64  # hi = 1, lo = 2**64 - 1
    # unbounded arithmetic would give 616 and 617
    assert probe_positions(h, 3, 1000) == [615, 0, 1]


def test_probe_positions_with_zero_high_half_repeat():
    assert probe_positions(42, 4, 10) == [2, 2, 2, 2]


def test_probe_positions_in_range():
    h = mmh3.hash128(b"Helloworld", 0, True, signed=False)
    positions = probe_positions(h, 7, 191702)
    assert len(positions) == 7
    assert all(0 <= p < 191702 for p in positions)


def test_iter_probes_rejects_bad_sizes():
    with pytest.raises(ValueError):
        list(iter_probes(1, 0, 10))
    with pytest.raises(ValueError):
        list(iter_probes(1, 3, 0))


def test_murmur3_hasher_matches_mmh3():
    hasher = Murmur3Hasher()
    assert hasher.hash128(b"Helloworld") == mmh3.hash128(b"Helloworld", 0, True, signed=False)
    assert 0 <= hasher.hash128(b"") < 1 << 128
    assert Murmur3Hasher(seed=7).hash128(b"x") != hasher.hash128(b"x")


def test_to_bytes():
    assert to_bytes(b"abc") == b"abc"
    assert to_bytes(bytearray(b"abc")) == b"abc"
    assert to_bytes(memoryview(b"abc")) == b"abc"
    assert to_bytes("héllo") == "héllo".encode("utf-8")
    with pytest.raises(TypeError):
        to_bytes(123)


def test_probe_layout_is_linear_not_triangular():
    lo, hi = 5, 7
    h = (hi << 64) | lo
    # a running sum of i*hi would give 5 + 3*7 = 26 for the third probe
    assert probe_positions(h, 3, 1000) == [5, 12, 19]
