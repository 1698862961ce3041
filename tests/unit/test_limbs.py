"""
Unit tests for zk_bounty.crypto.limbs — fixed four-limb integers and bit gadgets.
"""

import pytest

from zk_bounty.crypto.limbs import (
    LIMB_MAX,
    LimbRangeError,
    Limbs,
    bits_to_bytes,
    bytes_to_bits,
    from_bits,
    to_bits,
)


class TestLimbs:
    """Construction-time range invariant and recomposition."""

    def test_from_int_least_significant_first(self):
        limbs = Limbs.from_int((4 << 192) | (3 << 128) | (2 << 64) | 1)
        assert limbs.values == (1, 2, 3, 4)

    def test_to_int_inverts_from_int(self):
        value = 0xFFEEDDCCBBAA99887766554433221100FFEEDDCCBBAA99887766554433221100
        assert Limbs.from_int(value).to_int() == value

    def test_to_int_positional_weights(self):
        assert Limbs((1, 1, 1, 1)).to_int() == 1 + (1 << 64) + (1 << 128) + (1 << 192)
        assert Limbs((0, 0, 0, 1)).to_int() == 1 << 192

    def test_all_ones(self):
        limbs = Limbs((LIMB_MAX,) * 4)
        assert limbs.to_int() == (1 << 256) - 1

    def test_rejects_wrong_count(self):
        with pytest.raises(LimbRangeError, match="Expected 4 limbs"):
            Limbs((1, 2, 3))

    def test_rejects_oversized_limb(self):
        """A limb of 2^64 would make decomposition non-unique."""
        with pytest.raises(LimbRangeError, match="out of range"):
            Limbs((1 << 64, 0, 0, 0))

    def test_rejects_negative_limb(self):
        with pytest.raises(LimbRangeError):
            Limbs((0, -1, 0, 0))

    def test_from_int_rejects_wide_value(self):
        with pytest.raises(LimbRangeError):
            Limbs.from_int(1 << 256)

    def test_bytes_most_significant_limb_first(self):
        limbs = Limbs((1, 2, 3, 4))
        raw = limbs.to_bytes()
        assert len(raw) == 32
        assert raw[:8] == (4).to_bytes(8, "big")
        assert raw[24:] == (1).to_bytes(8, "big")
        assert Limbs.from_bytes(raw) == limbs

    def test_bits_match_integer(self):
        value = 0x8000000000000000000000000000000000000000000000000000000000000001
        bits = Limbs.from_int(value).bits()
        assert len(bits) == 256
        assert bits[0] == 1 and bits[-1] == 1
        assert from_bits(bits) == value


class TestBitGadgets:

    def test_to_bits_msb_first(self):
        assert to_bits(6, 4) == [0, 1, 1, 0]

    def test_to_bits_rejects_overflow(self):
        with pytest.raises(LimbRangeError):
            to_bits(16, 4)

    def test_from_bits_rejects_non_bit(self):
        with pytest.raises(LimbRangeError, match="Not a bit"):
            from_bits([0, 2])

    def test_bytes_bits_roundtrip(self):
        data = bytes(range(0, 256, 17))
        assert bits_to_bytes(bytes_to_bits(data)) == data

    def test_bits_to_bytes_requires_whole_bytes(self):
        with pytest.raises(LimbRangeError):
            bits_to_bytes([1, 0, 1])
