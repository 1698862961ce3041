"""
Fixed-width multi-limb integers.

Circuit signals cannot hold a full 256-bit coordinate, so every coordinate
and scalar is carried as exactly LIMB_COUNT unsigned limbs of LIMB_BITS bits
each, least significant limb first:

    value = limb[0] + limb[1]·2^64 + limb[2]·2^128 + limb[3]·2^192

Recomposition is done limb by limb with an explicit carry so the same
arithmetic can be mirrored inside a constraint system, where field addition
wraps modulo r instead of growing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

LIMB_BITS = 64
LIMB_COUNT = 4
LIMB_MAX = (1 << LIMB_BITS) - 1
LIMB_BYTES = LIMB_BITS // 8
TOTAL_BITS = LIMB_BITS * LIMB_COUNT


class LimbRangeError(ValueError):
    """Raised when a limb or a value does not fit the fixed limb layout."""
    pass


@dataclass(frozen=True)
class Limbs:
    """
    Exactly four 64-bit limbs, least significant first.

    The range invariant (0 <= limb < 2^64, exactly four limbs) is checked at
    construction, so decomposition of any Limbs instance is unique.
    """
    values: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.values) != LIMB_COUNT:
            raise LimbRangeError(
                f"Expected {LIMB_COUNT} limbs, got {len(self.values)}"
            )
        for i, limb in enumerate(self.values):
            if not isinstance(limb, int) or isinstance(limb, bool):
                raise LimbRangeError(f"Limb {i} must be an int, got {type(limb).__name__}")
            if limb < 0 or limb > LIMB_MAX:
                raise LimbRangeError(f"Limb {i} out of range [0, 2^{LIMB_BITS}): {limb}")

    @classmethod
    def of(cls, values: Iterable[int]) -> Limbs:
        return cls(tuple(values))

    @classmethod
    def from_int(cls, value: int) -> Limbs:
        """Decompose a non-negative integer below 2^256 into limbs."""
        if value < 0 or value >> TOTAL_BITS:
            raise LimbRangeError(f"Value does not fit in {TOTAL_BITS} bits")
        limbs = []
        for _ in range(LIMB_COUNT):
            limbs.append(value & LIMB_MAX)
            value >>= LIMB_BITS
        return cls(tuple(limbs))

    @classmethod
    def from_bytes(cls, data: bytes) -> Limbs:
        """Parse 32 big-endian bytes (most significant limb first)."""
        if len(data) != LIMB_COUNT * LIMB_BYTES:
            raise LimbRangeError(
                f"Expected {LIMB_COUNT * LIMB_BYTES} bytes, got {len(data)}"
            )
        limbs = [
            int.from_bytes(data[i:i + LIMB_BYTES], "big")
            for i in range(0, len(data), LIMB_BYTES)
        ]
        return cls(tuple(reversed(limbs)))

    def to_int(self) -> int:
        """Recompose limbs into an integer (limb 0 least significant)."""
        return sum(limb << (LIMB_BITS * i) for i, limb in enumerate(self.values))

    def to_bytes(self) -> bytes:
        """32 bytes, most significant limb first, each limb 8 bytes big-endian."""
        return b"".join(limb.to_bytes(LIMB_BYTES, "big") for limb in reversed(self.values))

    def bits(self) -> list[int]:
        """All 256 bits, MSB-first."""
        out: list[int] = []
        for limb in reversed(self.values):
            out.extend(to_bits(limb, LIMB_BITS))
        return out

    def __getitem__(self, index: int) -> int:
        return self.values[index]

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return LIMB_COUNT


def to_bits(value: int, width: int) -> list[int]:
    """Decompose ``value`` into exactly ``width`` bits, MSB-first."""
    if value < 0 or value >> width:
        raise LimbRangeError(f"Value does not fit in {width} bits")
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def from_bits(bits: Sequence[int]) -> int:
    """Recompose MSB-first bits into an integer."""
    value = 0
    for bit in bits:
        if bit not in (0, 1):
            raise LimbRangeError(f"Not a bit: {bit}")
        value = (value << 1) | bit
    return value


def bits_to_bytes(bits: Sequence[int]) -> bytes:
    """Pack MSB-first bits (length a multiple of 8) into bytes."""
    if len(bits) % 8:
        raise LimbRangeError(f"Bit length {len(bits)} is not a multiple of 8")
    return bytes(from_bits(bits[i:i + 8]) for i in range(0, len(bits), 8))


def bytes_to_bits(data: bytes) -> list[int]:
    out: list[int] = []
    for byte in data:
        out.extend(to_bits(byte, 8))
    return out
