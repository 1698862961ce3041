"""
secp256k1 points in split-limb form, and the point codec.

Inside the relation every coordinate is four 64-bit limbs (see ``limbs``).
On the ledger the same point travels as a standard 65-byte uncompressed
public key:

    0x04 ‖ x[3] ‖ x[2] ‖ x[1] ‖ x[0] ‖ y[3] ‖ y[2] ‖ y[1] ‖ y[0]

with every limb written as 8 big-endian bytes. ``encode_point`` /
``decode_point`` are pure and perform no curve-membership check; callers that
need one use ``is_on_curve`` (the relation does, the escrow does not).

Scalar multiplication is delegated to the ``ecdsa`` library through the
``Secp256k1Multiplier`` capability, so the relation can be exercised with a
mock multiplier in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import ecdsa
import ecdsa.ellipticcurve as ec

from zk_bounty.crypto.limbs import LIMB_BYTES, LIMB_COUNT, Limbs

# ==============================================================================
# secp256k1 curve constants
# ==============================================================================

SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

UNCOMPRESSED_PREFIX = 0x04
RAW_PUBKEY_SIZE = 1 + 2 * LIMB_COUNT * LIMB_BYTES  # 65

_CURVE = ecdsa.SECP256k1.curve
_GENERATOR = ecdsa.SECP256k1.generator


class PointError(ValueError):
    """Raised for malformed point encodings or off-curve points."""
    pass


@dataclass(frozen=True)
class ECPoint:
    """An affine secp256k1 point with limb-decomposed coordinates."""
    x: Limbs
    y: Limbs

    @classmethod
    def from_ints(cls, x: int, y: int) -> ECPoint:
        return cls(Limbs.from_int(x), Limbs.from_int(y))

    @property
    def x_int(self) -> int:
        return self.x.to_int()

    @property
    def y_int(self) -> int:
        return self.y.to_int()

    def raw(self) -> bytes:
        """The 65-byte uncompressed public-key encoding."""
        return encode_point(self)

    def hex(self) -> str:
        return encode_point(self).hex()


# ==============================================================================
# Codec
# ==============================================================================


def encode_point(point: ECPoint) -> bytes:
    """Encode a limb point as a 65-byte uncompressed public key."""
    return bytes([UNCOMPRESSED_PREFIX]) + point.x.to_bytes() + point.y.to_bytes()


def decode_point(raw: bytes) -> ECPoint:
    """
    Decode a 65-byte uncompressed public key into limb form.

    Raises:
        PointError: if the length or prefix byte is wrong.
    """
    if len(raw) != RAW_PUBKEY_SIZE:
        raise PointError(f"Expected {RAW_PUBKEY_SIZE} bytes, got {len(raw)}")
    if raw[0] != UNCOMPRESSED_PREFIX:
        raise PointError(f"Invalid prefix byte: 0x{raw[0]:02x}")
    half = LIMB_COUNT * LIMB_BYTES
    return ECPoint(Limbs.from_bytes(raw[1:1 + half]), Limbs.from_bytes(raw[1 + half:]))


def pubkey_body(point: ECPoint) -> bytes:
    """The 64-byte x‖y body of the public key (prefix stripped)."""
    return encode_point(point)[1:]


# ==============================================================================
# Curve arithmetic (ecdsa backend)
# ==============================================================================


def is_on_curve(point: ECPoint) -> bool:
    x, y = point.x_int, point.y_int
    if x >= SECP256K1_P or y >= SECP256K1_P:
        return False
    return (y * y - (x * x * x + 7)) % SECP256K1_P == 0


def to_curve_point(point: ECPoint) -> ec.PointJacobi:
    """Convert to an ecdsa point, checking curve membership."""
    if not is_on_curve(point):
        raise PointError("Point is not on secp256k1")
    return ec.PointJacobi(_CURVE, point.x_int, point.y_int, 1)


def from_curve_point(pt: ec.AbstractPoint) -> ECPoint:
    if pt == ec.INFINITY:
        raise PointError("Cannot represent the point at infinity")
    return ECPoint.from_ints(pt.x(), pt.y())


def _check_scalar(scalar: int) -> None:
    if scalar <= 0 or scalar >= SECP256K1_N:
        raise PointError(f"scalar must be in [1, N-1], got {scalar}")


def scalar_mult(point: ECPoint, scalar: int) -> ECPoint:
    """scalar · point."""
    _check_scalar(scalar)
    return from_curve_point(scalar * to_curve_point(point))


def generator_mult(scalar: int) -> ECPoint:
    """scalar · G."""
    _check_scalar(scalar)
    return from_curve_point(scalar * _GENERATOR)


GENERATOR = from_curve_point(_GENERATOR)


# ==============================================================================
# Scalar-multiplication capability
# ==============================================================================


class ScalarMultiplier(Protocol):
    """The EC scalar-multiplication gadget used by the relation."""

    def multiply(self, point: ECPoint, scalar: Limbs) -> ECPoint: ...

    def multiply_generator(self, scalar: Limbs) -> ECPoint: ...


class Secp256k1Multiplier:
    """ScalarMultiplier backed by the ecdsa library."""

    def multiply(self, point: ECPoint, scalar: Limbs) -> ECPoint:
        return scalar_mult(point, scalar.to_int())

    def multiply_generator(self, scalar: Limbs) -> ECPoint:
        return generator_mult(scalar.to_int())


