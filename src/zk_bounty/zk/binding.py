"""
Public-input binding: one digest standing in for every committed value.

The escrow can only afford a couple of public inputs per proof check, so
instead of exposing ``edNonce``, ``ed``, ``Qa``, ``Qb``, ``nonce`` and ``ew``
individually, both sides hash one canonical byte string:

    BE32(edNonce) ‖ BE32(ed[0..3]) ‖ rawPubKey(Qa)[1:] ‖ rawPubKey(Qb)[1:]
        ‖ BE32(nonce) ‖ BE32(ew[0..3])

    Hpub = SHA256(that byte string)

and feed the proof its two 128-bit halves. The relation rebuilds the same
bytes from its own bit-decomposed signals (see ``relation``); the escrow
rebuilds them from its stored parameters plus the caller's values. Any
divergence between the two layouts voids the exchange.

The same byte string is published verbatim in the settle transaction's
zero-value data output, so the buyer (or anyone) can recover ``Qb``,
``nonce`` and ``ew`` with ``parse_canonical_bytes``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from zk_bounty.crypto.hashes import sha256
from zk_bounty.crypto.limbs import Limbs
from zk_bounty.crypto.point import ECPoint, pubkey_body

WORD_SIZE = 32
CIPHERTEXT_WORDS = 4
POINT_BODY_SIZE = 64
HPUB_SIZE = 32
HALF_SIZE = HPUB_SIZE // 2

CANONICAL_SIZE = (
    WORD_SIZE                          # edNonce
    + CIPHERTEXT_WORDS * WORD_SIZE     # ed
    + 2 * POINT_BODY_SIZE              # Qa, Qb
    + WORD_SIZE                        # nonce
    + CIPHERTEXT_WORDS * WORD_SIZE     # ew
)


class BindingError(ValueError):
    """Raised when values cannot be laid out canonically."""
    pass


@dataclass(frozen=True)
class Disclosure:
    """Everything the canonical byte string commits to."""
    ed_nonce: int
    ed: tuple[int, ...]
    qa: ECPoint
    qb: ECPoint
    nonce: int
    ew: tuple[int, ...]


def be32(value: int) -> bytes:
    if value < 0 or value >> (8 * WORD_SIZE):
        raise BindingError(f"Value does not fit in {WORD_SIZE} bytes")
    return value.to_bytes(WORD_SIZE, "big")


def _words(values: Sequence[int], label: str) -> bytes:
    if len(values) != CIPHERTEXT_WORDS:
        raise BindingError(f"{label} must have {CIPHERTEXT_WORDS} elements, got {len(values)}")
    return b"".join(be32(v) for v in values)


def canonical_bytes(
    ed_nonce: int,
    ed: Sequence[int],
    qa: ECPoint,
    qb: ECPoint,
    nonce: int,
    ew: Sequence[int],
) -> bytes:
    """Serialize the committed values in the fixed binding order."""
    return b"".join([
        be32(ed_nonce),
        _words(ed, "ed"),
        pubkey_body(qa),
        pubkey_body(qb),
        be32(nonce),
        _words(ew, "ew"),
    ])


def parse_canonical_bytes(data: bytes) -> Disclosure:
    """Inverse of ``canonical_bytes``."""
    if len(data) != CANONICAL_SIZE:
        raise BindingError(f"Expected {CANONICAL_SIZE} bytes, got {len(data)}")
    pos = 0

    def take(n: int) -> bytes:
        nonlocal pos
        chunk = data[pos:pos + n]
        pos += n
        return chunk

    def word() -> int:
        return int.from_bytes(take(WORD_SIZE), "big")

    def point() -> ECPoint:
        body = take(POINT_BODY_SIZE)
        return ECPoint(Limbs.from_bytes(body[:32]), Limbs.from_bytes(body[32:]))

    ed_nonce = word()
    ed = tuple(word() for _ in range(CIPHERTEXT_WORDS))
    qa = point()
    qb = point()
    nonce = word()
    ew = tuple(word() for _ in range(CIPHERTEXT_WORDS))
    return Disclosure(ed_nonce=ed_nonce, ed=ed, qa=qa, qb=qb, nonce=nonce, ew=ew)


def compute_hpub(
    ed_nonce: int,
    ed: Sequence[int],
    qa: ECPoint,
    qb: ECPoint,
    nonce: int,
    ew: Sequence[int],
) -> bytes:
    """Hpub = SHA256(canonical_bytes(...))."""
    return sha256(canonical_bytes(ed_nonce, ed, qa, qb, nonce, ew))


def script_number(half: bytes) -> bytes:
    """
    Encode a 16-byte big-endian half as a ledger script number.

    Script numbers are little-endian sign-magnitude, so the half is reversed
    and a zero sign byte appended to keep it non-negative (17 bytes).
    """
    if len(half) != HALF_SIZE:
        raise BindingError(f"Expected {HALF_SIZE} bytes, got {len(half)}")
    return half[::-1] + b"\x00"


def split_hpub(hpub: bytes) -> tuple[int, int]:
    """
    The two public-input limbs of a digest: each 16-byte half read as an
    unsigned 128-bit integer, first half first.
    """
    if len(hpub) != HPUB_SIZE:
        raise BindingError(f"Hpub must be {HPUB_SIZE} bytes, got {len(hpub)}")
    return (
        int.from_bytes(script_number(hpub[:HALF_SIZE]), "little"),
        int.from_bytes(script_number(hpub[HALF_SIZE:]), "little"),
    )


def join_hpub(limbs: Sequence[int]) -> bytes:
    """Inverse of ``split_hpub``."""
    if len(limbs) != 2:
        raise BindingError(f"Expected 2 limbs, got {len(limbs)}")
    out = b""
    for limb in limbs:
        if limb < 0 or limb >> (8 * HALF_SIZE):
            raise BindingError("Hpub limb does not fit in 128 bits")
        out += limb.to_bytes(HALF_SIZE, "big")
    return out
