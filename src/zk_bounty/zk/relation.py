"""
The bounty relation: the NP statement a seller proves in zero knowledge.

Explicit public input:
    hpub = (Hpub[0], Hpub[1])     two 128-bit halves of the binding digest

Committed values (private signals, made public only through hpub):
    ed_nonce, ed[4], qa, qb, nonce, ew[4]

Secrets:
    w[2]      the data key
    d[n]      the plaintext data (n fixed per deployment)
    db        the seller's scalar, as 4 limbs
    qs        the claimed ECDH shared point db·Qa

Predicates, all of which must hold:

    binding             SHA256 over the canonical bit layout of the committed
                        values, split in two 128-bit halves, equals hpub
    decryption          w with ed_nonce authenticates ed and decrypts it to d
    ecdh                db·Qa == qs, limb for limb, both coordinates
    key_ownership       db·G == qb
    witness_encryption  Enc(w; key=f(qs.x), nonce) == ew

plus ``well_formed``: fixed lengths, field ranges and curve membership of
every point. The relation never reports partial success; ``check`` lists
every failed predicate so a prover can tell the seller what is wrong before
spending time on a proof.

The heavy primitives (cipher, scalar multiplication) are capabilities
passed in at construction, so the predicate wiring can be tested with
mocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from zk_bounty.crypto.cipher import FIELD_MODULUS, KeyedCipher, PoseidonCipher, ciphertext_length
from zk_bounty.crypto.hashes import sha256
from zk_bounty.crypto.limbs import LIMB_BITS, Limbs, bits_to_bytes, bytes_to_bits, from_bits, to_bits
from zk_bounty.crypto.point import (
    SECP256K1_N,
    ECPoint,
    ScalarMultiplier,
    Secp256k1Multiplier,
    is_on_curve,
)
from zk_bounty.zk.binding import CIPHERTEXT_WORDS, WORD_SIZE

KEY_ELEMENTS = 2
DEFAULT_DATA_LENGTH = 3

PREDICATES = (
    "well_formed",
    "binding",
    "decryption",
    "ecdh",
    "key_ownership",
    "witness_encryption",
)


class UnsatisfiedRelation(Exception):
    """Raised when a witness does not satisfy the bounty relation."""

    def __init__(self, failed: Sequence[str]) -> None:
        self.failed = list(failed)
        super().__init__(f"Relation not satisfied: {', '.join(self.failed)}")


@dataclass(frozen=True)
class Statement:
    """The proof's only explicit public input."""
    hpub: tuple[int, int]


@dataclass(frozen=True)
class Witness:
    # committed through hpub
    ed_nonce: int
    ed: tuple[int, ...]
    qa: ECPoint
    qb: ECPoint
    nonce: int
    ew: tuple[int, ...]
    # secrets
    w: tuple[int, ...]
    d: tuple[int, ...]
    db: Limbs
    qs: ECPoint


def derive_witness_key(qs: ECPoint) -> tuple[int, int]:
    """
    Cipher key for ``ew`` from the shared point's x-coordinate only:
    (x[3]·2^64 + x[2], x[1]·2^64 + x[0]).
    """
    x = qs.x
    return ((x[3] << LIMB_BITS) | x[2], (x[1] << LIMB_BITS) | x[0])


# ==============================================================================
# Bit-level binding gadget
# ==============================================================================


def _word_bits(value: int) -> list[int]:
    return to_bits(value, 8 * WORD_SIZE)


def _point_bits(point: ECPoint) -> list[int]:
    return point.x.bits() + point.y.bits()


def binding_bits(witness: Witness) -> list[int]:
    """The committed values as one MSB-first bit string, in binding order."""
    bits = _word_bits(witness.ed_nonce)
    for v in witness.ed:
        bits += _word_bits(v)
    bits += _point_bits(witness.qa)
    bits += _point_bits(witness.qb)
    bits += _word_bits(witness.nonce)
    for v in witness.ew:
        bits += _word_bits(v)
    return bits


def hash_to_halves(bits: Sequence[int]) -> tuple[int, int]:
    """SHA-256 over a bit string, recomposed as two 128-bit halves."""
    digest_bits = bytes_to_bits(sha256(bits_to_bytes(bits)))
    return from_bits(digest_bits[:128]), from_bits(digest_bits[128:])


# ==============================================================================
# The relation
# ==============================================================================


class BountyRelation:
    """
    Constraint system for one deployment.

    Args:
        data_length: number of plaintext field elements in ``d``; fixed for
            the lifetime of the relation and must encrypt to exactly four
            ciphertext elements.
        cipher: keyed-encryption capability.
        multiplier: EC scalar-multiplication capability.
    """

    def __init__(
        self,
        data_length: int = DEFAULT_DATA_LENGTH,
        cipher: KeyedCipher | None = None,
        multiplier: ScalarMultiplier | None = None,
    ) -> None:
        if data_length <= 0 or ciphertext_length(data_length) != CIPHERTEXT_WORDS:
            raise ValueError(
                f"data_length {data_length} does not encrypt to {CIPHERTEXT_WORDS} elements"
            )
        self.data_length = data_length
        self.cipher = cipher or PoseidonCipher()
        self.multiplier = multiplier or Secp256k1Multiplier()

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def _well_formed(self, statement: Statement, witness: Witness) -> bool:
        if len(statement.hpub) != 2 or any(h < 0 or h >> 128 for h in statement.hpub):
            return False
        if len(witness.w) != KEY_ELEMENTS or len(witness.d) != self.data_length:
            return False
        if len(witness.ed) != CIPHERTEXT_WORDS or len(witness.ew) != CIPHERTEXT_WORDS:
            return False
        elements = (*witness.w, *witness.d, *witness.ed, *witness.ew, witness.ed_nonce)
        if any(not 0 <= v < FIELD_MODULUS for v in elements):
            return False
        if not 0 < witness.db.to_int() < SECP256K1_N:
            return False
        return all(is_on_curve(p) for p in (witness.qa, witness.qb, witness.qs))

    def _binding(self, statement: Statement, witness: Witness) -> bool:
        return hash_to_halves(binding_bits(witness)) == tuple(statement.hpub)

    def _decryption(self, statement: Statement, witness: Witness) -> bool:
        return self.cipher.check(witness.w, witness.ed_nonce, witness.ed, witness.d)

    def _ecdh(self, statement: Statement, witness: Witness) -> bool:
        shared = self.multiplier.multiply(witness.qa, witness.db)
        return shared.x.values == witness.qs.x.values and shared.y.values == witness.qs.y.values

    def _key_ownership(self, statement: Statement, witness: Witness) -> bool:
        return self.multiplier.multiply_generator(witness.db) == witness.qb

    def _witness_encryption(self, statement: Statement, witness: Witness) -> bool:
        key = derive_witness_key(witness.qs)
        return list(self.cipher.encrypt(witness.w, key, witness.nonce)) == list(witness.ew)

    def _predicates(self) -> list[tuple[str, Callable[[Statement, Witness], bool]]]:
        return [(name, getattr(self, f"_{name}")) for name in PREDICATES]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, statement: Statement, witness: Witness) -> list[str]:
        """
        Evaluate every predicate.

        Returns:
            Names of the failed predicates; empty iff satisfied. If the
            witness is not well formed no other predicate is evaluated.
        """
        failed: list[str] = []
        for name, predicate in self._predicates():
            try:
                ok = predicate(statement, witness)
            except ValueError:
                ok = False
            if not ok:
                failed.append(name)
                if name == "well_formed":
                    break
        return failed

    def is_satisfied(self, statement: Statement, witness: Witness) -> bool:
        return not self.check(statement, witness)

    def assert_satisfied(self, statement: Statement, witness: Witness) -> None:
        failed = self.check(statement, witness)
        if failed:
            raise UnsatisfiedRelation(failed)
