"""
Seller side of the exchange.

A seller who knows the data key ``w`` (and the plaintext ``d`` it unlocks)
claims a bounty by:

    1. picking a fresh scalar db:      Qb = db·G,  Qs = db·Qa
    2. encrypting the key for the buyer: ew = Enc(w; key=f(Qs.x), nonce)
    3. binding everything:             hpub = SHA256(canonical bytes)
    4. proving the relation off-chain
    5. submitting a spend that pays the reward to Qb and publishes the
       canonical bytes in a zero-value data output

Only the buyer, who holds da with Qa = da·G, can recompute Qs = da·Qb from
the published Qb and decrypt ``ew``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Sequence

from zk_bounty.core.escrow import expected_settle_outputs
from zk_bounty.core.ledger import PreimageBuilder
from zk_bounty.core.models import BountyParameters, SettleAttempt
from zk_bounty.crypto.cipher import NONCE_BITS, KeyedCipher, PoseidonCipher
from zk_bounty.crypto.limbs import Limbs
from zk_bounty.crypto.point import SECP256K1_N, ECPoint, generator_mult, scalar_mult
from zk_bounty.zk.binding import compute_hpub, split_hpub
from zk_bounty.zk.prover import ProvingBackend, prove
from zk_bounty.zk.relation import BountyRelation, Statement, Witness, derive_witness_key

logger = logging.getLogger("zk_bounty.seller")


def generate_seller_scalar() -> int:
    """A random scalar db in [1, N-1]."""
    return secrets.randbelow(SECP256K1_N - 1) + 1


@dataclass(frozen=True)
class SellerClaim:
    """Everything a seller derives before proving."""
    qb: ECPoint
    qs: ECPoint
    nonce: int
    ew: tuple[int, ...]
    hpub: bytes
    statement: Statement
    witness: Witness

    @classmethod
    def prepare(
        cls,
        params: BountyParameters,
        w: Sequence[int],
        d: Sequence[int],
        db: int,
        nonce: int | None = None,
        cipher: KeyedCipher | None = None,
    ) -> SellerClaim:
        """
        Derive Qb, Qs, ew and hpub for a claim against ``params``.

        Args:
            params: the funded bounty.
            w: the two-element data key.
            d: the plaintext the key unlocks.
            db: the seller's secret scalar.
            nonce: 128-bit encryption nonce for ``ew``; random if omitted.
            cipher: keyed-encryption capability (Poseidon by default).
        """
        cipher = cipher or PoseidonCipher()
        if nonce is None:
            nonce = secrets.randbits(NONCE_BITS)
        qb = generator_mult(db)
        qs = scalar_mult(params.qa, db)
        ew = tuple(cipher.encrypt(list(w), derive_witness_key(qs), nonce))
        hpub = compute_hpub(params.ed_nonce, params.ed, params.qa, qb, nonce, ew)
        witness = Witness(
            ed_nonce=params.ed_nonce,
            ed=tuple(params.ed),
            qa=params.qa,
            qb=qb,
            nonce=nonce,
            ew=ew,
            w=tuple(w),
            d=tuple(d),
            db=Limbs.from_int(db),
            qs=qs,
        )
        return cls(
            qb=qb,
            qs=qs,
            nonce=nonce,
            ew=ew,
            hpub=hpub,
            statement=Statement(hpub=split_hpub(hpub)),
            witness=witness,
        )

    def build_preimage(
        self,
        params: BountyParameters,
        outpoint: bytes = b"\x00" * 36,
        script_code: bytes = b"",
    ) -> bytes:
        """Preimage of a spend carrying exactly the two required outputs."""
        outputs = expected_settle_outputs(params, self.qb, self.nonce, self.ew)
        return (
            PreimageBuilder(outpoint=outpoint, script_code=script_code, amount=params.reward)
            .add_raw_outputs([outputs])
            .build()
        )


def claim(
    params: BountyParameters,
    w: Sequence[int],
    d: Sequence[int],
    backend: ProvingBackend,
    db: int | None = None,
    nonce: int | None = None,
    relation: BountyRelation | None = None,
    outpoint: bytes = b"\x00" * 36,
    script_code: bytes = b"",
) -> SettleAttempt:
    """
    Prepare, prove and package a settle attempt.

    Raises:
        UnsatisfiedRelation: if ``w`` / ``d`` do not match the bounty.
    """
    relation = relation or BountyRelation(data_length=len(d))
    db = db if db is not None else generate_seller_scalar()
    prepared = SellerClaim.prepare(params, w, d, db, nonce=nonce, cipher=relation.cipher)
    proof = prove(relation, prepared.statement, prepared.witness, backend)
    logger.info(f"Prepared settle attempt paying {params.reward} to {prepared.qb.hex()[:18]}...")
    return SettleAttempt(
        qb=prepared.qb,
        ew=prepared.ew,
        hpub=prepared.hpub,
        nonce=prepared.nonce,
        proof=proof,
        preimage=prepared.build_preimage(params, outpoint, script_code),
    )
