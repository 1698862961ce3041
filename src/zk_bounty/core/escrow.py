"""
The bounty escrow: two one-shot transitions over immutable parameters.

    FUNDED ──settle──▶ SETTLED
       └────refund───▶ REFUNDED

Both transitions are pure functions of (parameters, attempt). Every check
of a transition must pass or the attempt is rejected with one specific
error; nothing is ever partially applied and nothing is retried. The
ledger, not this module, guarantees that at most one spend of the funding
output is finalized when several attempts race.

Settle, in order:
    a. recompute Hpub from stored (qa, ed, ed_nonce) and supplied
       (qb, nonce, ew)                                → BindingMismatch
    b. verify the proof against the two Hpub limbs   → ProofRejected
    c. preimage is well formed                        → MalformedPreimage
    d. outputs are exactly
         [reward → P2PKH(hash160(rawPubKey(qb))),
          0      → OP_FALSE OP_RETURN <binding bytes>]  → OutputMismatch

Refund:
    signature by qa over the preimage                 → BadSignature
    preimage is well formed                           → MalformedPreimage
    sequence below the final sentinel and lock time
    below the height/timestamp boundary               → InvalidLockField
    lock time at or past the expiration height        → PrematureRefund

The refund's payout destination is deliberately not checked: the buyer
signs their own transaction and is trusted to pay themselves.
"""

from __future__ import annotations

import enum
import logging
from typing import NoReturn

from zk_bounty.core.ledger import (
    LOCKTIME_THRESHOLD,
    SEQUENCE_FINAL,
    BitcoinLedger,
    Ledger,
)
from zk_bounty.core.models import BountyParameters, RefundAttempt, SettleAttempt
from zk_bounty.crypto.hashes import hash160, hash256, sha256
from zk_bounty.crypto.point import ECPoint, encode_point
from zk_bounty.crypto.signature import verify_preimage_signature
from zk_bounty.zk.binding import BindingError, canonical_bytes, split_hpub
from zk_bounty.zk.prover import ProofVerifier

logger = logging.getLogger("zk_bounty.escrow")


class EscrowState(enum.Enum):
    FUNDED = "funded"
    SETTLED = "settled"
    REFUNDED = "refunded"


class EscrowError(Exception):
    """Base class for a rejected transition attempt."""
    pass


class BindingMismatch(EscrowError):
    pass


class ProofRejected(EscrowError):
    pass


class MalformedPreimage(EscrowError):
    pass


class OutputMismatch(EscrowError):
    pass


class BadSignature(EscrowError):
    pass


class InvalidLockField(EscrowError):
    pass


class PrematureRefund(InvalidLockField):
    pass


# ==============================================================================
# Settle
# ==============================================================================


def expected_settle_outputs(
    params: BountyParameters,
    qb: ECPoint,
    nonce: int,
    ew: tuple[int, ...],
    ledger: Ledger | None = None,
) -> bytes:
    """
    The exact serialized outputs a settle transaction must carry:
    the reward paid to ``qb``'s P2PKH, then the zero-value disclosure.
    """
    ledger = ledger or BitcoinLedger()
    disclosure = canonical_bytes(params.ed_nonce, params.ed, params.qa, qb, nonce, ew)
    pay = ledger.build_output(ledger.build_p2pkh_script(hash160(encode_point(qb))), params.reward)
    publish = ledger.build_output(ledger.build_data_script(disclosure), 0)
    return pay + publish


def settle(
    params: BountyParameters,
    attempt: SettleAttempt,
    verifier: ProofVerifier,
    ledger: Ledger | None = None,
) -> EscrowState:
    """
    Validate a settle attempt.

    Returns:
        EscrowState.SETTLED if every check passes.

    Raises:
        BindingMismatch, ProofRejected, MalformedPreimage, OutputMismatch
    """
    ledger = ledger or BitcoinLedger()

    try:
        binding = canonical_bytes(
            params.ed_nonce, params.ed, params.qa, attempt.qb, attempt.nonce, attempt.ew
        )
    except BindingError as e:
        _reject("settle", BindingMismatch(f"Cannot lay out committed values: {e}"))
    if sha256(binding) != attempt.hpub:
        _reject("settle", BindingMismatch("Hpub does not match the committed values"))

    public_inputs = split_hpub(attempt.hpub)
    if not verifier.verify(public_inputs, attempt.proof, params.vk):
        _reject("settle", ProofRejected("Proof verification failed"))

    if not ledger.check_preimage(attempt.preimage):
        _reject("settle", MalformedPreimage("Spend preimage is malformed"))

    expected = expected_settle_outputs(params, attempt.qb, attempt.nonce, attempt.ew, ledger)
    if hash256(expected) != ledger.outputs_digest(attempt.preimage):
        _reject("settle", OutputMismatch(
            "Transaction outputs are not [reward to Qb, disclosure] in that order"
        ))

    logger.debug(f"Settle accepted: reward {params.reward} to {attempt.qb.hex()[:18]}...")
    return EscrowState.SETTLED


# ==============================================================================
# Refund
# ==============================================================================


def refund(
    params: BountyParameters,
    attempt: RefundAttempt,
    ledger: Ledger | None = None,
) -> EscrowState:
    """
    Validate a refund attempt.

    Returns:
        EscrowState.REFUNDED if every check passes.

    Raises:
        BadSignature, MalformedPreimage, InvalidLockField, PrematureRefund
    """
    ledger = ledger or BitcoinLedger()

    if not verify_preimage_signature(attempt.signature, params.qa, attempt.preimage):
        _reject("refund", BadSignature("Signature does not verify against the buyer key"))

    if not ledger.check_preimage(attempt.preimage):
        _reject("refund", MalformedPreimage("Spend preimage is malformed"))

    sequence = ledger.sequence(attempt.preimage)
    lock_time = ledger.lock_time(attempt.preimage)
    if sequence >= SEQUENCE_FINAL:
        _reject("refund", InvalidLockField(
            f"Sequence 0x{sequence:08x} is final; lock time would be ignored"
        ))
    if lock_time >= LOCKTIME_THRESHOLD:
        _reject("refund", InvalidLockField(
            f"Lock time {lock_time} is a timestamp, expected a block height"
        ))
    if lock_time < params.expiration_height:
        _reject("refund", PrematureRefund(
            f"Lock time {lock_time} is before expiration height {params.expiration_height}"
        ))

    logger.debug(f"Refund accepted at lock time {lock_time}")
    return EscrowState.REFUNDED


def _reject(transition: str, error: EscrowError) -> NoReturn:
    logger.info(f"{transition} rejected: {type(error).__name__}: {error}")
    raise error


# ==============================================================================
# Escrow
# ==============================================================================


class Escrow:
    """
    Convenience wrapper binding parameters to their collaborators.

    Holds no mutable state; every call is a fresh evaluation.

    Usage:
        escrow = Escrow(params, verifier=Groth16Verifier())
        escrow.apply(settle_attempt)   # -> EscrowState.SETTLED or raises
    """

    def __init__(
        self,
        params: BountyParameters,
        verifier: ProofVerifier,
        ledger: Ledger | None = None,
    ) -> None:
        self.params = params
        self.verifier = verifier
        self.ledger = ledger or BitcoinLedger()

    def settle(self, attempt: SettleAttempt) -> EscrowState:
        return settle(self.params, attempt, self.verifier, self.ledger)

    def refund(self, attempt: RefundAttempt) -> EscrowState:
        return refund(self.params, attempt, self.ledger)

    def apply(self, attempt: SettleAttempt | RefundAttempt) -> EscrowState:
        if isinstance(attempt, SettleAttempt):
            return self.settle(attempt)
        if isinstance(attempt, RefundAttempt):
            return self.refund(attempt)
        raise TypeError(f"Unknown attempt type: {type(attempt).__name__}")
