"""
Buyer side of the exchange.

The buyer holds ``ed = Enc(d; key=w, nonce=edNonce)`` without ``w`` and
funds a bounty keyed to Qa = da·G. After a settle transaction confirms,
the buyer reads the disclosure output, recomputes the shared point
Qs = da·Qb, decrypts ``ew`` to get ``w`` and finally decrypts ``ed``.
If nobody settles before the expiration height, the buyer signs a refund.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from zk_bounty.core.ledger import SEQUENCE_FINAL, PreimageBuilder, build_p2pkh_script
from zk_bounty.core.models import BountyParameters, RefundAttempt
from zk_bounty.crypto.cipher import KeyedCipher, PoseidonCipher
from zk_bounty.crypto.hashes import hash160
from zk_bounty.crypto.point import encode_point, generator_mult, scalar_mult
from zk_bounty.crypto.signature import sign_preimage
from zk_bounty.zk.binding import Disclosure, parse_canonical_bytes
from zk_bounty.zk.relation import KEY_ELEMENTS, derive_witness_key

logger = logging.getLogger("zk_bounty.buyer")


class RecoveryError(ValueError):
    """Raised when a disclosure does not belong to the buyer's bounty."""
    pass


def encrypt_data(
    d: Sequence[int],
    w: Sequence[int],
    ed_nonce: int,
    cipher: KeyedCipher | None = None,
) -> tuple[int, ...]:
    """ed = Enc(d; key=w, nonce=ed_nonce)."""
    cipher = cipher or PoseidonCipher()
    return tuple(cipher.encrypt(list(d), list(w), ed_nonce))


def create_bounty(
    buyer_secret: int,
    ed: Sequence[int],
    ed_nonce: int,
    vk: Any,
    reward: int,
    expiration_height: int,
) -> BountyParameters:
    """Build the escrow parameters for a bounty on ``ed``."""
    return BountyParameters(
        qa=generator_mult(buyer_secret),
        ed=tuple(ed),
        ed_nonce=ed_nonce,
        vk=vk,
        reward=reward,
        expiration_height=expiration_height,
    )


def build_refund(
    params: BountyParameters,
    buyer_secret: int,
    lock_time: int,
    fee: int = 0,
    sequence: int = SEQUENCE_FINAL - 1,
    outpoint: bytes = b"\x00" * 36,
    script_code: bytes = b"",
) -> RefundAttempt:
    """
    Sign a refund paying ``reward - fee`` back to the buyer's own P2PKH.

    The escrow does not check the destination; it is built here for the
    buyer's benefit only.
    """
    pkh = hash160(encode_point(params.qa))
    preimage = (
        PreimageBuilder(outpoint=outpoint, script_code=script_code, amount=params.reward)
        .add_output(build_p2pkh_script(pkh), params.reward - fee)
        .with_sequence(sequence)
        .with_lock_time(lock_time)
        .build()
    )
    return RefundAttempt(signature=sign_preimage(buyer_secret, preimage), preimage=preimage)


def recover_key(
    params: BountyParameters,
    buyer_secret: int,
    disclosure: Disclosure | bytes,
    cipher: KeyedCipher | None = None,
) -> tuple[int, ...]:
    """
    Recover ``w`` from a published disclosure.

    Raises:
        RecoveryError: if the disclosure commits to another bounty.
        DecryptionError: if ``ew`` does not authenticate under da·Qb.
    """
    cipher = cipher or PoseidonCipher()
    if isinstance(disclosure, bytes):
        disclosure = parse_canonical_bytes(disclosure)
    if disclosure.qa != params.qa or tuple(disclosure.ed) != tuple(params.ed):
        raise RecoveryError("Disclosure was published for a different bounty")
    if disclosure.ed_nonce != params.ed_nonce:
        raise RecoveryError("Disclosure data nonce does not match the bounty")
    qs = scalar_mult(disclosure.qb, buyer_secret)
    w = cipher.decrypt(list(disclosure.ew), derive_witness_key(qs), disclosure.nonce, KEY_ELEMENTS)
    logger.info("Recovered data key from settle disclosure")
    return tuple(w)


def recover_data(
    params: BountyParameters,
    w: Sequence[int],
    data_length: int,
    cipher: KeyedCipher | None = None,
) -> tuple[int, ...]:
    """Decrypt the bounty's ``ed`` with a recovered key."""
    cipher = cipher or PoseidonCipher()
    return tuple(cipher.decrypt(list(params.ed), list(w), params.ed_nonce, data_length))
