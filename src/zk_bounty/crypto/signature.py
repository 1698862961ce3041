"""
ECDSA signatures over a spending preimage.

A ledger signature is a DER-encoded ECDSA signature over
``hash256(preimage)`` followed by one sighash-type byte. Verification
rejects a signature whose trailing byte disagrees with the sighash type
committed inside the preimage itself (its last four bytes).
"""

from __future__ import annotations

import hashlib
import logging

import ecdsa
from ecdsa.der import UnexpectedDER
from ecdsa.util import sigdecode_der, sigencode_der_canonize

from zk_bounty.crypto.hashes import hash256
from zk_bounty.crypto.point import SECP256K1_N, ECPoint, pubkey_body

logger = logging.getLogger("zk_bounty.signature")

SIGHASH_ALL_FORKID = 0x41


def sign_preimage(secret: int, preimage: bytes, sighash_type: int = SIGHASH_ALL_FORKID) -> bytes:
    """
    Sign a preimage with a secp256k1 secret exponent.

    Returns:
        DER signature (low-S) followed by the sighash-type byte.
    """
    if secret <= 0 or secret >= SECP256K1_N:
        raise ValueError(f"secret must be in [1, N-1], got {secret}")
    key = ecdsa.SigningKey.from_secret_exponent(secret, curve=ecdsa.SECP256k1)
    der = key.sign_digest_deterministic(
        hash256(preimage),
        hashfunc=hashlib.sha256,
        sigencode=sigencode_der_canonize,
    )
    return der + bytes([sighash_type & 0xFF])


def verify_preimage_signature(signature: bytes, pubkey: ECPoint, preimage: bytes) -> bool:
    """
    Check a ledger signature by ``pubkey`` over ``preimage``.

    Returns:
        True if the DER signature verifies and its sighash byte matches the
        preimage's sighash type, False otherwise.
    """
    if len(signature) < 9 or len(preimage) < 4:
        return False
    der, sighash_byte = signature[:-1], signature[-1]
    if sighash_byte != preimage[-4]:
        return False
    try:
        vk = ecdsa.VerifyingKey.from_string(pubkey_body(pubkey), curve=ecdsa.SECP256k1)
        return vk.verify_digest(der, hash256(preimage), sigdecode=sigdecode_der)
    except (ecdsa.BadSignatureError, ecdsa.BadDigestError, ecdsa.MalformedPointError, UnexpectedDER) as e:
        logger.debug(f"Signature rejected: {e}")
        return False
