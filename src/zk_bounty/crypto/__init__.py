"""
zk_bounty.crypto — primitives the exchange is built from.

Provides:
- sha256 / hash256 / hash160
- Fixed four-limb integers and bit decomposition
- secp256k1 points in limb form and the 65-byte point codec
- Poseidon sponge encryption over the BN254 scalar field
- ECDSA signatures over spending preimages
"""

from zk_bounty.crypto.cipher import (
    FIELD_MODULUS,
    DecryptionError,
    KeyedCipher,
    PoseidonCipher,
)
from zk_bounty.crypto.hashes import hash160, hash256, sha256
from zk_bounty.crypto.limbs import Limbs, LimbRangeError, from_bits, to_bits
from zk_bounty.crypto.point import (
    GENERATOR,
    ECPoint,
    PointError,
    Secp256k1Multiplier,
    decode_point,
    encode_point,
    generator_mult,
    is_on_curve,
    scalar_mult,
)
from zk_bounty.crypto.signature import sign_preimage, verify_preimage_signature

__all__ = [
    # Hashes
    "sha256",
    "hash256",
    "hash160",
    # Limbs
    "Limbs",
    "LimbRangeError",
    "to_bits",
    "from_bits",
    # Points
    "ECPoint",
    "GENERATOR",
    "PointError",
    "Secp256k1Multiplier",
    "decode_point",
    "encode_point",
    "generator_mult",
    "is_on_curve",
    "scalar_mult",
    # Cipher
    "FIELD_MODULUS",
    "DecryptionError",
    "KeyedCipher",
    "PoseidonCipher",
    # Signatures
    "sign_preimage",
    "verify_preimage_signature",
]
