"""
Hash primitives used by the ledger and the public-input binding.

    sha256(x)   single SHA-256
    hash256(x)  SHA-256 applied twice (transaction and sighash digests)
    hash160(x)  RIPEMD-160 of SHA-256 (public-key hashes for P2PKH)
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import RIPEMD160


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data)), 20 bytes."""
    return RIPEMD160.new(sha256(data)).digest()
