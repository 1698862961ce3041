"""
Poseidon sponge encryption over the BN254 scalar field.

This is the keyed-encryption primitive shared by both halves of the
exchange: the buyer's data blob ``ed`` is ``Enc(d; key=w, nonce=edNonce)``
and the seller's disclosed key ``ew`` is ``Enc(w; key=f(Qs), nonce)``.

Construction (duplex sponge, width t=4, rate 3, capacity 1):

    state = [0, k0, k1, nonce + len·2^128]
    for each 3-element chunk m of the zero-padded message:
        state = P(state)
        state[1..3] += m          (ciphertext chunk = state[1..3])
    state = P(state)
    tag = state[1]

    ciphertext = chunks ‖ tag     (length 3·ceil(len/3) + 1)

Decryption replays the same schedule, subtracts the keystream, overwrites
the rate with the ciphertext and checks both the tag and the zero padding.
A 2-element key and a 3-element payload therefore both encrypt to exactly
four field elements.

The permutation uses x^5 S-boxes, 8 full and 56 partial rounds, a Cauchy
MDS matrix and round constants expanded from SHA-256 over a fixed domain
string, so prover and verifier derive identical parameters without any
external file.

References:
    [GKRRS21] Grassi et al., "Poseidon: A New Hash Function for
              Zero-Knowledge Proof Systems", USENIX Security 2021.
    [KG21]    Khovratovich, "Encryption with Poseidon", 2021.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Protocol, Sequence

# BN254 scalar field order r
FIELD_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617

KEY_SIZE = 2
RATE = 3
NONCE_BITS = 128

_DOMAIN = b"zk-bounty/poseidon-encryption/bn254/t4"


class DecryptionError(ValueError):
    """Raised when a ciphertext fails authentication or padding checks."""
    pass


# ==============================================================================
# Permutation parameters
# ==============================================================================


@dataclass(frozen=True)
class PoseidonParams:
    t: int
    full_rounds: int
    partial_rounds: int
    alpha: int
    mds: tuple[tuple[int, ...], ...]
    round_constants: tuple[tuple[int, ...], ...]


def _inverse(value: int) -> int:
    return pow(value, FIELD_MODULUS - 2, FIELD_MODULUS)


def derive_params(t: int = 4, full_rounds: int = 8, partial_rounds: int = 56) -> PoseidonParams:
    """Deterministically derive a parameter set for width ``t``."""
    # Cauchy matrix 1/(x_i + y_j) with disjoint x, y is always MDS
    mds = tuple(
        tuple(_inverse(i + (t + j)) for j in range(t))
        for i in range(t)
    )
    rc = []
    for r in range(full_rounds + partial_rounds):
        row = []
        for i in range(t):
            h = hashlib.sha256(_DOMAIN + r.to_bytes(2, "big") + i.to_bytes(2, "big")).digest()
            row.append(int.from_bytes(h, "big") % FIELD_MODULUS)
        rc.append(tuple(row))
    return PoseidonParams(
        t=t,
        full_rounds=full_rounds,
        partial_rounds=partial_rounds,
        alpha=5,
        mds=mds,
        round_constants=tuple(rc),
    )


DEFAULT_PARAMS = derive_params()


def _sbox(x: int) -> int:
    x2 = x * x % FIELD_MODULUS
    x4 = x2 * x2 % FIELD_MODULUS
    return x * x4 % FIELD_MODULUS


def _apply_mds(state: list[int], mds: tuple[tuple[int, ...], ...]) -> list[int]:
    return [
        sum(row[j] * state[j] for j in range(len(state))) % FIELD_MODULUS
        for row in mds
    ]


def poseidon_permute(state: Sequence[int], params: PoseidonParams = DEFAULT_PARAMS) -> list[int]:
    """
    Poseidon permutation.

    Round schedule: R_F/2 full rounds, R_P partial rounds (S-box on the
    first element only), then R_F/2 full rounds.
    """
    if len(state) != params.t:
        raise ValueError(f"state length {len(state)} != t={params.t}")
    x = [v % FIELD_MODULUS for v in state]
    half = params.full_rounds // 2
    total = params.full_rounds + params.partial_rounds
    for r in range(total):
        rc = params.round_constants[r]
        x = [(x[i] + rc[i]) % FIELD_MODULUS for i in range(params.t)]
        if r < half or r >= half + params.partial_rounds:
            x = [_sbox(v) for v in x]
        else:
            x[0] = _sbox(x[0])
        x = _apply_mds(x, params.mds)
    return x


# ==============================================================================
# Sponge encryption
# ==============================================================================


def _check_inputs(key: Sequence[int], nonce: int, elements: Sequence[int], label: str) -> None:
    if len(key) != KEY_SIZE:
        raise ValueError(f"key must have {KEY_SIZE} field elements, got {len(key)}")
    for k in key:
        if not 0 <= k < FIELD_MODULUS:
            raise ValueError("key element out of field range")
    if not 0 <= nonce < (1 << NONCE_BITS):
        raise ValueError(f"nonce must be below 2^{NONCE_BITS}")
    for v in elements:
        if not 0 <= v < FIELD_MODULUS:
            raise ValueError(f"{label} element out of field range")


def ciphertext_length(plaintext_length: int) -> int:
    chunks = -(-plaintext_length // RATE)
    return chunks * RATE + 1


def _initial_state(key: Sequence[int], nonce: int, length: int) -> list[int]:
    return [0, key[0], key[1], (nonce + (length << NONCE_BITS)) % FIELD_MODULUS]


def encrypt(
    plaintext: Sequence[int],
    key: Sequence[int],
    nonce: int,
    params: PoseidonParams = DEFAULT_PARAMS,
) -> list[int]:
    """
    Encrypt a list of field elements.

    Returns:
        ciphertext of length 3·ceil(len/3) + 1, tag last.
    """
    _check_inputs(key, nonce, plaintext, "plaintext")
    length = len(plaintext)
    padded = list(plaintext) + [0] * (ciphertext_length(length) - 1 - length)
    state = _initial_state(key, nonce, length)
    out: list[int] = []
    for i in range(0, len(padded), RATE):
        state = poseidon_permute(state, params)
        for j in range(RATE):
            state[j + 1] = (state[j + 1] + padded[i + j]) % FIELD_MODULUS
            out.append(state[j + 1])
    state = poseidon_permute(state, params)
    out.append(state[1])
    return out


def decrypt(
    ciphertext: Sequence[int],
    key: Sequence[int],
    nonce: int,
    length: int,
    params: PoseidonParams = DEFAULT_PARAMS,
) -> list[int]:
    """
    Decrypt and authenticate ``length`` field elements.

    Raises:
        DecryptionError: on a length mismatch, bad padding or bad tag.
    """
    _check_inputs(key, nonce, ciphertext, "ciphertext")
    if len(ciphertext) != ciphertext_length(length):
        raise DecryptionError(
            f"ciphertext has {len(ciphertext)} elements, expected {ciphertext_length(length)}"
        )
    state = _initial_state(key, nonce, length)
    message: list[int] = []
    body = ciphertext[:-1]
    for i in range(0, len(body), RATE):
        state = poseidon_permute(state, params)
        for j in range(RATE):
            message.append((body[i + j] - state[j + 1]) % FIELD_MODULUS)
            state[j + 1] = body[i + j]
    if any(message[length:]):
        raise DecryptionError("non-zero padding")
    state = poseidon_permute(state, params)
    if state[1] != ciphertext[-1]:
        raise DecryptionError("authentication tag mismatch")
    return message[:length]


# ==============================================================================
# Keyed-encryption capability
# ==============================================================================


class KeyedCipher(Protocol):
    """The keyed-encryption primitive as seen by the relation and the exchange."""

    def encrypt(self, plaintext: Sequence[int], key: Sequence[int], nonce: int) -> list[int]: ...

    def decrypt(
        self, ciphertext: Sequence[int], key: Sequence[int], nonce: int, length: int
    ) -> list[int]: ...

    def check(
        self, key: Sequence[int], nonce: int, ciphertext: Sequence[int], plaintext: Sequence[int]
    ) -> bool: ...


class PoseidonCipher:
    """KeyedCipher backed by Poseidon sponge encryption."""

    def __init__(self, params: PoseidonParams = DEFAULT_PARAMS) -> None:
        self.params = params

    def encrypt(self, plaintext: Sequence[int], key: Sequence[int], nonce: int) -> list[int]:
        return encrypt(plaintext, key, nonce, self.params)

    def decrypt(
        self, ciphertext: Sequence[int], key: Sequence[int], nonce: int, length: int
    ) -> list[int]:
        return decrypt(ciphertext, key, nonce, length, self.params)

    def check(
        self, key: Sequence[int], nonce: int, ciphertext: Sequence[int], plaintext: Sequence[int]
    ) -> bool:
        """True iff ``ciphertext`` authenticates and decrypts to ``plaintext``."""
        try:
            return self.decrypt(ciphertext, key, nonce, len(plaintext)) == list(plaintext)
        except ValueError:
            return False
