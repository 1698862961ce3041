"""
Core data models for the bounty escrow.
All amounts are in satoshis; heights are block heights.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zk_bounty.core.ledger import LOCKTIME_THRESHOLD
from zk_bounty.crypto.point import ECPoint
from zk_bounty.zk.binding import CIPHERTEXT_WORDS
from zk_bounty.zk.prover import Proof


class BountyParameters(BaseModel):
    """
    Escrow state written once at funding time.

    Immutable; consumed exactly once by whichever transition fires.
    """
    model_config = ConfigDict(frozen=True)

    qa: ECPoint
    ed: tuple[int, ...]
    ed_nonce: int = Field(ge=0)
    vk: Any
    reward: int = Field(gt=0)
    expiration_height: int = Field(ge=0, lt=LOCKTIME_THRESHOLD)

    @field_validator("ed")
    @classmethod
    def _check_ed(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if len(value) != CIPHERTEXT_WORDS:
            raise ValueError(f"ed must have {CIPHERTEXT_WORDS} elements, got {len(value)}")
        if any(v < 0 or v >> 256 for v in value):
            raise ValueError("ed elements must fit in 32 bytes")
        return value


class SettleAttempt(BaseModel):
    """A seller's unlocking bundle; transient, never persisted."""
    model_config = ConfigDict(frozen=True)

    qb: ECPoint
    ew: tuple[int, ...]
    hpub: bytes
    nonce: int = Field(ge=0)
    proof: Proof
    preimage: bytes


class RefundAttempt(BaseModel):
    """The buyer's refund bundle."""
    model_config = ConfigDict(frozen=True)

    signature: bytes
    preimage: bytes
