from typing import Any

from pydantic import BaseModel, Field

from zk_bounty.core.models import BountyParameters
from zk_bounty.crypto.point import ECPoint, decode_point


def point_from_hex(value: str) -> ECPoint:
    return decode_point(bytes.fromhex(value))


class BountyParametersIn(BaseModel):
    """Escrow parameters as submitted over the API."""

    qa: str = Field(..., description="Buyer public key, 65-byte uncompressed hex")
    ed: list[int] = Field(..., description="Encrypted data, 4 field elements")
    ed_nonce: int = Field(..., description="Nonce the data was encrypted under")
    vk: dict[str, Any] = Field(default_factory=dict, description="Groth16 verifying key (snarkjs JSON)")
    reward: int = Field(..., description="Reward in satoshis")
    expiration_height: int = Field(..., description="Height after which the buyer may refund")

    def to_params(self) -> BountyParameters:
        return BountyParameters(
            qa=point_from_hex(self.qa),
            ed=tuple(self.ed),
            ed_nonce=self.ed_nonce,
            vk=self.vk,
            reward=self.reward,
            expiration_height=self.expiration_height,
        )


class BindingRequest(BaseModel):
    """Values to commit to in the public-input binding."""

    ed_nonce: int
    ed: list[int]
    qa: str = Field(..., description="65-byte uncompressed hex")
    qb: str = Field(..., description="65-byte uncompressed hex")
    nonce: int
    ew: list[int]


class BindingResponse(BaseModel):
    canonical_hex: str = Field(..., description="The canonical byte string that is hashed")
    hpub: str = Field(..., description="SHA-256 of the canonical bytes (hex)")
    public_inputs: list[str] = Field(..., description="The two 128-bit limbs, decimal")
    script_numbers: list[str] = Field(..., description="Each limb as a 17-byte script number (hex)")


class DisclosureRequest(BaseModel):
    script_hex: str = Field(..., description="Output script of the settle transaction's data output")


class DisclosureResponse(BaseModel):
    ed_nonce: int
    ed: list[int]
    qa: str
    qb: str
    nonce: int
    ew: list[int]


class SettleRequest(BaseModel):
    params: BountyParametersIn
    qb: str = Field(..., description="Seller public key, 65-byte uncompressed hex")
    ew: list[int]
    hpub: str = Field(..., description="32-byte binding digest (hex)")
    nonce: int
    proof: dict[str, Any] = Field(..., description="Groth16 proof (snarkjs JSON)")
    preimage: str = Field(..., description="Spend preimage (hex)")


class RefundRequest(BaseModel):
    params: BountyParametersIn
    signature: str = Field(..., description="DER signature plus sighash byte (hex)")
    preimage: str = Field(..., description="Spend preimage (hex)")


class TransitionResponse(BaseModel):
    state: str = Field(..., description="Resulting escrow state")


class RecoverRequest(BaseModel):
    """The buyer's view of a confirmed settle: their bounty, their key, the published output."""

    params: BountyParametersIn
    buyer_secret: str = Field(..., description="Buyer's 32-byte secret key (hex)")
    script_hex: str = Field(..., description="Output script of the settle transaction's data output")


class RecoverResponse(BaseModel):
    w: list[int] = Field(..., description="Recovered data key")
    d: list[int] = Field(..., description="Decrypted data, data_length field elements")
