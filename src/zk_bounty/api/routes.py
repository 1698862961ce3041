from fastapi import APIRouter, HTTPException, Request

from zk_bounty.api.models import (
    BindingRequest,
    BindingResponse,
    DisclosureRequest,
    DisclosureResponse,
    RecoverRequest,
    RecoverResponse,
    RefundRequest,
    SettleRequest,
    TransitionResponse,
    point_from_hex,
)
from zk_bounty.config import BountyConfig
from zk_bounty.core.escrow import refund, settle
from zk_bounty.core.ledger import parse_data_script
from zk_bounty.core.models import RefundAttempt, SettleAttempt
from zk_bounty.crypto.hashes import sha256
from zk_bounty.exchange.buyer import recover_data, recover_key
from zk_bounty.zk.binding import (
    canonical_bytes,
    parse_canonical_bytes,
    script_number,
    split_hpub,
)
from zk_bounty.zk.prover import Proof

router = APIRouter(tags=["Bounty Escrow"])


def get_verifier(request: Request):
    """Dependency to retrieve the configured proof verifier from app state."""
    verifier = getattr(request.app.state, "verifier", None)
    if verifier is None:
        raise HTTPException(status_code=500, detail="proof verifier not initialized")
    return verifier


def get_config(request: Request) -> BountyConfig:
    """Dependency to retrieve the deployment config loaded at startup."""
    config = getattr(request.app.state, "config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="config not loaded")
    return config


def _disclosure_payload(script_hex: str) -> bytes:
    payload = parse_data_script(bytes.fromhex(script_hex))
    if payload is None:
        raise HTTPException(status_code=400, detail="Not an OP_FALSE OP_RETURN data script")
    return payload


@router.post("/binding", response_model=BindingResponse)
async def binding(req: BindingRequest):
    """Compute the canonical bytes, Hpub and the two public-input limbs."""
    data = canonical_bytes(
        req.ed_nonce,
        req.ed,
        point_from_hex(req.qa),
        point_from_hex(req.qb),
        req.nonce,
        req.ew,
    )
    hpub = sha256(data)
    limbs = split_hpub(hpub)
    return BindingResponse(
        canonical_hex=data.hex(),
        hpub=hpub.hex(),
        public_inputs=[str(limb) for limb in limbs],
        script_numbers=[script_number(hpub[:16]).hex(), script_number(hpub[16:]).hex()],
    )


@router.post("/disclosure/decode", response_model=DisclosureResponse)
async def decode_disclosure(req: DisclosureRequest):
    """Parse the data output a settle transaction published."""
    disclosure = parse_canonical_bytes(_disclosure_payload(req.script_hex))
    return DisclosureResponse(
        ed_nonce=disclosure.ed_nonce,
        ed=list(disclosure.ed),
        qa=disclosure.qa.hex(),
        qb=disclosure.qb.hex(),
        nonce=disclosure.nonce,
        ew=list(disclosure.ew),
    )


@router.post("/disclosure/recover", response_model=RecoverResponse)
async def recover(request: Request, req: RecoverRequest):
    """Decrypt the data key from a published disclosure, then the data itself."""
    config = get_config(request)
    params = req.params.to_params()
    w = recover_key(params, int(req.buyer_secret, 16), _disclosure_payload(req.script_hex))
    d = recover_data(params, w, config.data_length)
    return RecoverResponse(w=list(w), d=list(d))


@router.post("/escrow/settle/validate", response_model=TransitionResponse)
async def validate_settle(request: Request, req: SettleRequest):
    """Evaluate a settle attempt against the given parameters."""
    verifier = get_verifier(request)
    attempt = SettleAttempt(
        qb=point_from_hex(req.qb),
        ew=tuple(req.ew),
        hpub=bytes.fromhex(req.hpub),
        nonce=req.nonce,
        proof=Proof(payload=req.proof),
        preimage=bytes.fromhex(req.preimage),
    )
    state = settle(req.params.to_params(), attempt, verifier)
    return TransitionResponse(state=state.value)


@router.post("/escrow/refund/validate", response_model=TransitionResponse)
async def validate_refund(req: RefundRequest):
    """Evaluate a refund attempt against the given parameters."""
    attempt = RefundAttempt(
        signature=bytes.fromhex(req.signature),
        preimage=bytes.fromhex(req.preimage),
    )
    state = refund(req.params.to_params(), attempt)
    return TransitionResponse(state=state.value)
