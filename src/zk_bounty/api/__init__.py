"""
API module for zk-bounty.

Provides FastAPI routes and models for binding computation, disclosure
decoding and escrow-transition validation.
"""

from zk_bounty.api.models import (
    BindingRequest,
    BindingResponse,
    BountyParametersIn,
    DisclosureRequest,
    DisclosureResponse,
    RecoverRequest,
    RecoverResponse,
    RefundRequest,
    SettleRequest,
    TransitionResponse,
)

__all__ = [
    "BindingRequest",
    "BindingResponse",
    "BountyParametersIn",
    "DisclosureRequest",
    "DisclosureResponse",
    "RecoverRequest",
    "RecoverResponse",
    "RefundRequest",
    "SettleRequest",
    "TransitionResponse",
]
