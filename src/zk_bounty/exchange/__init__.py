"""
zk_bounty.exchange — buyer and seller sides of the key-for-reward exchange.
"""

from zk_bounty.exchange.buyer import (
    RecoveryError,
    build_refund,
    create_bounty,
    encrypt_data,
    recover_data,
    recover_key,
)
from zk_bounty.exchange.seller import SellerClaim, claim, generate_seller_scalar

__all__ = [
    "RecoveryError",
    "SellerClaim",
    "build_refund",
    "claim",
    "create_bounty",
    "encrypt_data",
    "generate_seller_scalar",
    "recover_data",
    "recover_key",
]
