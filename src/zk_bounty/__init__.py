"""
zk-bounty: fair exchange of a decryption key for a reward, with no trusted party.

Usage:
    from zk_bounty import Escrow, BountyParameters, SettleAttempt
    from zk_bounty.exchange import claim, recover_key
"""

from zk_bounty.core.escrow import Escrow, EscrowError, EscrowState, refund, settle
from zk_bounty.core.models import BountyParameters, RefundAttempt, SettleAttempt
from zk_bounty.crypto.point import ECPoint
from zk_bounty.zk.prover import Proof
from zk_bounty.zk.relation import BountyRelation

__version__ = "0.1.0"
__all__ = [
    "BountyParameters",
    "BountyRelation",
    "ECPoint",
    "Escrow",
    "EscrowError",
    "EscrowState",
    "Proof",
    "RefundAttempt",
    "SettleAttempt",
    "refund",
    "settle",
]
