"""core module init"""
from zk_bounty.core.escrow import (
    BadSignature,
    BindingMismatch,
    Escrow,
    EscrowError,
    EscrowState,
    InvalidLockField,
    MalformedPreimage,
    OutputMismatch,
    PrematureRefund,
    ProofRejected,
    expected_settle_outputs,
    refund,
    settle,
)
from zk_bounty.core.ledger import (
    LOCKTIME_THRESHOLD,
    SEQUENCE_FINAL,
    BitcoinLedger,
    Ledger,
    Preimage,
    PreimageBuilder,
    PreimageError,
    build_data_script,
    build_output,
    build_p2pkh_script,
)
from zk_bounty.core.models import BountyParameters, RefundAttempt, SettleAttempt
from zk_bounty.core.node import LedgerNode, LedgerNodeError

__all__ = [
    "BadSignature",
    "BindingMismatch",
    "BitcoinLedger",
    "BountyParameters",
    "Escrow",
    "EscrowError",
    "EscrowState",
    "InvalidLockField",
    "LOCKTIME_THRESHOLD",
    "Ledger",
    "LedgerNode",
    "LedgerNodeError",
    "MalformedPreimage",
    "OutputMismatch",
    "Preimage",
    "PreimageBuilder",
    "PreimageError",
    "PrematureRefund",
    "ProofRejected",
    "RefundAttempt",
    "SEQUENCE_FINAL",
    "SettleAttempt",
    "build_data_script",
    "build_output",
    "build_p2pkh_script",
    "expected_settle_outputs",
    "refund",
    "settle",
]
