"""zk module init"""
from zk_bounty.zk.binding import (
    BindingError,
    Disclosure,
    canonical_bytes,
    compute_hpub,
    parse_canonical_bytes,
    split_hpub,
)
from zk_bounty.zk.prover import Proof, ProofVerifier, ProvingBackend, prove
from zk_bounty.zk.relation import (
    BountyRelation,
    Statement,
    UnsatisfiedRelation,
    Witness,
    derive_witness_key,
)

__all__ = [
    "BindingError",
    "BountyRelation",
    "Disclosure",
    "Proof",
    "ProofVerifier",
    "ProvingBackend",
    "Statement",
    "UnsatisfiedRelation",
    "Witness",
    "canonical_bytes",
    "compute_hpub",
    "derive_witness_key",
    "parse_canonical_bytes",
    "prove",
    "split_hpub",
]
