"""
Proof artifacts and the prover/verifier capabilities.

The SNARK itself (setup, proving, pairing checks) is an external concern.
This module only fixes the shapes that the exchange passes around:

- ``Proof``: an opaque, immutable artifact produced once by a prover and
  consumed once by a settle attempt.
- ``ProvingBackend``: turns (public inputs, witness) into a Proof.
- ``ProofVerifier``: the escrow's only view of the proof system,
  ``verify(public_inputs, proof, vk) -> bool``.

``prove`` is the seller-side entry point: it refuses to call the backend
for a witness that does not satisfy the relation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from zk_bounty.zk.relation import BountyRelation, Statement, UnsatisfiedRelation, Witness

logger = logging.getLogger("zk_bounty.prover")


@dataclass(frozen=True)
class Proof:
    """
    An opaque proof.

    Attributes:
        payload: proof-system specific data (for Groth16, the snarkjs
            ``pi_a`` / ``pi_b`` / ``pi_c`` mapping).
        system: name of the proof system that produced it.
    """
    payload: Mapping[str, Any] = field(default_factory=dict)
    system: str = "groth16"


class ProvingBackend(Protocol):
    def prove(self, public_inputs: tuple[int, int], witness: Witness) -> Proof: ...


class ProofVerifier(Protocol):
    def verify(self, public_inputs: tuple[int, int], proof: Proof, vk: Any) -> bool: ...


def prove(
    relation: BountyRelation,
    statement: Statement,
    witness: Witness,
    backend: ProvingBackend,
) -> Proof:
    """
    Generate a proof that ``witness`` satisfies ``relation`` for ``statement``.

    Raises:
        UnsatisfiedRelation: if any predicate fails; the backend is not called.
    """
    failed = relation.check(statement, witness)
    if failed:
        logger.info(f"Refusing to prove: failed predicates {failed}")
        raise UnsatisfiedRelation(failed)
    return backend.prove(statement.hpub, witness)
