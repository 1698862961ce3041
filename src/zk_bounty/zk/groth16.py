"""
Groth16 verifier over BN254, for snarkjs-style JSON artifacts.

Verification equation, checked as one product in GT:

    e(A, B) · e(-alpha1, beta2) · e(-VK_x, gamma2) · e(-C, delta2) == 1

    VK_x = IC[0] + Σ inputs[i] · IC[i+1]

Verifying key layout (decimal strings or ints):
    {"vk_alpha_1": [x, y], "vk_beta_2": [[x0, x1], [y0, y1]],
     "vk_gamma_2": ..., "vk_delta_2": ..., "IC": [[x, y], ...]}

Proof layout:
    {"pi_a": [x, y], "pi_b": [[x0, x1], [y0, y1]], "pi_c": [x, y]}

Malformed artifacts, off-curve points and arity mismatches all verify as
False; this verifier never raises for untrusted input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    add,
    b,
    b2,
    curve_order,
    final_exponentiate,
    is_on_curve,
    multiply,
    neg,
    pairing,
)

from zk_bounty.zk.prover import Proof

logger = logging.getLogger("zk_bounty.groth16")


@dataclass(frozen=True)
class VerifyingKey:
    alpha1: Any
    beta2: Any
    gamma2: Any
    delta2: Any
    ic: tuple[Any, ...]


@dataclass(frozen=True)
class ProofPoints:
    a: Any
    b: Any
    c: Any


def _int(z: int | str) -> int:
    if isinstance(z, int):
        return z
    s = str(z).strip().lower()
    return int(s, 16) if s.startswith("0x") else int(s)


def _g1(coords: Sequence[int | str]) -> Any:
    x, y = _int(coords[0]), _int(coords[1])
    if x == 0 and y == 0:
        return (FQ(1), FQ(1), FQ(0))
    point = (FQ(x), FQ(y), FQ(1))
    if not is_on_curve(point, b):
        raise ValueError("G1 point not on curve")
    return point


def _g2(coords: Sequence[Sequence[int | str]]) -> Any:
    (x0, x1), (y0, y1) = coords[0], coords[1]
    xs = [_int(x0), _int(x1)]
    ys = [_int(y0), _int(y1)]
    if not any(xs) and not any(ys):
        return (FQ2([1, 0]), FQ2([1, 0]), FQ2([0, 0]))
    point = (FQ2(xs), FQ2(ys), FQ2([1, 0]))
    if not is_on_curve(point, b2):
        raise ValueError("G2 point not on curve")
    return point


def load_vk(vk_json: Mapping[str, Any]) -> VerifyingKey:
    """Parse a snarkjs verifying key."""
    return VerifyingKey(
        alpha1=_g1(vk_json["vk_alpha_1"]),
        beta2=_g2(vk_json["vk_beta_2"]),
        gamma2=_g2(vk_json["vk_gamma_2"]),
        delta2=_g2(vk_json["vk_delta_2"]),
        ic=tuple(_g1(p) for p in vk_json["IC"]),
    )


def load_proof(proof_json: Mapping[str, Any]) -> ProofPoints:
    """Parse a snarkjs proof."""
    return ProofPoints(
        a=_g1(proof_json["pi_a"]),
        b=_g2(proof_json["pi_b"]),
        c=_g1(proof_json["pi_c"]),
    )


def _vk_x(ic: Sequence[Any], inputs: Sequence[int]) -> Any:
    if len(ic) != len(inputs) + 1:
        raise ValueError(f"IC length {len(ic)} != 1 + {len(inputs)} public inputs")
    acc = ic[0]
    for point, value in zip(ic[1:], inputs):
        scalar = value % curve_order
        if scalar:
            acc = add(acc, multiply(point, scalar))
    return acc


def verify_groth16(
    vk_json: Mapping[str, Any],
    proof_json: Mapping[str, Any],
    public_inputs: Sequence[int],
) -> bool:
    """Check a Groth16 proof; False on any failure."""
    try:
        vk = load_vk(vk_json)
        pf = load_proof(proof_json)
        vkx = _vk_x(vk.ic, public_inputs)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.debug(f"Rejecting malformed Groth16 artifact: {e}")
        return False

    pairs = [
        (pf.b, pf.a),
        (vk.beta2, neg(vk.alpha1)),
        (vk.gamma2, neg(vkx)),
        (vk.delta2, neg(pf.c)),
    ]
    acc = FQ12.one()
    for q, p in pairs:
        acc = acc * pairing(q, p, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()


class Groth16Verifier:
    """ProofVerifier for snarkjs-style Groth16 artifacts."""

    def verify(self, public_inputs: tuple[int, int], proof: Proof, vk: Any) -> bool:
        if proof.system != "groth16" or not isinstance(vk, Mapping):
            return False
        return verify_groth16(vk, proof.payload, list(public_inputs))
