"""
Shared fixtures: a funded bounty, an honest seller, and mock collaborators.

All fixtures are pure — no network, no proving system.
"""

from __future__ import annotations

from typing import Any

import pytest

from zk_bounty.exchange.buyer import create_bounty, encrypt_data
from zk_bounty.zk.prover import Proof

BUYER_SECRET = 0x1F3A5C7E9B2D4F6081A3C5E7092B4D6F8A1C3E5079B2D4F6A8C0E2F4B6D8A0C3
SELLER_SECRET = 0x2B4D6F8091A3C5E7F9B1D3F5071A3C5E7092B4D6F8A0C2E4061B3D5F7092B4D5
DATA_KEY = (0x0123456789ABCDEF0123456789ABCDEF, 0xFEDCBA9876543210FEDCBA9876543210)
DATA = (1111, 2222, 3333)
DATA_NONCE = 0xA5A5A5A5
WITNESS_NONCE = 0x5A5A5A5A
REWARD = 10_000
EXPIRATION = 700_000


class MockVerifier:
    """ProofVerifier returning a fixed answer and recording its calls."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple[tuple[int, int], Proof, Any]] = []

    def verify(self, public_inputs: tuple[int, int], proof: Proof, vk: Any) -> bool:
        self.calls.append((public_inputs, proof, vk))
        return self.result


class MockBackend:
    """ProvingBackend that returns a marker proof."""

    def __init__(self) -> None:
        self.calls = 0

    def prove(self, public_inputs: tuple[int, int], witness: Any) -> Proof:
        self.calls += 1
        return Proof(payload={"mock": True, "inputs": [str(v) for v in public_inputs]})


@pytest.fixture
def encrypted_data():
    return encrypt_data(DATA, DATA_KEY, DATA_NONCE)


@pytest.fixture
def params(encrypted_data):
    return create_bounty(
        buyer_secret=BUYER_SECRET,
        ed=encrypted_data,
        ed_nonce=DATA_NONCE,
        vk={"name": "test-vk"},
        reward=REWARD,
        expiration_height=EXPIRATION,
    )


@pytest.fixture
def verifier():
    return MockVerifier(True)


@pytest.fixture
def backend():
    return MockBackend()
