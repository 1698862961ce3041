"""
Unit tests for zk_bounty.exchange — seller claims and buyer recovery.
"""

import dataclasses

import pytest

from tests.conftest import (
    BUYER_SECRET,
    DATA,
    DATA_KEY,
    DATA_NONCE,
    REWARD,
    SELLER_SECRET,
    WITNESS_NONCE,
)
from zk_bounty.core.ledger import Preimage, build_data_script, parse_data_script
from zk_bounty.crypto.cipher import DecryptionError
from zk_bounty.crypto.point import SECP256K1_N, generator_mult, scalar_mult
from zk_bounty.exchange.buyer import (
    RecoveryError,
    build_refund,
    create_bounty,
    recover_data,
    recover_key,
)
from zk_bounty.exchange.seller import SellerClaim, claim, generate_seller_scalar
from zk_bounty.zk.binding import Disclosure, canonical_bytes
from zk_bounty.zk.relation import UnsatisfiedRelation


def _disclosure(params, prepared) -> Disclosure:
    return Disclosure(
        ed_nonce=params.ed_nonce,
        ed=params.ed,
        qa=params.qa,
        qb=prepared.qb,
        nonce=prepared.nonce,
        ew=prepared.ew,
    )


class TestCreateBounty:

    def test_parameters(self, params, encrypted_data):
        assert params.qa == generator_mult(BUYER_SECRET)
        assert params.ed == encrypted_data
        assert params.ed_nonce == DATA_NONCE
        assert params.reward == REWARD

    def test_rejects_zero_reward(self, encrypted_data):
        with pytest.raises(ValueError):
            create_bounty(BUYER_SECRET, encrypted_data, DATA_NONCE, {}, 0, 100)

    def test_rejects_timestamp_expiration(self, encrypted_data):
        with pytest.raises(ValueError):
            create_bounty(BUYER_SECRET, encrypted_data, DATA_NONCE, {}, 1, 500_000_000)

    def test_rejects_wrong_ciphertext_size(self):
        with pytest.raises(ValueError):
            create_bounty(BUYER_SECRET, (1, 2, 3), DATA_NONCE, {}, 1, 100)


class TestSellerClaim:

    def test_shared_point_agrees_with_buyer(self, params):
        prepared = SellerClaim.prepare(params, DATA_KEY, DATA, SELLER_SECRET)
        assert prepared.qs == scalar_mult(prepared.qb, BUYER_SECRET)

    def test_random_nonce_fits(self, params):
        prepared = SellerClaim.prepare(params, DATA_KEY, DATA, SELLER_SECRET)
        assert 0 <= prepared.nonce < 1 << 128

    def test_preimage_spends_reward(self, params):
        prepared = SellerClaim.prepare(params, DATA_KEY, DATA, SELLER_SECRET, nonce=WITNESS_NONCE)
        parsed = Preimage.parse(prepared.build_preimage(params))
        assert parsed.amount == REWARD

    def test_generated_scalar_in_range(self):
        for _ in range(10):
            assert 1 <= generate_seller_scalar() < SECP256K1_N

    def test_claim_packages_attempt(self, params, backend):
        attempt = claim(params, DATA_KEY, DATA, backend, db=SELLER_SECRET, nonce=WITNESS_NONCE)
        assert backend.calls == 1
        assert attempt.qb == generator_mult(SELLER_SECRET)
        assert attempt.nonce == WITNESS_NONCE
        assert attempt.proof.payload["mock"] is True

    def test_claim_refuses_wrong_key(self, params, backend):
        with pytest.raises(UnsatisfiedRelation) as exc:
            claim(params, (DATA_KEY[0], DATA_KEY[1] + 1), DATA, backend)
        assert "decryption" in exc.value.failed
        assert backend.calls == 0


class TestRecovery:

    @pytest.fixture
    def prepared(self, params):
        return SellerClaim.prepare(params, DATA_KEY, DATA, SELLER_SECRET, nonce=WITNESS_NONCE)

    def test_recover_key_and_data(self, params, prepared):
        w = recover_key(params, BUYER_SECRET, _disclosure(params, prepared))
        assert w == DATA_KEY
        assert recover_data(params, w, len(DATA)) == DATA

    def test_recover_from_published_bytes(self, params, prepared):
        raw = canonical_bytes(
            params.ed_nonce, params.ed, params.qa, prepared.qb, prepared.nonce, prepared.ew
        )
        assert recover_key(params, BUYER_SECRET, raw) == DATA_KEY

    def test_recover_from_data_script(self, params, backend):
        attempt = claim(params, DATA_KEY, DATA, backend, db=SELLER_SECRET, nonce=WITNESS_NONCE)
        raw = canonical_bytes(
            params.ed_nonce, params.ed, params.qa, attempt.qb, attempt.nonce, attempt.ew
        )
        payload = parse_data_script(build_data_script(raw))
        assert recover_key(params, BUYER_SECRET, payload) == DATA_KEY

    def test_other_bounty(self, params, prepared):
        disclosure = dataclasses.replace(_disclosure(params, prepared), qa=generator_mult(9))
        with pytest.raises(RecoveryError):
            recover_key(params, BUYER_SECRET, disclosure)

    def test_other_data_nonce(self, params, prepared):
        disclosure = dataclasses.replace(_disclosure(params, prepared), ed_nonce=DATA_NONCE + 1)
        with pytest.raises(RecoveryError, match="nonce"):
            recover_key(params, BUYER_SECRET, disclosure)

    def test_wrong_buyer_secret(self, params, prepared):
        with pytest.raises(DecryptionError):
            recover_key(params, BUYER_SECRET + 1, _disclosure(params, prepared))

    def test_wrong_recovered_key(self, params):
        with pytest.raises(DecryptionError):
            recover_data(params, (1, 2), len(DATA))


class TestBuildRefund:

    def test_pays_buyer(self, params):
        attempt = build_refund(params, BUYER_SECRET, lock_time=800_000, fee=200)
        parsed = Preimage.parse(attempt.preimage)
        assert parsed.lock_time == 800_000
        assert parsed.sequence == 0xFFFFFFFE
        assert parsed.amount == REWARD
        assert attempt.signature[-1] == 0x41
