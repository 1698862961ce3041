"""
End-to-end bounty exchange, no network.

A buyer funds a bounty on encrypted data; an honest seller claims it with
a (mocked) proof; the escrow settles; the buyer reads the disclosure and
decrypts the data. A second round checks that a tampered claim and an
early refund are both turned away, and that the refund path works once
the bounty has expired.
"""

import pytest

from tests.conftest import MockBackend, MockVerifier
from zk_bounty.core.escrow import (
    BindingMismatch,
    Escrow,
    EscrowState,
    PrematureRefund,
)
from zk_bounty.core.ledger import build_data_script, parse_data_script
from zk_bounty.core.models import SettleAttempt
from zk_bounty.exchange.buyer import (
    build_refund,
    create_bounty,
    encrypt_data,
    recover_data,
    recover_key,
)
from zk_bounty.exchange.seller import claim
from zk_bounty.zk.binding import canonical_bytes

REWARD = 10_000
EXPIRATION = 700_000


@pytest.fixture
def scenario():
    buyer_secret = 0x7E57AB1E7E57AB1E7E57AB1E7E57AB1E
    w = (0x1111222233334444, 0x5555666677778888)
    d = (42, 43, 44)
    ed_nonce = 7
    params = create_bounty(
        buyer_secret=buyer_secret,
        ed=encrypt_data(d, w, ed_nonce),
        ed_nonce=ed_nonce,
        vk={"IC": []},
        reward=REWARD,
        expiration_height=EXPIRATION,
    )
    return buyer_secret, w, d, params


class TestExchange:

    def test_settle_then_recover(self, scenario):
        buyer_secret, w, d, params = scenario
        escrow = Escrow(params, verifier=MockVerifier(True))

        attempt = claim(params, w, d, MockBackend())
        assert escrow.apply(attempt) == EscrowState.SETTLED

        published = build_data_script(canonical_bytes(
            params.ed_nonce, params.ed, params.qa, attempt.qb, attempt.nonce, attempt.ew
        ))
        recovered_w = recover_key(params, buyer_secret, parse_data_script(published))
        assert recovered_w == w
        assert recover_data(params, recovered_w, len(d)) == d

    def test_corrupted_ew_is_rejected(self, scenario):
        _, w, d, params = scenario
        verifier = MockVerifier(True)
        escrow = Escrow(params, verifier=verifier)

        attempt = claim(params, w, d, MockBackend())
        tampered = SettleAttempt(
            qb=attempt.qb,
            ew=(attempt.ew[0] ^ 1, *attempt.ew[1:]),
            hpub=attempt.hpub,
            nonce=attempt.nonce,
            proof=attempt.proof,
            preimage=attempt.preimage,
        )
        with pytest.raises(BindingMismatch):
            escrow.apply(tampered)
        assert verifier.calls == []

    def test_refund_only_after_expiration(self, scenario):
        buyer_secret, _, _, params = scenario
        escrow = Escrow(params, verifier=MockVerifier(True))

        with pytest.raises(PrematureRefund):
            escrow.apply(build_refund(params, buyer_secret, lock_time=EXPIRATION - 1))
        assert escrow.apply(build_refund(params, buyer_secret, lock_time=EXPIRATION)) == EscrowState.REFUNDED
