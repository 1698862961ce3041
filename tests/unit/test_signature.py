"""
Unit tests for zk_bounty.crypto.signature — DER signatures over preimages.
"""

import pytest

from zk_bounty.core.ledger import PreimageBuilder
from zk_bounty.crypto.point import generator_mult
from zk_bounty.crypto.signature import sign_preimage, verify_preimage_signature

SECRET = 0xC0FFEE
PUBKEY = generator_mult(SECRET)


@pytest.fixture
def preimage():
    return PreimageBuilder(amount=10_000).with_lock_time(700_000).build()


class TestSignature:

    def test_sign_then_verify(self, preimage):
        sig = sign_preimage(SECRET, preimage)
        assert sig[0] == 0x30
        assert sig[-1] == 0x41
        assert verify_preimage_signature(sig, PUBKEY, preimage)

    def test_deterministic(self, preimage):
        assert sign_preimage(SECRET, preimage) == sign_preimage(SECRET, preimage)

    def test_wrong_key(self, preimage):
        sig = sign_preimage(SECRET, preimage)
        assert not verify_preimage_signature(sig, generator_mult(SECRET + 1), preimage)

    def test_other_preimage(self, preimage):
        sig = sign_preimage(SECRET, preimage)
        other = PreimageBuilder(amount=10_000).with_lock_time(700_001).build()
        assert not verify_preimage_signature(sig, PUBKEY, other)

    def test_sighash_byte_must_match_preimage(self, preimage):
        sig = sign_preimage(SECRET, preimage, sighash_type=0x43)
        assert not verify_preimage_signature(sig, PUBKEY, preimage)

    def test_garbage_signature(self, preimage):
        assert not verify_preimage_signature(b"\x30" + b"\x00" * 10 + b"\x41", PUBKEY, preimage)

    def test_empty_signature(self, preimage):
        assert not verify_preimage_signature(b"", PUBKEY, preimage)

    def test_rejects_out_of_range_secret(self, preimage):
        with pytest.raises(ValueError):
            sign_preimage(0, preimage)
