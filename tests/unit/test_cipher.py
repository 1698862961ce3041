"""
Unit tests for zk_bounty.crypto.cipher — Poseidon sponge encryption.
"""

import pytest

from zk_bounty.crypto.cipher import (
    DEFAULT_PARAMS,
    FIELD_MODULUS,
    DecryptionError,
    PoseidonCipher,
    ciphertext_length,
    decrypt,
    derive_params,
    encrypt,
    poseidon_permute,
)

KEY = [12345, 67890]
NONCE = 99


class TestPermutation:

    def test_parameters_are_deterministic(self):
        assert derive_params() == DEFAULT_PARAMS

    def test_round_count(self):
        assert len(DEFAULT_PARAMS.round_constants) == 64

    def test_permutation_is_deterministic(self):
        assert poseidon_permute([1, 2, 3, 4]) == poseidon_permute([1, 2, 3, 4])

    def test_permutation_mixes(self):
        a = poseidon_permute([0, 0, 0, 0])
        b = poseidon_permute([0, 0, 0, 1])
        assert all(x != y for x, y in zip(a, b))

    def test_rejects_wrong_width(self):
        with pytest.raises(ValueError, match="state length"):
            poseidon_permute([1, 2, 3])


class TestEncryption:

    @pytest.mark.parametrize("n, expected", [(1, 4), (2, 4), (3, 4), (4, 7), (6, 7)])
    def test_ciphertext_length(self, n, expected):
        assert ciphertext_length(n) == expected

    def test_key_and_data_both_encrypt_to_four(self):
        """A 2-element key and 3-element data share the 4-word layout."""
        assert len(encrypt([1, 2], KEY, NONCE)) == 4
        assert len(encrypt([1, 2, 3], KEY, NONCE)) == 4

    def test_decrypt_recovers_plaintext(self):
        plaintext = [5, FIELD_MODULUS - 1, 0]
        ct = encrypt(plaintext, KEY, NONCE)
        assert decrypt(ct, KEY, NONCE, 3) == plaintext

    def test_wrong_key_fails_authentication(self):
        ct = encrypt([1, 2, 3], KEY, NONCE)
        with pytest.raises(DecryptionError):
            decrypt(ct, [12345, 67891], NONCE, 3)

    def test_wrong_nonce_fails_authentication(self):
        ct = encrypt([1, 2, 3], KEY, NONCE)
        with pytest.raises(DecryptionError):
            decrypt(ct, KEY, NONCE + 1, 3)

    def test_tampered_tag(self):
        ct = encrypt([1, 2, 3], KEY, NONCE)
        ct[-1] = (ct[-1] + 1) % FIELD_MODULUS
        with pytest.raises(DecryptionError, match="tag"):
            decrypt(ct, KEY, NONCE, 3)

    def test_length_is_bound(self):
        """A 2-element ciphertext cannot be opened as 3 elements."""
        ct = encrypt([1, 2], KEY, NONCE)
        with pytest.raises(DecryptionError):
            decrypt(ct, KEY, NONCE, 3)

    def test_length_mismatch(self):
        ct = encrypt([1, 2, 3], KEY, NONCE)
        with pytest.raises(DecryptionError, match="expected 4"):
            decrypt(ct[:3], KEY, NONCE, 3)

    def test_rejects_out_of_field_plaintext(self):
        with pytest.raises(ValueError, match="field range"):
            encrypt([FIELD_MODULUS], KEY, NONCE)

    def test_rejects_wide_nonce(self):
        with pytest.raises(ValueError, match="nonce"):
            encrypt([1], KEY, 1 << 128)

    def test_rejects_wrong_key_size(self):
        with pytest.raises(ValueError, match="key"):
            encrypt([1], [1, 2, 3], NONCE)


class TestPoseidonCipher:

    def test_check_accepts_matching_plaintext(self):
        cipher = PoseidonCipher()
        ct = cipher.encrypt([7, 8, 9], KEY, NONCE)
        assert cipher.check(KEY, NONCE, ct, [7, 8, 9])

    def test_check_rejects_other_plaintext(self):
        cipher = PoseidonCipher()
        ct = cipher.encrypt([7, 8, 9], KEY, NONCE)
        assert not cipher.check(KEY, NONCE, ct, [7, 8, 10])

    def test_check_never_raises(self):
        cipher = PoseidonCipher()
        assert not cipher.check(KEY, NONCE, [1, 2], [1, 2, 3])
