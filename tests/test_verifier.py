"""Tests for the master password verifier record."""

import pytest

from vaultkeeper.vault.encryption import EncryptedBlob, EncryptionService
from vaultkeeper.vault.verifier import VERIFICATION_SENTINEL, PasswordVerifier

PASSWORD = "Tr0ub4dor&3"


class TestPasswordVerifier:

    @pytest.fixture(scope="class")
    def record(self):
        return PasswordVerifier.create(PASSWORD)

    def test_correct_password(self, record):
        assert PasswordVerifier.verify(PASSWORD, record) is True

    def test_wrong_password(self, record):
        assert PasswordVerifier.verify("tr0ub4dor&3", record) is False
        assert PasswordVerifier.verify("", record) is False

    def test_accepts_text_and_bytes(self, record):
        text = record.to_text()
        assert PasswordVerifier.verify(PASSWORD, text) is True
        assert PasswordVerifier.verify(PASSWORD, text.encode("ascii")) is True

    def test_record_holds_sentinel(self, record):
        assert EncryptionService.open_text(record, PASSWORD) == VERIFICATION_SENTINEL

    def test_records_are_fresh(self):
        assert PasswordVerifier.create(PASSWORD) != PasswordVerifier.create(PASSWORD)

    def test_tampered_record_is_false_not_error(self, record):
        ciphertext = bytearray(record.ciphertext)
        ciphertext[0] ^= 0xFF
        tampered = EncryptedBlob(record.salt, record.nonce, bytes(ciphertext))
        assert PasswordVerifier.verify(PASSWORD, tampered) is False

    @pytest.mark.parametrize("garbage", ["", "garbage!", b"\x00\x01", "QUJD"])
    def test_malformed_record_is_false(self, garbage):
        assert PasswordVerifier.verify(PASSWORD, garbage) is False

    def test_other_plaintext_is_false(self):
        """A blob that opens but does not hold the sentinel is rejected."""
        other = EncryptionService.seal_text("SOMETHING_ELSE", PASSWORD)
        assert PasswordVerifier.verify(PASSWORD, other) is False

    def test_binary_plaintext_is_false(self):
        other = EncryptionService.seal(b"\xff\xfe", PASSWORD)
        assert PasswordVerifier.verify(PASSWORD, other) is False
