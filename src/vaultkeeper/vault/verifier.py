# Vault - Master Password Verifier
#
# The master password is never stored. Instead a fixed sentinel string is
# sealed under it once; a candidate password is correct iff that record
# opens and yields the sentinel.

import hmac
from typing import Union

from .encryption import EncryptedBlob, EncryptionService
from .exceptions import AuthenticationError, FormatError

VERIFICATION_SENTINEL = "PASSWORD_VERIFICATION_STRING"


class PasswordVerifier:
    """Creates and checks verifier records for a master password."""

    sentinel = VERIFICATION_SENTINEL

    @classmethod
    def create(cls, master_password: str) -> EncryptedBlob:
        """Seal the sentinel under ``master_password``."""
        return EncryptionService.seal_text(cls.sentinel, master_password)

    @classmethod
    def verify(cls, master_password: str, record: Union[EncryptedBlob, str, bytes]) -> bool:
        """
        Check a candidate master password against a stored record.

        Never raises: a wrong password, a tampered or malformed record and a
        plaintext mismatch all return False.
        """
        try:
            plaintext = EncryptionService.open_text(record, master_password)
        except (AuthenticationError, FormatError):
            return False
        return hmac.compare_digest(
            plaintext.encode('utf-8'), cls.sentinel.encode('utf-8')
        )
