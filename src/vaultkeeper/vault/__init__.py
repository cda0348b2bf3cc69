# Vault Module - Encrypted Credential Storage
#
# Whole-collection AES-256-GCM encryption under a PBKDF2-derived key.
# The master password is verified via an encrypted sentinel and never stored.

from .codec import Entry, decode_entries, encode_entries
from .encryption import EncryptedBlob, EncryptionService, derive_key
from .exceptions import (
    AuthenticationError,
    FormatError,
    PolicyError,
    VaultAlreadyInitializedError,
    VaultError,
    VaultLockedError,
    VaultNotInitializedError,
)
from .session import VaultSession
from .vault_store import VaultStore
from .verifier import PasswordVerifier

__all__ = [
    "AuthenticationError",
    "EncryptedBlob",
    "EncryptionService",
    "Entry",
    "FormatError",
    "PasswordVerifier",
    "PolicyError",
    "VaultAlreadyInitializedError",
    "VaultError",
    "VaultLockedError",
    "VaultNotInitializedError",
    "VaultSession",
    "VaultStore",
    "decode_entries",
    "derive_key",
    "encode_entries",
]
