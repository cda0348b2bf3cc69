# Vault - Encryption Service
#
# Master password -> Encryption key (PBKDF2-HMAC-SHA256)
# Payload encryption (AES-256-GCM)
# Every sealed blob carries its own salt and nonce:
#
#     base64( salt[16] || nonce[12] || ciphertext || tag[16] )

import base64
import binascii
import os
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import AuthenticationError, FormatError

PBKDF2_ITERATIONS = 100_000
KEY_LENGTH = 32  # 256 bits for AES-256
SALT_LENGTH = 16  # 128-bit salt
NONCE_LENGTH = 12  # 96-bit nonce for GCM
TAG_LENGTH = 16  # GCM authentication tag, appended to the ciphertext

HEADER_LENGTH = SALT_LENGTH + NONCE_LENGTH


def derive_key(master_password: str, salt: Optional[bytes] = None) -> Tuple[bytes, bytes]:
    """
    Derive a 256-bit key from the master password using PBKDF2.

    Deterministic for a given (password, salt). When ``salt`` is None a
    fresh random salt is generated; only sealing should rely on that.

    Args:
        master_password: User's master password
        salt: 16-byte salt, or None to generate one

    Returns:
        (key, salt)
    """
    if salt is None:
        salt = generate_salt()
    elif len(salt) != SALT_LENGTH:
        raise ValueError(f"salt must be {SALT_LENGTH} bytes; got {len(salt)}")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(encode_utf8(master_password)), salt


def encode_utf8(text: str) -> bytes:
    """
    UTF-8 bytes of ``text``.

    Lone surrogates (valid in a Python ``str``, not encodable as UTF-8)
    become U+FFFD, the same bytes a browser TextEncoder produces.
    """
    try:
        return text.encode('utf-8')
    except UnicodeEncodeError:
        wide = text.encode('utf-16-le', 'surrogatepass')
        return wide.decode('utf-16-le', 'replace').encode('utf-8')


def generate_salt() -> bytes:
    """Generate cryptographically random salt."""
    return os.urandom(SALT_LENGTH)


def generate_nonce() -> bytes:
    """Generate a random GCM nonce (never reused: one per seal)."""
    return os.urandom(NONCE_LENGTH)


@dataclass(frozen=True)
class EncryptedBlob:
    """Self-describing sealed payload: salt, nonce and ciphertext+tag."""

    salt: bytes
    nonce: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return self.salt + self.nonce + self.ciphertext

    def to_text(self) -> str:
        """Standard base64 text, as persisted in the vault slots."""
        return base64.b64encode(self.to_bytes()).decode('ascii')

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedBlob":
        """
        Split raw blob bytes into salt, nonce and ciphertext.

        Raises:
            ValueError: If the data is too short to hold a header and tag.
        """
        if len(data) < HEADER_LENGTH + TAG_LENGTH:
            raise ValueError(
                f"Encrypted blob too short: {len(data)} bytes "
                f"(minimum {HEADER_LENGTH + TAG_LENGTH})"
            )
        return cls(
            salt=bytes(data[:SALT_LENGTH]),
            nonce=bytes(data[SALT_LENGTH:HEADER_LENGTH]),
            ciphertext=bytes(data[HEADER_LENGTH:]),
        )

    @classmethod
    def from_text(cls, text: Union[str, bytes]) -> "EncryptedBlob":
        """
        Parse base64 text (str or ASCII bytes).

        Raises:
            ValueError: If the text is not valid base64 or too short.
        """
        if isinstance(text, str):
            text = text.encode('ascii', errors='strict')
        try:
            raw = base64.b64decode(text, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Encrypted blob is not valid base64: {e}")
        return cls.from_bytes(raw)


BlobLike = Union[EncryptedBlob, str, bytes]


class EncryptionService:
    """
    Seals and opens vault payloads.

    Flow:
    1. A fresh salt is drawn and PBKDF2 derives a 256-bit key
    2. A fresh 96-bit nonce is drawn
    3. AES-256-GCM encrypts the payload and appends the tag
    4. salt, nonce and ciphertext travel together in one EncryptedBlob

    The key is re-derived on every call; nothing is cached.
    """

    @staticmethod
    def seal(plaintext: bytes, master_password: str) -> EncryptedBlob:
        """
        Encrypt a payload under the master password.

        Args:
            plaintext: Bytes to protect
            master_password: User's master password

        Returns:
            EncryptedBlob with fresh salt and nonce
        """
        key, salt = derive_key(master_password)
        nonce = generate_nonce()
        ciphertext = AESGCM(key).encrypt(nonce, bytes(plaintext), None)
        return EncryptedBlob(salt=salt, nonce=nonce, ciphertext=ciphertext)

    @staticmethod
    def open(blob: BlobLike, master_password: str) -> bytes:
        """
        Decrypt a sealed payload.

        Args:
            blob: EncryptedBlob, or its base64 text (str or bytes)
            master_password: User's master password

        Returns:
            Decrypted plaintext bytes

        Raises:
            AuthenticationError: Wrong password, tampered data or a
                malformed blob. The cause is not reported.
        """
        try:
            if not isinstance(blob, EncryptedBlob):
                blob = EncryptedBlob.from_text(blob)
            key, _ = derive_key(master_password, blob.salt)
            return AESGCM(key).decrypt(blob.nonce, blob.ciphertext, None)
        except (InvalidTag, ValueError):
            raise AuthenticationError() from None

    @staticmethod
    def seal_text(plaintext: str, master_password: str) -> EncryptedBlob:
        """Seal a UTF-8 string."""
        return EncryptionService.seal(encode_utf8(plaintext), master_password)

    @staticmethod
    def open_text(blob: BlobLike, master_password: str) -> str:
        """Open a blob sealed with :meth:`seal_text`.

        Raises:
            AuthenticationError: As :meth:`open`.
            FormatError: If the plaintext is not UTF-8.
        """
        plaintext = EncryptionService.open(blob, master_password)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError:
            raise FormatError("Decrypted payload is not UTF-8 text") from None
