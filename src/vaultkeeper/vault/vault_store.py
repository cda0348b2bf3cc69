# Vault Store - Encrypted Credential Collection
#
# The whole entry collection is one encrypted unit. Every mutation runs a
# full cycle over it:
#
#     load -> open (AES-256-GCM) -> decode (JSON) -> mutate
#          -> encode -> seal (fresh salt + nonce) -> persist
#
# Persisted slots (external key/value store):
#     vault_initialized  b"true" once the vault exists
#     vault_verifier     base64 sealed sentinel (master password check)
#     vault_data         base64 sealed entry collection

import threading
import uuid
from dataclasses import replace
from typing import Any, Callable, List, Optional

from ..core.event_log import EventLogger, EventSeverity, EventType, get_event_logger
from ..core.kv_store import KeyValueStore
from .codec import (
    EDITABLE_FIELDS,
    Entry,
    decode_entries,
    encode_entries,
    parse_timestamp,
    utc_timestamp,
)
from .encryption import EncryptionService
from .exceptions import (
    FormatError,
    VaultAlreadyInitializedError,
    VaultNotInitializedError,
)
from .verifier import PasswordVerifier

SLOT_INITIALIZED = "vault_initialized"
SLOT_VERIFIER = "vault_verifier"
SLOT_DATA = "vault_data"

INITIALIZED_FLAG = b"true"


def _new_uuid() -> str:
    return str(uuid.uuid4())


class VaultStore:
    """
    CRUD over the encrypted entry collection.

    Security:
    - Master password is an explicit argument of every call and is never
      cached; the key is re-derived (100k PBKDF2 rounds) per open/seal
    - Master password is verified via an encrypted sentinel record
    - Wrong password and corrupted ciphertext both surface as
      AuthenticationError

    Read-modify-write cycles are serialized by a per-instance lock. Two
    VaultStore instances sharing one backing store are not coordinated.

    Args:
        storage: Backing key/value store
        clock: Returns the current ISO-8601 timestamp (default: UTC now)
        id_factory: Returns a new entry id (default: uuid4 text)
        event_logger: Event logger (default: process-wide logger)
    """

    def __init__(
        self,
        storage: KeyValueStore,
        clock: Optional[Callable[[], str]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.storage = storage
        self._clock = clock or utc_timestamp
        self._id_factory = id_factory or _new_uuid
        self._event_logger = event_logger
        self._lock = threading.RLock()

    @property
    def logger(self) -> EventLogger:
        return self._event_logger or get_event_logger()

    # ── Lifecycle ────────────────────────────────────────────────────

    def is_initialized(self) -> bool:
        """True once :meth:`initialize` has completed."""
        return self.storage.get(SLOT_INITIALIZED) == INITIALIZED_FLAG

    def initialize(self, master_password: str) -> None:
        """
        Create a new vault: verifier record plus an empty sealed collection.

        Minimum password strength is not enforced here.

        Raises:
            VaultAlreadyInitializedError: If the vault already exists.
        """
        with self._lock:
            if self.is_initialized():
                raise VaultAlreadyInitializedError(
                    "Vault already exists. Reset it before initializing again."
                )

            verifier = PasswordVerifier.create(master_password)
            data = EncryptionService.seal(encode_entries([]), master_password)

            # Flag last: a crash part-way leaves the vault uninitialized
            self.storage.set(SLOT_VERIFIER, verifier.to_text().encode('ascii'))
            self.storage.set(SLOT_DATA, data.to_text().encode('ascii'))
            self.storage.set(SLOT_INITIALIZED, INITIALIZED_FLAG)

        self.logger.log_event(
            event_type=EventType.VAULT_CREATED,
            severity=EventSeverity.INFO,
            message="Vault initialized with master password",
        )

    def authenticate(self, master_password: str) -> bool:
        """
        Check the master password against the stored verifier.

        Returns False (never raises) for a wrong password or an
        uninitialized vault.
        """
        if not self.is_initialized():
            return False

        record = self.storage.get(SLOT_VERIFIER)
        if record is None:
            return False

        if PasswordVerifier.verify(master_password, record):
            self.logger.log_vault_event(EventType.VAULT_UNLOCKED, "master password verified")
            return True

        self.logger.log_event(
            event_type=EventType.VAULT_UNLOCK_FAILED,
            severity=EventSeverity.ALERT,
            message="Vault unlock failed: incorrect password",
        )
        return False

    def reset(self) -> None:
        """
        Wipe all three vault slots.

        Requires no password: confirmation is the caller's responsibility.
        """
        with self._lock:
            self.storage.remove(SLOT_INITIALIZED)
            self.storage.remove(SLOT_VERIFIER)
            self.storage.remove(SLOT_DATA)

        self.logger.log_event(
            event_type=EventType.VAULT_RESET,
            severity=EventSeverity.ALERT,
            message="Vault reset: all stored data removed",
        )

    # ── Reads ────────────────────────────────────────────────────────

    def list_entries(self, master_password: str) -> List[Entry]:
        """
        Decrypt and return every entry, in stored order.

        A missing data slot reads as an empty vault.

        Raises:
            AuthenticationError: Wrong password or tampered data.
            FormatError: Data decrypted but is not a valid collection.
        """
        with self._lock:
            return self._load(master_password)

    def get_entry(self, master_password: str, entry_id: str) -> Optional[Entry]:
        """Return the entry with ``entry_id``, or None."""
        for entry in self.list_entries(master_password):
            if entry.id == entry_id:
                return entry
        return None

    def search_entries(self, master_password: str, query: str) -> List[Entry]:
        """
        Entries whose service name, username, url, notes or category
        contain ``query`` (case-insensitive). A blank query matches all.
        """
        entries = self.list_entries(master_password)
        query = query.strip()
        if not query:
            return entries
        return [entry for entry in entries if entry.matches(query)]

    # ── Mutations ────────────────────────────────────────────────────

    def create_entry(
        self,
        master_password: str,
        *,
        service_name: str,
        username: str,
        secret: str,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Entry:
        """
        Append a new entry with a fresh id and ``created_at == updated_at``.

        Raises:
            VaultNotInitializedError: If the vault has not been created.
            AuthenticationError / FormatError: As :meth:`list_entries`.
            TypeError: If a field is not a string.
        """
        fields = {
            "service_name": service_name,
            "username": username,
            "secret": secret,
            "url": url,
            "notes": notes,
            "category": category,
        }
        _check_field_types(fields, required=("service_name", "username", "secret"))

        with self._lock:
            if not self.is_initialized():
                raise VaultNotInitializedError("Vault has not been initialized")

            entries = self._load(master_password)
            existing_ids = {entry.id for entry in entries}
            entry_id = self._id_factory()
            while entry_id in existing_ids:
                entry_id = self._id_factory()

            now = self._clock()
            entry = Entry(id=entry_id, created_at=now, updated_at=now, **fields)
            entries.append(entry)
            self._save(entries, master_password)

        self.logger.log_event(
            event_type=EventType.ENTRY_ADDED,
            severity=EventSeverity.INFO,
            message="Entry added to vault",
            details={"entry_id": entry.id, "entry_count": len(entries)},
        )
        return entry

    def update_entry(
        self, master_password: str, entry_id: str, **changes: Any
    ) -> Optional[Entry]:
        """
        Merge ``changes`` into an entry and bump ``updated_at``.

        Only ``service_name, username, secret, url, notes, category`` may
        change; passing None for an optional field clears it.

        Returns:
            The updated entry, or None if no entry has ``entry_id`` (or the
            vault is uninitialized). Storage is untouched in that case.

        Raises:
            ValueError: For a field that cannot be updated.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        _check_field_types(
            changes,
            required=tuple(f for f in ("service_name", "username", "secret") if f in changes),
        )

        with self._lock:
            if not self.is_initialized():
                return None

            entries = self._load(master_password)
            index = _find_index(entries, entry_id)
            if index is None:
                return None

            current = entries[index]
            updated = current.with_changes(**changes)
            updated = _touch(updated, current.updated_at, self._clock())
            entries[index] = updated
            self._save(entries, master_password)

        self.logger.log_event(
            event_type=EventType.ENTRY_UPDATED,
            severity=EventSeverity.INFO,
            message="Entry updated",
            details={"entry_id": entry_id, "fields": sorted(changes)},
        )
        return updated

    def delete_entry(self, master_password: str, entry_id: str) -> bool:
        """
        Remove an entry.

        Returns:
            True if an entry was removed. Storage is only rewritten then.
        """
        with self._lock:
            if not self.is_initialized():
                return False

            entries = self._load(master_password)
            index = _find_index(entries, entry_id)
            if index is None:
                return False

            del entries[index]
            self._save(entries, master_password)

        self.logger.log_event(
            event_type=EventType.ENTRY_DELETED,
            severity=EventSeverity.INFO,
            message="Entry deleted from vault",
            details={"entry_id": entry_id, "entry_count": len(entries)},
        )
        return True

    # ── Internals ────────────────────────────────────────────────────

    def _load(self, master_password: str) -> List[Entry]:
        raw = self.storage.get(SLOT_DATA)
        if raw is None:
            return []

        plaintext = EncryptionService.open(raw, master_password)
        try:
            return decode_entries(plaintext)
        except FormatError as e:
            self.logger.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Vault data is corrupted: {e}",
            )
            raise

    def _save(self, entries: List[Entry], master_password: str) -> None:
        blob = EncryptionService.seal(encode_entries(entries), master_password)
        self.storage.set(SLOT_DATA, blob.to_text().encode('ascii'))


def _find_index(entries: List[Entry], entry_id: str) -> Optional[int]:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None


def _touch(entry: Entry, previous: str, now: str) -> Entry:
    """Set ``updated_at`` to ``now`` without ever moving it backwards."""
    try:
        if parse_timestamp(now) < parse_timestamp(previous):
            now = previous
    except ValueError:
        pass  # unparseable legacy timestamp: take the new one
    return replace(entry, updated_at=now)


def _check_field_types(fields: dict, required: tuple) -> None:
    for name, value in fields.items():
        if value is None and name not in required:
            continue
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a string, got {type(value).__name__}")


__all__ = [
    "VaultStore",
    "SLOT_INITIALIZED",
    "SLOT_VERIFIER",
    "SLOT_DATA",
]
