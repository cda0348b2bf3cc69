# Vault Session - explicitly scoped master password holder
#
# VaultStore never caches the master password. Interactive front ends that
# need "unlock once, use many times" go through a VaultSession instead:
# the password is held as a mutable bytearray and overwritten with zeros
# by forget()/lock(), rather than left for garbage collection.

import threading
from typing import Any, List, Optional

from ..core.event_log import EventType
from .codec import Entry
from .exceptions import VaultLockedError
from .vault_store import VaultStore


class VaultSession:
    """
    One unlocked view onto a VaultStore.

    Note: each call still decodes the held bytes into a transient ``str``
    for key derivation; only the long-lived copy is wiped.
    """

    def __init__(self, store: VaultStore):
        self.store = store
        self._secret: Optional[bytearray] = None
        self._lock = threading.Lock()

    @property
    def is_unlocked(self) -> bool:
        return self._secret is not None

    def setup(self, master_password: str) -> None:
        """Initialize a new vault and unlock it (first-run flow)."""
        self.store.initialize(master_password)
        self._hold(master_password)

    def unlock(self, master_password: str) -> bool:
        """Verify the master password and hold it. Returns False if wrong."""
        if not self.store.authenticate(master_password):
            return False
        self._hold(master_password)
        return True

    def forget(self) -> None:
        """Overwrite and drop the held password."""
        with self._lock:
            if self._secret is None:
                return
            for i in range(len(self._secret)):
                self._secret[i] = 0
            self._secret = None

    def lock(self) -> None:
        """Forget the master password and log the lock."""
        was_unlocked = self.is_unlocked
        self.forget()
        if was_unlocked:
            self.store.logger.log_vault_event(EventType.VAULT_LOCKED, "vault locked")

    # ── Entry operations ─────────────────────────────────────────────

    def list_entries(self) -> List[Entry]:
        return self.store.list_entries(self._password())

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        return self.store.get_entry(self._password(), entry_id)

    def search_entries(self, query: str) -> List[Entry]:
        return self.store.search_entries(self._password(), query)

    def create_entry(self, **fields: Any) -> Entry:
        return self.store.create_entry(self._password(), **fields)

    def update_entry(self, entry_id: str, **changes: Any) -> Optional[Entry]:
        return self.store.update_entry(self._password(), entry_id, **changes)

    def delete_entry(self, entry_id: str) -> bool:
        return self.store.delete_entry(self._password(), entry_id)

    # ── Internals ────────────────────────────────────────────────────

    def _hold(self, master_password: str) -> None:
        self.forget()
        with self._lock:
            self._secret = bytearray(master_password.encode('utf-8', 'surrogatepass'))

    def _password(self) -> str:
        with self._lock:
            if self._secret is None:
                raise VaultLockedError("Vault is locked. Unlock vault first.")
            return self._secret.decode('utf-8', 'surrogatepass')
