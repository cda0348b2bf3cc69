"""Tests for VaultSession (unlock once, operate many times)."""

from unittest.mock import MagicMock

import pytest

from vaultkeeper.core.event_log import EventType
from vaultkeeper.vault.exceptions import VaultAlreadyInitializedError, VaultLockedError
from vaultkeeper.vault.session import VaultSession
from vaultkeeper.vault.vault_store import VaultStore

MASTER_PASSWORD = "Tr0ub4dor&3"


@pytest.fixture
def session(store):
    return VaultSession(store)


class TestLifecycle:

    def test_starts_locked(self, session):
        assert session.is_unlocked is False

    def test_setup_initializes_and_unlocks(self, session):
        session.setup(MASTER_PASSWORD)
        assert session.is_unlocked is True
        assert session.store.is_initialized() is True

    def test_setup_twice_fails(self, session):
        session.setup(MASTER_PASSWORD)
        with pytest.raises(VaultAlreadyInitializedError):
            session.setup(MASTER_PASSWORD)

    def test_unlock_with_wrong_password_stays_locked(self, initialized_store):
        session = VaultSession(initialized_store)
        assert session.unlock("wrong") is False
        assert session.is_unlocked is False

    def test_unlock_then_lock(self, initialized_store):
        session = VaultSession(initialized_store)
        assert session.unlock(MASTER_PASSWORD) is True
        session.lock()
        assert session.is_unlocked is False

    def test_forget_zeroes_held_bytes(self, session):
        session.setup(MASTER_PASSWORD)
        held = session._secret
        session.forget()
        assert session._secret is None
        assert held == bytearray(len(MASTER_PASSWORD.encode("utf-8")))

    def test_lock_when_already_locked_logs_nothing(self, storage, clock):
        events = MagicMock()
        session = VaultSession(VaultStore(storage, clock=clock, event_logger=events))
        session.lock()
        events.log_vault_event.assert_not_called()

    def test_lock_logs_event(self, storage, clock):
        events = MagicMock()
        session = VaultSession(VaultStore(storage, clock=clock, event_logger=events))
        session.setup(MASTER_PASSWORD)
        session.lock()
        events.log_vault_event.assert_called_with(EventType.VAULT_LOCKED, "vault locked")


class TestEntryOperations:

    @pytest.mark.parametrize("call", [
        lambda s: s.list_entries(),
        lambda s: s.get_entry("id"),
        lambda s: s.search_entries("mail"),
        lambda s: s.create_entry(service_name="Mail", username="u", secret="s"),
        lambda s: s.update_entry("id", secret="s"),
        lambda s: s.delete_entry("id"),
    ])
    def test_locked_session_refuses(self, initialized_store, call):
        session = VaultSession(initialized_store)
        with pytest.raises(VaultLockedError):
            call(session)

    def test_crud_through_session(self, session, clock):
        session.setup(MASTER_PASSWORD)

        entry = session.create_entry(service_name="Mail", username="a@b.com", secret="x")
        assert session.list_entries() == [entry]
        assert session.get_entry(entry.id) == entry
        assert session.search_entries("mail") == [entry]

        clock.advance(1)
        updated = session.update_entry(entry.id, secret="y")
        assert updated.secret == "y"

        assert session.delete_entry(entry.id) is True
        assert session.list_entries() == []

    def test_session_uses_store_password(self, session):
        session.setup(MASTER_PASSWORD)
        entry = session.create_entry(service_name="Mail", username="u", secret="s")
        assert session.store.get_entry(MASTER_PASSWORD, entry.id) == entry

    def test_lone_surrogate_password_is_held_exactly(self, session):
        session.setup("pw\ud800")
        entry = session.create_entry(service_name="Mail", username="u", secret="s")
        assert session.list_entries() == [entry]
        session.lock()
        assert session.unlock("pw\ud800") is True
