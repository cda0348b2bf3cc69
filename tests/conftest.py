"""
Shared pytest fixtures for the vaultkeeper test suite.

Autouse fixtures below isolate tests from the live application data:
  - Settings     -> temp database path (prevents writes to data/vault.db)
  - Event logger -> fresh instance, no file handler
  - API session  -> reset so each test builds its own vault
"""

from datetime import datetime, timedelta, timezone

import pytest

from vaultkeeper.core.kv_store import MemoryKeyValueStore
from vaultkeeper.vault.codec import utc_timestamp
from vaultkeeper.vault.vault_store import VaultStore

MASTER_PASSWORD = "Tr0ub4dor&3"


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    """Point the default vault database and log dir at a temp directory."""
    import vaultkeeper.config as config_mod

    monkeypatch.setenv("VAULTKEEPER_DB_PATH", str(tmp_path / "vault.db"))
    monkeypatch.setenv("VAULTKEEPER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("VAULTKEEPER_LOG_TO_FILE", raising=False)
    monkeypatch.delenv("VAULTKEEPER_API_TOKEN", raising=False)
    config_mod.reset_settings()

    yield

    config_mod.reset_settings()


@pytest.fixture(autouse=True)
def _isolate_event_logger():
    """Give every test a fresh global EventLogger."""
    import vaultkeeper.core.event_log as event_mod

    old_logger = event_mod._event_logger
    event_mod._event_logger = None

    yield

    if event_mod._event_logger is not None:
        event_mod._event_logger.close()
    event_mod._event_logger = old_logger


@pytest.fixture(autouse=True)
def _isolate_api_session():
    """Reset the API's vault session singleton."""
    import vaultkeeper.api.vault_routes as routes_mod

    old_session = routes_mod._session
    routes_mod._session = None

    yield

    routes_mod._session = old_session


class FakeClock:
    """Deterministic clock returning vault timestamps."""

    def __init__(self, start=None):
        self.moment = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> str:
        return utc_timestamp(self.moment)

    def advance(self, seconds: float = 1.0):
        self.moment += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryKeyValueStore()


@pytest.fixture
def store(storage, clock):
    """VaultStore over an in-memory backing store."""
    return VaultStore(storage, clock=clock)


@pytest.fixture
def initialized_store(store):
    store.initialize(MASTER_PASSWORD)
    return store
