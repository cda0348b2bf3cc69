# vaultkeeper - Main Package
#
# Single-user, client-resident encrypted vault for service credentials.
# The entry collection is sealed as one AES-256-GCM unit under a key
# derived from the master password; the password itself is never stored.

__version__ = "0.1.0"
__author__ = "vaultkeeper developers"
__description__ = "Local encrypted credential vault"

from .core import (
    EventSeverity,
    EventType,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
    get_event_logger,
)
from .generator import PasswordPolicy, evaluate_strength, generate_password
from .vault import (
    AuthenticationError,
    Entry,
    FormatError,
    PolicyError,
    VaultError,
    VaultSession,
    VaultStore,
)

__all__ = [
    "__version__",
    "AuthenticationError",
    "Entry",
    "EventSeverity",
    "EventType",
    "FormatError",
    "MemoryKeyValueStore",
    "PasswordPolicy",
    "PolicyError",
    "SQLiteKeyValueStore",
    "VaultError",
    "VaultSession",
    "VaultStore",
    "evaluate_strength",
    "generate_password",
    "get_event_logger",
]
