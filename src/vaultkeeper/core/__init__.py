# Core Module - Shared Utilities
#
# Core module provides shared functionality across vaultkeeper modules:
# - Structured event logging
# - Persisted key/value slots

from .event_log import (
    EventLogger,
    EventSeverity,
    EventType,
    get_event_logger,
    set_event_logger,
)
from .kv_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
)

__all__ = [
    # Event Logging
    "EventLogger",
    "EventType",
    "EventSeverity",
    "get_event_logger",
    "set_event_logger",
    # Storage
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
