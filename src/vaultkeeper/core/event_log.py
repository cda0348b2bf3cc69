# Vault Event Log - structured logging for vault activity
#
# Every vault operation (create, unlock, entry changes, reset) emits one
# structured JSON event through structlog. Events carry ids and counts only:
# master passwords, secrets and entry contents are never logged.

import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog


class EventType(str, Enum):
    """Types of vault events that can be logged."""

    VAULT_CREATED = "vault.created"
    VAULT_UNLOCKED = "vault.unlocked"
    VAULT_UNLOCK_FAILED = "vault.unlock.failed"
    VAULT_LOCKED = "vault.locked"
    VAULT_RESET = "vault.reset"
    VAULT_ERROR = "vault.error"

    ENTRY_ADDED = "vault.entry.added"
    ENTRY_UPDATED = "vault.entry.updated"
    ENTRY_DELETED = "vault.entry.deleted"

    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"


class EventSeverity(str, Enum):
    """
    Severity levels for vault events.

    - INFO: Normal activity
    - ALERT: Something the user should know about (failed unlock, wipe)
    - CRITICAL: The vault could not be read or written
    """
    INFO = "info"
    ALERT = "alert"
    CRITICAL = "critical"

    def to_log_level(self) -> int:
        """Map severity onto a stdlib logging level."""
        return {
            EventSeverity.INFO: logging.INFO,
            EventSeverity.ALERT: logging.WARNING,
            EventSeverity.CRITICAL: logging.ERROR,
        }[self]


_structlog_configured = False


def configure_structlog() -> None:
    """Configure structlog once per process (JSON lines via stdlib logging)."""
    global _structlog_configured
    if _structlog_configured:
        return

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _structlog_configured = True


class EventLogger:
    """
    Structured event logger for the vault.

    Features:
    - Structured JSON logging (structlog)
    - Automatic timestamp and event ID
    - Optional daily log file under ``log_dir``
    """

    def __init__(self, log_dir: Optional[Path] = None, log_to_file: bool = False):
        """
        Initialize event logger.

        Args:
            log_dir: Directory for daily log files (default: ./logs)
            log_to_file: Whether to attach a file handler
        """
        self.log_dir = Path(log_dir) if log_dir else Path("./logs")
        self.log_to_file = log_to_file
        self._file_handler: Optional[logging.Handler] = None

        configure_structlog()

        if log_to_file:
            self._setup_file_handler()

        self.logger = structlog.get_logger("vaultkeeper.events")

    def _setup_file_handler(self):
        """Attach a file handler writing today's log file."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y-%m-%d")
        log_file = self.log_dir / f"vault_{today}.log"

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))  # structlog handles formatting

        events_logger = logging.getLogger("vaultkeeper.events")
        events_logger.addHandler(file_handler)
        events_logger.setLevel(logging.INFO)
        self._file_handler = file_handler

    def close(self):
        """Detach and close the file handler, if any."""
        if self._file_handler is not None:
            logging.getLogger("vaultkeeper.events").removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log a vault event.

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets!)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details or {},
            "platform": sys.platform,
        }

        self.logger.log(severity.to_log_level(), "vault_event", **event_data)

        return event_id

    def log_vault_event(
        self,
        event_type: EventType,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ) -> str:
        """Log an INFO-level vault event with a ``Vault:`` prefix."""
        return self.log_event(
            event_type=event_type,
            severity=EventSeverity.INFO,
            message=f"Vault: {message}",
            details=details
        )


# Global logger instance
_event_logger: Optional[EventLogger] = None


def get_event_logger() -> EventLogger:
    """Get global event logger (singleton pattern)."""
    global _event_logger
    if _event_logger is None:
        from ..config import get_settings

        settings = get_settings()
        _event_logger = EventLogger(
            log_dir=settings.log_dir,
            log_to_file=settings.log_to_file,
        )
    return _event_logger


def set_event_logger(instance: Optional[EventLogger]) -> None:
    """Replace the singleton (for testing)."""
    global _event_logger
    _event_logger = instance
