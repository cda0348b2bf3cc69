"""Runtime configuration.

Settings come from environment variables, optionally loaded from a
``.env`` file in the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "VAULTKEEPER_"

DEFAULT_DB_PATH = "data/vault.db"
DEFAULT_LOG_DIR = "logs"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class VaultSettings:
    db_path: Path = Path(DEFAULT_DB_PATH)
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    log_to_file: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "VaultSettings":
        """Build settings from ``VAULTKEEPER_*`` environment variables.

        Raises:
            ValueError: If ``VAULTKEEPER_PORT`` is not an integer.
        """
        port_raw = _env("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            raise ValueError(f"{ENV_PREFIX}PORT must be an integer, got {port_raw!r}")

        return cls(
            db_path=Path(_env("DB_PATH", DEFAULT_DB_PATH)),
            log_dir=Path(_env("LOG_DIR", DEFAULT_LOG_DIR)),
            log_to_file=_env_bool("LOG_TO_FILE"),
            host=_env("HOST", DEFAULT_HOST),
            port=port,
            api_token=os.environ.get(f"{ENV_PREFIX}API_TOKEN") or None,
        )


_settings: Optional[VaultSettings] = None


def get_settings() -> VaultSettings:
    """Load settings once (reads ``.env`` on first call)."""
    global _settings
    if _settings is None:
        load_dotenv(find_dotenv(usecwd=True))
        _settings = VaultSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
