"""Process-wide configuration resolved from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_DEVICE_RETENTION_DAYS = 90


@dataclass(frozen=True)
class Settings:
    """Configuration resolved once at startup.

    Attributes:
        database_url: Any SQLAlchemy URL; takes precedence over database_path
        database_path: SQLite file path used when no URL is given
        master_password: Shared secret for device registration (None disables login)
        device_retention_days: Inactivity window after which devices are deactivated
    """

    database_url: Optional[str] = None
    database_path: Optional[str] = None
    master_password: Optional[str] = None
    device_retention_days: int = DEFAULT_DEVICE_RETENTION_DAYS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from POCKETLEDGER_* environment variables."""
        env = os.environ if environ is None else environ

        retention = env.get("POCKETLEDGER_DEVICE_RETENTION_DAYS")
        try:
            retention_days = int(retention) if retention else DEFAULT_DEVICE_RETENTION_DAYS
        except ValueError:
            raise ValueError(
                f"POCKETLEDGER_DEVICE_RETENTION_DAYS must be an integer, got '{retention}'"
            )

        return cls(
            database_url=env.get("POCKETLEDGER_DB_URL") or None,
            database_path=env.get("POCKETLEDGER_DB_PATH") or None,
            master_password=env.get("POCKETLEDGER_MASTER_PASSWORD") or None,
            device_retention_days=retention_days,
        )
