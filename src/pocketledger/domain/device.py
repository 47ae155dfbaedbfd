"""Device access control.

Clients register by presenting the shared master password once and receive an
opaque bearer token bound to their device id. The token alone is the
credential afterwards; revoking a device deactivates all of its tokens.
"""

import hmac
import logging
import re
import secrets
import time
from datetime import datetime, timedelta, UTC
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from pocketledger.config import DEFAULT_DEVICE_RETENTION_DAYS
from pocketledger.database.base import Database
from pocketledger.domain.entities import Device
from pocketledger.domain.errors import ValidationError
from pocketledger.domain.validation import optional_text, required_text

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "dt_"

# Upper bound on the inactivity window, roughly a century
MAX_RETENTION_DAYS = 36500

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

# Ordered: the first match wins, so more specific platforms come first.
_PLATFORMS = [
    (re.compile(r"iPhone"), "iPhone"),
    (re.compile(r"iPad"), "iPad"),
    (re.compile(r"Android.*Mobile"), "Android Phone"),
    (re.compile(r"Android"), "Android Tablet"),
    (re.compile(r"Windows"), "Windows"),
    (re.compile(r"Macintosh|Mac OS X"), "Mac"),
    (re.compile(r"CrOS"), "Chromebook"),
    (re.compile(r"Linux"), "Linux"),
]

_BROWSERS = [
    (re.compile(r"Edg/"), "Edge"),
    (re.compile(r"OPR/|Opera"), "Opera"),
    (re.compile(r"Firefox/"), "Firefox"),
    (re.compile(r"Chrome/"), "Chrome"),
    (re.compile(r"Safari/"), "Safari"),
]


def _base36(number: int) -> str:
    digits = []
    while True:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
        if number == 0:
            break
    return "".join(reversed(digits))


def generate_device_token() -> str:
    """Generate a fresh device token.

    Format is ``dt_<base36 millisecond timestamp>_<64 hex chars>``. The
    timestamp is only there to make tokens easier to tell apart in logs.
    """
    timestamp = _base36(int(time.time() * 1000))
    return f"{TOKEN_PREFIX}{timestamp}_{secrets.token_hex(32)}"


def describe_device(user_agent: Optional[str]) -> str:
    """Derive a human-readable device name from a user agent string."""
    if not user_agent:
        return "Unknown Device"
    platform = next((name for pattern, name in _PLATFORMS if pattern.search(user_agent)), None)
    browser = next((name for pattern, name in _BROWSERS if pattern.search(user_agent)), None)
    if platform and browser:
        return f"{browser} on {platform}"
    return platform or browser or "Unknown Device"


def mask_token(token: str) -> str:
    """Shorten a token for log output."""
    return token[:12] + "..." if len(token) > 12 else "***"


class DeviceAccessService:
    """Service issuing and validating device tokens."""

    def __init__(self, db: Database, master_password: Optional[str]):
        """Initialize device access service.

        Args:
            db: Database instance holding device tokens
            master_password: Shared secret; None disables registration
        """
        self.db = db
        self.master_password = master_password

    def verify_master_password(self, candidate: Optional[str]) -> bool:
        """Check a candidate against the configured master password.

        Returns False, never raises, when no password is configured or the
        candidate is not a string.
        """
        if not self.master_password:
            logger.error("Master password verification failed: no master password configured")
            return False
        if not isinstance(candidate, str):
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self.master_password.encode("utf-8"))

    def authenticate_with_master_password(
        self,
        password: Optional[str],
        device_id: str,
        device_name: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[str]:
        """Register a device with the master password.

        Args:
            password: Candidate master password
            device_id: Client-generated device fingerprint
            device_name: Human-readable name; derived from user_agent if omitted
            user_agent: Client user agent

        Returns:
            The new token, or None if authentication failed for any reason

        Raises:
            ValidationError: If device_id is blank or device_name is not a string
        """
        device_id = required_text(device_id, "device id")
        device_name = optional_text(device_name, "device name")

        if not self.verify_master_password(password):
            logger.warning("Rejected master password for device %s", device_id)
            return None

        token = generate_device_token()
        name = device_name or describe_device(user_agent)
        try:
            self.db.store_device_token(token, device_id, name, user_agent or "")
        except SQLAlchemyError:
            logger.exception("Could not store token for device %s", device_id)
            return None

        logger.info("Registered device %s (%s) with token %s", device_id, name, mask_token(token))
        return token

    def validate_device_token(self, token: Optional[str]) -> bool:
        """Return True iff token belongs to an active device.

        A successful validation refreshes the device's last_seen. Storage
        failures are treated as invalid.
        """
        if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
            return False
        try:
            record = self.db.get_device_token(token)
            if record is None or not record.active:
                logger.info("Rejected token %s", mask_token(token))
                return False
            self.db.touch_device_token(token, datetime.now(UTC))
        except SQLAlchemyError:
            logger.exception("Token validation failed for %s", mask_token(token))
            return False
        return True

    def list_devices(self) -> list[Device]:
        """List active devices, most recently seen first.

        A device holding several active tokens appears once, with its most
        recent activity.
        """
        devices: dict[str, Device] = {}
        for record in self.db.list_device_tokens(active_only=True):
            existing = devices.get(record.device_id)
            if existing is None:
                devices[record.device_id] = Device(
                    device_id=record.device_id,
                    name=record.device_name,
                    user_agent=record.user_agent,
                    registered_at=record.created_at,
                    last_seen=record.last_seen,
                )
            elif record.created_at < existing.registered_at:
                devices[record.device_id] = Device(
                    device_id=existing.device_id,
                    name=existing.name,
                    user_agent=existing.user_agent,
                    registered_at=record.created_at,
                    last_seen=existing.last_seen,
                )
        return sorted(devices.values(), key=lambda d: d.last_seen, reverse=True)

    def revoke_device(self, device_id: str) -> bool:
        """Deactivate every token of a device.

        Idempotent; returns whether any token record exists for the device.
        """
        found = self.db.deactivate_device(device_id) > 0
        if found:
            logger.info("Revoked device %s", device_id)
        else:
            logger.info("Revoke requested for unknown device %s", device_id)
        return found

    def cleanup_old_devices(
        self,
        retention_days: int = DEFAULT_DEVICE_RETENTION_DAYS,
        now: Optional[datetime] = None,
    ) -> int:
        """Deactivate devices not seen within the retention window.

        Args:
            retention_days: Inactivity window in days
            now: Reference time (defaults to the current UTC time)

        Returns:
            Number of token records deactivated
        """
        if not 0 <= retention_days <= MAX_RETENTION_DAYS:
            raise ValidationError(f"retention days must be between 0 and {MAX_RETENTION_DAYS}")
        cutoff = (now or datetime.now(UTC)) - timedelta(days=retention_days)
        count = self.db.deactivate_devices_seen_before(cutoff)
        logger.info("Deactivated %d device token(s) not seen since %s", count, cutoff.isoformat())
        return count
