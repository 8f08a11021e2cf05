"""
Persistent per-installation device identifier, stored in the OS keyring.
"""

import logging
import uuid
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from scoville.logger import LogCategory, ScovilleLogger, get_logger

logger = logging.getLogger(__name__)

SERVICE_NAME = "com.scoville.kit"
DEVICE_UUID_KEY = "scoville_device_uuid"


class DeviceStorage:
    """Get-or-create store for the device UUID."""

    def __init__(
        self,
        service_name: str = SERVICE_NAME,
        key: str = DEVICE_UUID_KEY,
        log: Optional[ScovilleLogger] = None,
    ):
        """
        Initialize device storage.

        Args:
            service_name: Service identifier for keyring entries
            key: Keyring username under which the UUID is stored
            log: Categorized logger used for user-facing warnings
        """
        self.service_name = service_name
        self.key = key
        self.log = log or get_logger()
        # Used when the keyring backend is unavailable
        self._fallback: Optional[str] = None

    def _read(self) -> Optional[str]:
        try:
            return keyring.get_password(self.service_name, self.key)
        except KeyringError as e:
            logger.debug(f"Failed to read device UUID from keyring: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error reading device UUID: {e}")
            return None

    def _write(self, value: str) -> bool:
        try:
            keyring.set_password(self.service_name, self.key, value)
            return True
        except KeyringError as e:
            logger.debug(f"Failed to store device UUID in keyring: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error storing device UUID: {e}")
            return False

    def ensure_uuid(self) -> str:
        """
        Return the persisted device UUID, creating and storing one if missing.

        Returns:
            Device UUID string
        """
        if self._fallback:
            return self._fallback

        existing = self._read()
        if existing:
            return existing

        self.log.log(LogCategory.STORAGE, "No UUID found.. creating new UUID and saving for later usage.")
        new = str(uuid.uuid4())
        if not self._write(new):
            self.log.warning(
                LogCategory.STORAGE,
                "Keyring unavailable - device UUID will not persist across restarts.",
            )
            self._fallback = new
        return new

    def reset(self) -> bool:
        """
        Delete the persisted device UUID.

        Returns:
            True if deleted (or nothing was stored), False on keyring failure
        """
        self._fallback = None
        try:
            keyring.delete_password(self.service_name, self.key)
            return True
        except PasswordDeleteError:
            return True
        except KeyringError as e:
            logger.debug(f"Failed to delete device UUID from keyring: {e}")
            return False
