"""
Scoville analytics client.

Configure once per process, then track events, register the device and check
connectivity from anywhere in the application:

    import scoville

    scoville.configure("api-key")
    scoville.track("app_open")
"""

import threading
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from scoville.__version__ import __version__
from scoville.app_info import AppInfo, current_app_info
from scoville.client import Completion, Scoville
from scoville.config import Configuration, ConfigurationStore, ScovilleSettings
from scoville.errors import NetworkError, NotConfiguredError, ScovilleError
from scoville.events import AnalyticsEvent, AnalyticsEventName, EventLike, StandardEvent
from scoville.logger import LogCategory, ScovilleLogger, get_logger
from scoville.logging_config import setup_logging, setup_logging_from_settings
from scoville.network import ScovilleNetwork
from scoville.notifications import track_notification_opened
from scoville.payloads import DevicePayload, EventPayload
from scoville.result import Result
from scoville.storage import DeviceStorage
from scoville.tasks import WorkHandle

__all__ = [
    "AnalyticsEvent",
    "AnalyticsEventName",
    "AppInfo",
    "Completion",
    "Configuration",
    "ConfigurationStore",
    "DevicePayload",
    "DeviceStorage",
    "EventLike",
    "EventPayload",
    "LogCategory",
    "NetworkError",
    "NotConfiguredError",
    "Result",
    "Scoville",
    "ScovilleError",
    "ScovilleLogger",
    "ScovilleNetwork",
    "ScovilleSettings",
    "StandardEvent",
    "WorkHandle",
    "__version__",
    "configure",
    "configure_api",
    "current_app_info",
    "debug_print_status",
    "get_client",
    "get_logger",
    "register_device",
    "set_client",
    "setup_logging",
    "setup_logging_from_settings",
    "test_heartbeat",
    "track",
    "track_notification_opened",
]

# Global instance
_client: Optional[Scoville] = None
_client_lock = threading.Lock()


def _load_settings() -> ScovilleSettings:
    """Load settings, falling back to defaults when the config file or env vars are invalid."""
    try:
        return ScovilleSettings.load()
    except (yaml.YAMLError, ValidationError, OSError, TypeError) as e:
        get_logger().error(LogCategory.CONFIGURATION, f"Could not load settings - using defaults: {e}")

    try:
        return ScovilleSettings()
    except ValidationError:
        return ScovilleSettings.defaults()


def get_client() -> Scoville:
    """Get or create the process-wide Scoville client."""
    global _client
    with _client_lock:
        if _client is None:
            _client = Scoville(_load_settings())
        return _client


def set_client(client: Optional[Scoville]) -> None:
    """Replace the process-wide client (None drops it)."""
    global _client
    with _client_lock:
        _client = client


def configure(api_key: str) -> None:
    get_client().configure(api_key)


def configure_api(url: str) -> None:
    get_client().configure_api(url)


def track(event: EventLike, parameters: Optional[dict[str, Any]] = None) -> None:
    get_client().track(event, parameters)


def register_device(
    token: Optional[str],
    is_production: bool = True,
    notifications_enabled: bool = False,
    completion: Optional[Completion] = None,
) -> None:
    get_client().register_device(token, is_production, notifications_enabled, completion)


def test_heartbeat(completion: Completion) -> WorkHandle:
    return get_client().test_heartbeat(completion)


def debug_print_status() -> None:
    get_client().debug_print_status()
