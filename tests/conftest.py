"""
Pytest fixtures for Scoville client tests.
"""

from typing import Optional
from unittest.mock import MagicMock, patch

import httpx
import pytest

from scoville.app_info import AppInfo
from scoville.client import Scoville
from scoville.config import APISettings, AppSettings, ScovilleSettings
from scoville.logger import ScovilleLogger
from scoville.network import ScovilleNetwork
from scoville.storage import DeviceStorage

TEST_BASE_URL = "http://test-api.scoville.local"
TEST_DEVICE_UUID = "00000000-0000-4000-8000-000000000001"


class RecordingAPI:
    """httpx.MockTransport handler that records requests and replays a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = b"{}"
        self.exception: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exception is not None:
            raise self.exception
        return httpx.Response(self.status_code, content=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def mock_keyring():
    """In-memory keyring so tests never touch the system keychain."""
    entries: dict[tuple[str, str], str] = {}

    def get_password(service, username):
        return entries.get((service, username))

    def set_password(service, username, password):
        entries[(service, username)] = password

    def delete_password(service, username):
        from keyring.errors import PasswordDeleteError

        if (service, username) not in entries:
            raise PasswordDeleteError("not found")
        del entries[(service, username)]

    with patch("scoville.storage.keyring") as mock_module:
        mock_module.get_password.side_effect = get_password
        mock_module.set_password.side_effect = set_password
        mock_module.delete_password.side_effect = delete_password
        mock_module.entries = entries
        yield mock_module


@pytest.fixture
def test_settings() -> ScovilleSettings:
    """Settings with a local API URL and a fixed app identity."""
    return ScovilleSettings(
        api=APISettings(url=TEST_BASE_URL, timeout=5.0),
        app=AppSettings(bundle_id="com.example.testapp", version="1.2.3", build="42"),
    )


@pytest.fixture
def api() -> RecordingAPI:
    return RecordingAPI()


@pytest.fixture
def network(api) -> ScovilleNetwork:
    return ScovilleNetwork(base_url=TEST_BASE_URL, timeout=5.0, transport=api.transport)


@pytest.fixture
def mock_log() -> MagicMock:
    """Logger double so tests can count warnings and errors per call."""
    return MagicMock(spec=ScovilleLogger)


@pytest.fixture
def mock_storage() -> MagicMock:
    storage = MagicMock(spec=DeviceStorage)
    storage.ensure_uuid.return_value = TEST_DEVICE_UUID
    return storage


@pytest.fixture
def app_info() -> AppInfo:
    return AppInfo(bundle_id="com.example.testapp", version="1.2.3", build="42")


@pytest.fixture
def client(test_settings, network, mock_storage, mock_log, app_info) -> Scoville:
    """Client wired to the recording API. Binds to the test's event loop on first spawn."""
    return Scoville(
        test_settings,
        network=network,
        storage=mock_storage,
        app_info_provider=lambda: app_info,
        log=mock_log,
    )


@pytest.fixture
def configured_client(client) -> Scoville:
    client.configure("test-api-key")
    return client
