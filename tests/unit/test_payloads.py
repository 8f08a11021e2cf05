"""
Unit tests for request payloads.
"""

import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from scoville.config import Configuration
from scoville.payloads import DevicePayload, EventPayload


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(
        api_key="key1",
        bundle_id="com.example.app",
        version="1.2.3",
        build="42",
        device_uuid="device-uuid-1",
    )


class TestEventPayload:
    """Test analytics event payload."""

    def test_wire_field_names(self, configuration):
        """Test JSON keys match what the backend expects."""
        payload = EventPayload.build_for(configuration, "app_open", {"screen": "home"})

        assert payload.to_body() == {
            "uuid": "device-uuid-1",
            "eventName": "app_open",
            "parameters": {"screen": "home"},
            "bundleId": "com.example.app",
            "version": "1.2.3",
            "build": "42",
        }

    def test_missing_parameters_become_empty_object(self, configuration):
        payload = EventPayload.build_for(configuration, "app_open")

        assert payload.parameters == {}
        assert payload.to_body()["parameters"] == {}

    def test_round_trip(self, configuration):
        """Test serialize then deserialize reproduces identical field values."""
        payload = EventPayload.build_for(
            configuration,
            "purchase",
            {
                "amount": 9.99,
                "count": 3,
                "gift": False,
                "coupon": None,
                "items": ["a", "b"],
                "meta": {"source": "push", "nested": [1, {"x": True}]},
            },
        )

        decoded = EventPayload.model_validate(json.loads(json.dumps(payload.to_body())))

        assert decoded == payload
        assert decoded.parameters["meta"]["nested"][1] == {"x": True}

    def test_non_json_parameter_is_rejected(self, configuration):
        with pytest.raises(ValidationError):
            EventPayload.build_for(configuration, "app_open", {"when": datetime(2024, 1, 1)})


class TestDevicePayload:
    """Test device registration payload."""

    def test_wire_field_names(self, configuration):
        payload = DevicePayload.build_for(
            configuration,
            token="push-token",
            platform="python",
            production=True,
            notifications_enabled=True,
        )

        assert payload.to_body() == {
            "uuid": "device-uuid-1",
            "token": "push-token",
            "platform": "python",
            "version": "1.2.3",
            "build": "42",
            "bundle_id": "com.example.app",
            "production": True,
            "notificationsEnabled": True,
        }

    def test_missing_token_is_omitted(self, configuration):
        """Test a device without push token still produces a well-formed body."""
        payload = DevicePayload.build_for(
            configuration,
            token=None,
            platform="python",
            production=True,
            notifications_enabled=False,
        )

        body = payload.to_body()

        assert "token" not in body
        assert body["notificationsEnabled"] is False
        json.dumps(body)

    def test_empty_token_is_treated_as_missing(self, configuration):
        payload = DevicePayload.build_for(
            configuration,
            token="",
            platform="python",
            production=False,
            notifications_enabled=False,
        )

        assert payload.token is None
        assert "token" not in payload.to_body()
