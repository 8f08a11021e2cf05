"""
Request bodies sent to the Scoville API.

JSON key names are fixed by the backend and must round-trip exactly, so every
field carries its wire name as an alias.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from scoville.config import Configuration


class EventPayload(BaseModel):
    """Body of POST /v2/analytics/track."""

    uuid: str
    event_name: str = Field(alias="eventName")
    parameters: dict[str, JsonValue] = Field(default_factory=dict)
    bundle_id: str = Field(alias="bundleId")
    version: str
    build: str

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def build_for(
        cls,
        configuration: Configuration,
        event_name: str,
        parameters: Optional[dict[str, Any]] = None,
    ) -> "EventPayload":
        """Build a payload from the active configuration. Raises ValidationError for non-JSON parameters."""
        return cls(
            uuid=configuration.device_uuid,
            event_name=event_name,
            parameters=parameters or {},
            bundle_id=configuration.bundle_id,
            version=configuration.version,
            build=configuration.build,
        )

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DevicePayload(BaseModel):
    """Body of POST /v2/devices/register."""

    uuid: str
    token: Optional[str] = None
    platform: str
    version: str
    build: str
    bundle_id: str
    production: bool
    notifications_enabled: bool = Field(alias="notificationsEnabled")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("token")
    @classmethod
    def empty_token_is_absent(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @classmethod
    def build_for(
        cls,
        configuration: Configuration,
        token: Optional[str],
        platform: str,
        production: bool,
        notifications_enabled: bool,
    ) -> "DevicePayload":
        return cls(
            uuid=configuration.device_uuid,
            token=token,
            platform=platform,
            version=configuration.version,
            build=configuration.build,
            bundle_id=configuration.bundle_id,
            production=production,
            notifications_enabled=notifications_enabled,
        )

    def to_body(self) -> dict[str, Any]:
        # Missing push token is omitted, never sent as ""
        body = self.model_dump(mode="json", by_alias=True)
        if self.token is None:
            body.pop("token")
        return body
