"""Analytics event names accepted by Scoville.track()."""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union, runtime_checkable


@runtime_checkable
class AnalyticsEventName(Protocol):
    """Anything with a raw_value string can be tracked."""

    @property
    def raw_value(self) -> str: ...


@dataclass(frozen=True)
class StandardEvent:
    """Free-form event name."""

    name: str

    @property
    def raw_value(self) -> str:
        return self.name


class AnalyticsEvent(str, Enum):
    """Event names with meaning on the backend."""

    APP_OPEN = "app_open"
    APP_BACKGROUND = "app_background"
    SCREEN_VIEW = "screen_view"
    NOTIFICATION_OPENED = "notification_opened"

    @property
    def raw_value(self) -> str:
        return self.value


EventLike = Union[AnalyticsEventName, str]


def as_event_name(event: EventLike) -> AnalyticsEventName:
    """Wrap a plain string in StandardEvent; pass typed names through."""
    if isinstance(event, AnalyticsEvent):
        return event
    if isinstance(event, str):
        return StandardEvent(event)
    return event
