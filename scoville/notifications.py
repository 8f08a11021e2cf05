"""Forward opened push notifications as analytics events."""

from typing import TYPE_CHECKING, Any, Mapping, Optional

from scoville.events import AnalyticsEvent
from scoville.logger import LogCategory, ScovilleLogger, get_logger

if TYPE_CHECKING:
    from scoville.client import Scoville


def track_notification_opened(
    client: "Scoville",
    user_info: Mapping[str, Any],
    log: Optional[ScovilleLogger] = None,
) -> bool:
    """
    Track "notification_opened" for an inbound push payload.

    Args:
        client: Client the event is tracked through
        user_info: Push payload; only its "notification_id" string is used
        log: Logger for the missing-field warning (defaults to client.log)

    Returns:
        True if an event was handed to track(), False if the payload had no usable id
    """
    notification_id = user_info.get("notification_id")
    if not isinstance(notification_id, str):
        (log or client.log).warning(LogCategory.NOTIFICATIONS, "notification_id missing in payload")
        return False

    client.track(AnalyticsEvent.NOTIFICATION_OPENED, {"notification_id": notification_id})
    return True
