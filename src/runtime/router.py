# =============================================================================
# Queue Router
# =============================================================================
# Maps a canonical notification type to its destination queue name.
# Names are computed once from the environment suffix.
# =============================================================================

from typing import Any, Dict

from src.providers.base import NotificationType
from src.runtime.errors import RouteError

QUEUE_PREFIX = "fxa-email"


def build_queue_names(suffix: str) -> Dict[NotificationType, str]:
    """<prefix>-<kind>-<suffix> for every notification type."""
    return {
        notification_type: f"{QUEUE_PREFIX}-{notification_type.value.lower()}-{suffix}"
        for notification_type in NotificationType
    }


class QueueRouter:
    """Pure lookup from notification type to queue name."""

    def __init__(self, suffix: str):
        self._queues = build_queue_names(suffix)

    def resolve_queue(self, notification_type: Any) -> str:
        """
        Get the destination queue for a notification type.

        Raises:
            RouteError: if the type is not one of Bounce, Complaint, Delivery
        """
        try:
            return self._queues[NotificationType(notification_type)]
        except (ValueError, KeyError, TypeError):
            raise RouteError(notification_type)

    def queue_names(self) -> Dict[str, str]:
        return {t.value: name for t, name in self._queues.items()}
