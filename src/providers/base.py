# =============================================================================
# Provider Marshaller Base
# =============================================================================
# Canonical event model and the Marshaller contract every provider adapter
# implements. Output is shaped like an SES notification so consumers of the
# queues stay provider-agnostic.
# =============================================================================

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Canonical notification types. The only routing key downstream."""
    BOUNCE = "Bounce"
    COMPLAINT = "Complaint"
    DELIVERY = "Delivery"

    @property
    def detail_key(self) -> str:
        """Key holding the type-specific detail in the SES-style payload."""
        return self.value.lower()


@dataclass
class CanonicalEvent:
    """
    Provider-independent delivery-status event.

    Attributes:
        notification_type: Bounce, Complaint or Delivery
        mail: Message-level fields (timestamp, messageId, destination)
        detail: Type-specific fields (bounce / complaint / delivery object)
        provider: Name of the provider the event came from
    """
    notification_type: NotificationType
    mail: Dict[str, Any] = field(default_factory=dict)
    detail: Dict[str, Any] = field(default_factory=dict)
    provider: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable payload pushed to the queue."""
        notification_type = NotificationType(self.notification_type)
        return {
            "notificationType": notification_type.value,
            "mail": self.mail,
            notification_type.detail_key: self.detail,
        }


# =============================================================================
# HELPERS
# =============================================================================

def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a Z suffix, as SES emits."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_timestamp() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def timestamp_from_epoch(value: Any) -> str:
    """Convert unix seconds (int, float or numeric string)."""
    try:
        return format_timestamp(datetime.fromtimestamp(float(value), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning(f"Unparseable epoch timestamp {value!r}, using current time")
        return now_timestamp()


def timestamp_from_iso(value: Any) -> str:
    """Convert an ISO-8601 string. Naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return format_timestamp(parsed)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Unparseable ISO timestamp {value!r}, using current time")
        return now_timestamp()


def require(raw: Dict[str, Any], key: str) -> str:
    """Fetch a required non-empty string field."""
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"missing required field '{key}'")
    return value.strip()


def compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None or empty string."""
    return {k: v for k, v in data.items() if v is not None and v != ""}


# =============================================================================
# MARSHALLER CONTRACT
# =============================================================================

class Marshaller:
    """
    Converts one raw provider payload into a CanonicalEvent, or None.

    Subclasses set `provider` and `EVENT_TYPES` and implement `event_type`
    and `build`. Unknown event types and malformed payloads yield None;
    marshall() never raises for a single bad payload.
    """
    provider: str = ""
    EVENT_TYPES: Dict[str, NotificationType] = {}

    def event_type(self, raw: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError

    def build(self, raw: Dict[str, Any], notification_type: NotificationType) -> CanonicalEvent:
        raise NotImplementedError

    def supported_event_types(self) -> List[str]:
        return sorted(self.EVENT_TYPES)

    def marshall(self, raw: Any) -> Optional[CanonicalEvent]:
        if not isinstance(raw, dict):
            logger.debug(f"[{self.provider}] Dropping non-object payload: {type(raw).__name__}")
            return None

        try:
            event_type = self.event_type(raw)
            notification_type = self.EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None
            if notification_type is None:
                logger.debug(f"[{self.provider}] Ignoring event type: {event_type!r}")
                return None
            return self.build(raw, notification_type)
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.warning(f"[{self.provider}] Dropping malformed event: {e}")
            return None
