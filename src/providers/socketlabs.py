# =============================================================================
# SocketLabs Notification Adapter
# =============================================================================
# Ref: https://www.socketlabs.com/api-reference/notification-api/
#
# SocketLabs posts one event per request with a "Type" discriminator.
# Failed, Complaint and Delivered are relayed; Tracking and Validation
# requests are ignored.
# =============================================================================

from typing import Any, Dict, Optional

from src.providers.base import (
    CanonicalEvent, Marshaller, NotificationType,
    compact, require, timestamp_from_iso,
)

# BounceStatus / FailureType values that indicate a temporary failure
TRANSIENT_FAILURES = {"softbounce", "soft", "transient", "temporary", "deferred"}


def is_transient(raw: Dict[str, Any]) -> bool:
    for key in ("BounceStatus", "FailureType"):
        value = raw.get(key)
        if isinstance(value, str) and value.replace(" ", "").lower() in TRANSIENT_FAILURES:
            return True
    return False


class SocketLabsMarshaller(Marshaller):
    provider = "socketlabs"
    EVENT_TYPES = {
        "Failed": NotificationType.BOUNCE,
        "Complaint": NotificationType.COMPLAINT,
        "Delivered": NotificationType.DELIVERY,
    }

    def event_type(self, raw: Dict[str, Any]) -> Optional[str]:
        return raw.get("Type")

    def build(self, raw: Dict[str, Any], notification_type: NotificationType) -> CanonicalEvent:
        address = require(raw, "Address")
        timestamp = timestamp_from_iso(raw.get("DateTime"))
        msg_id = raw.get("MessageId")

        mail = compact({
            "timestamp": timestamp,
            "messageId": msg_id,
            "destination": [address],
        })

        if notification_type == NotificationType.BOUNCE:
            detail = {
                "bounceType": "Transient" if is_transient(raw) else "Permanent",
                "bounceSubType": "General",
                "bouncedRecipients": [compact({
                    "emailAddress": address,
                    "status": raw.get("FailureCode"),
                    "diagnosticCode": raw.get("DiagnosticCode") or raw.get("Reason"),
                })],
            }
        elif notification_type == NotificationType.COMPLAINT:
            detail = compact({
                "complainedRecipients": [{"emailAddress": address}],
                "complaintFeedbackType": raw.get("FblType"),
                "userAgent": raw.get("UserAgent"),
            })
        else:
            detail = compact({
                "recipients": [address],
                "smtpResponse": raw.get("Response"),
                "reportingMTA": raw.get("RemoteMta"),
            })

        detail.update(compact({"timestamp": timestamp, "feedbackId": raw.get("MailingId") or msg_id}))
        return CanonicalEvent(notification_type, mail=mail, detail=detail, provider=self.provider)
