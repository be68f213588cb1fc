# =============================================================================
# SendGrid Event Webhook Adapter
# =============================================================================
# Ref: https://docs.sendgrid.com/for-developers/tracking-events/event
#
# SendGrid posts a JSON array of events. Only bounce, dropped, spamreport
# and delivered are relayed; engagement events (open, click, ...) and
# intermediate states (processed, deferred) are ignored.
# =============================================================================

from typing import Any, Dict, Optional

from src.providers.base import (
    CanonicalEvent, Marshaller, NotificationType,
    compact, require, timestamp_from_epoch,
)

BLOCKED_BOUNCE_TYPE = "blocked"


def message_id(raw: Dict[str, Any]) -> Optional[str]:
    """
    Original message id.

    sg_message_id carries a ".filterNNNN..." suffix added by SendGrid's
    pipeline; the part before the first dot is the id assigned at send time.
    """
    sg_message_id = raw.get("sg_message_id")
    if isinstance(sg_message_id, str) and sg_message_id:
        return sg_message_id.split(".", 1)[0]
    smtp_id = raw.get("smtp-id")
    if isinstance(smtp_id, str) and smtp_id:
        return smtp_id.strip("<>")
    return None


class SendGridMarshaller(Marshaller):
    provider = "sendgrid"
    EVENT_TYPES = {
        "bounce": NotificationType.BOUNCE,
        "dropped": NotificationType.BOUNCE,
        "spamreport": NotificationType.COMPLAINT,
        "delivered": NotificationType.DELIVERY,
    }

    def event_type(self, raw: Dict[str, Any]) -> Optional[str]:
        return raw.get("event")

    def build(self, raw: Dict[str, Any], notification_type: NotificationType) -> CanonicalEvent:
        email = require(raw, "email")
        timestamp = timestamp_from_epoch(raw.get("timestamp"))
        feedback_id = raw.get("sg_event_id")

        mail = compact({
            "timestamp": timestamp,
            "messageId": message_id(raw),
            "destination": [email],
        })

        if notification_type == NotificationType.BOUNCE:
            detail = self._bounce(raw, email)
        elif notification_type == NotificationType.COMPLAINT:
            detail = {
                "complainedRecipients": [{"emailAddress": email}],
                "complaintFeedbackType": "abuse",
            }
        else:
            detail = compact({
                "recipients": [email],
                "smtpResponse": raw.get("response"),
            })

        detail.update(compact({"timestamp": timestamp, "feedbackId": feedback_id}))
        return CanonicalEvent(notification_type, mail=mail, detail=detail, provider=self.provider)

    def _bounce(self, raw: Dict[str, Any], email: str) -> Dict[str, Any]:
        if raw.get("event") == "dropped":
            bounce_type, bounce_sub_type = "Permanent", "Suppressed"
        elif raw.get("type") == BLOCKED_BOUNCE_TYPE:
            bounce_type, bounce_sub_type = "Transient", "General"
        else:
            bounce_type, bounce_sub_type = "Permanent", "General"

        recipient = compact({
            "emailAddress": email,
            "status": raw.get("status"),
            "diagnosticCode": raw.get("reason"),
        })
        return {
            "bounceType": bounce_type,
            "bounceSubType": bounce_sub_type,
            "bouncedRecipients": [recipient],
        }
