# =============================================================================
# Envelope - Normalized Invocation Container
# =============================================================================
# Every Lambda invocation (API Gateway proxy or direct invoke) is wrapped in
# an Envelope before processing. Gateway envelopes keep the body unparsed so
# the request can be rejected before the body is touched.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import uuid
from datetime import datetime, timezone


class EnvelopeKind(str, Enum):
    """How the relay was invoked."""
    GATEWAY = "gateway"      # API Gateway proxy: body + query-string auth
    DIRECT = "direct"        # Lambda invoke with the provider payload itself


@dataclass
class Envelope:
    """
    Normalized view of one invocation.

    Attributes:
        kind: gateway or direct
        request_id: Gateway request id, or a generated one
        payload: Gateway body (usually a JSON string) or the direct payload
        query_params: Gateway query-string parameters (None if absent)
        is_base64_encoded: Gateway flag for a base64 body
        raw_event: Original unmodified event
        timestamp: When the envelope was created
    """
    kind: EnvelopeKind
    request_id: str
    payload: Any
    query_params: Optional[Dict[str, Any]] = None
    is_base64_encoded: bool = False
    raw_event: Any = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def is_gateway_request(self) -> bool:
        return self.kind == EnvelopeKind.GATEWAY

    @property
    def auth_token(self) -> Optional[str]:
        """The ?auth= credential, if any. Never log this."""
        if not isinstance(self.query_params, dict):
            return None
        return self.query_params.get("auth")

    def describe(self) -> Dict[str, Any]:
        """Loggable summary. Excludes the body and credentials."""
        return {
            "kind": self.kind.value,
            "requestId": self.request_id,
            "hasQueryParams": self.query_params is not None,
            "isBase64Encoded": self.is_base64_encoded,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_gateway_event(cls, event: Dict[str, Any]) -> "Envelope":
        """Create envelope from an API Gateway proxy event."""
        request_context = event.get("requestContext") or {}
        return cls(
            kind=EnvelopeKind.GATEWAY,
            request_id=request_context.get("requestId") or str(uuid.uuid4()),
            payload=event.get("body"),
            query_params=event.get("queryStringParameters"),
            is_base64_encoded=bool(event.get("isBase64Encoded")),
            raw_event=event,
        )

    @classmethod
    def from_direct_event(cls, event: Any) -> "Envelope":
        """Create envelope from a direct invoke (object or array)."""
        return cls(
            kind=EnvelopeKind.DIRECT,
            request_id=str(uuid.uuid4()),
            payload=event,
            raw_event=event,
        )
