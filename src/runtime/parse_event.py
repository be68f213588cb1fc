# =============================================================================
# Event Parser - Detect Invocation Shape and Extract Raw Events
# =============================================================================
# A truthy "body" marks an API Gateway proxy event; anything else is a
# direct invoke carrying the provider payload itself.
# =============================================================================

import base64
import binascii
import json
import logging
from typing import Any, List

from src.runtime.envelope import Envelope, EnvelopeKind
from src.runtime.errors import PayloadError

logger = logging.getLogger(__name__)


class EventSource:
    """Event source identifiers."""
    API_GATEWAY = "api_gateway"
    DIRECT = "direct"


def detect_event_source(event: Any) -> str:
    """Return api_gateway if the event carries a body, otherwise direct."""
    if isinstance(event, dict) and event.get("body"):
        return EventSource.API_GATEWAY
    return EventSource.DIRECT


def parse_event(event: Any) -> Envelope:
    """Wrap a Lambda event in an Envelope without decoding the body."""
    source = detect_event_source(event)
    logger.debug(f"Detected event source: {source}")

    if source == EventSource.API_GATEWAY:
        return Envelope.from_gateway_event(event)
    return Envelope.from_direct_event(event)


def _decode_body(envelope: Envelope) -> Any:
    body = envelope.payload

    if envelope.is_base64_encoded and isinstance(body, str):
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise PayloadError(f"Invalid base64 body: {e}") from e

    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")

    if isinstance(body, str):
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Invalid JSON body: {e}") from e

    return body


def extract_raw_events(envelope: Envelope) -> List[Any]:
    """
    Get the list of raw provider events carried by an envelope.

    A single object becomes a one-element list; a list passes through.

    Raises:
        PayloadError: if a gateway body cannot be decoded
    """
    if envelope.kind == EnvelopeKind.GATEWAY:
        data = _decode_body(envelope)
    else:
        data = envelope.payload

    if isinstance(data, list):
        return data
    return [data]
