# =============================================================================
# Relay Handler
# =============================================================================
# Entry point for provider webhooks, via API Gateway or direct invoke.
# Authenticates gateway requests, marshals provider events and fans them
# out to the notification queues. One aggregate response per invocation.
# =============================================================================

import logging
from typing import Any, Dict, List

from src.providers.base import CanonicalEvent, Marshaller
from src.runtime.deps import Deps, get_deps
from src.runtime.dispatch import raise_for_failures
from src.runtime.envelope import Envelope
from src.runtime.errors import AuthError, BatchDispatchError, PayloadError
from src.runtime.parse_event import extract_raw_events, parse_event

logger = logging.getLogger(__name__)


def relay_response(status_code: int, body: str) -> Dict[str, Any]:
    """Format response for the API Gateway Lambda proxy integration."""
    return {
        "statusCode": status_code,
        "body": body,
        "isBase64Encoded": False,
    }


def authorize(envelope: Envelope, deps: Deps) -> None:
    """
    Gate for gateway requests. Direct invokes are trusted.

    Raises:
        AuthError: query parameters missing or credential rejected
    """
    if not envelope.is_gateway_request:
        return
    if envelope.query_params is None:
        raise AuthError("Missing query parameters")
    if not deps.authenticator.authenticate(envelope.auth_token):
        raise AuthError("Invalid credential")


def marshall_events(raw_events: List[Any], marshaller: Marshaller) -> List[CanonicalEvent]:
    """Marshal in order, dropping payloads the provider adapter ignores."""
    events = []
    for raw in raw_events:
        event = marshaller.marshall(raw)
        if event is not None:
            events.append(event)

    dropped = len(raw_events) - len(events)
    if dropped:
        logger.info(f"Ignored {dropped} of {len(raw_events)} {marshaller.provider} events")
    return events


def relay_handler(event: Any, context: Any = None, deps: Deps = None) -> Dict[str, Any]:
    """
    Relay entry point.

    Handles:
    - API Gateway proxy events: {"body": "<json>", "queryStringParameters": {"auth": ...}}
    - Direct invokes with one provider event or an array of them

    Args:
        event: Lambda event
        context: Lambda context
        deps: Dependency container (uses the process-wide one if not provided)

    Returns:
        {"statusCode": 200|401|500, "body": str, "isBase64Encoded": False}
    """
    try:
        if deps is None:
            deps = get_deps()

        envelope = parse_event(event)
        logger.debug(f"RELAY_HANDLER envelope: {envelope.describe()}")

        authorize(envelope, deps)

        raw_events = extract_raw_events(envelope)
        events = marshall_events(raw_events, deps.marshaller)

        outcomes = deps.dispatcher.dispatch_all(events)
        raise_for_failures(outcomes)

        return relay_response(200, f"Processed {len(outcomes)} events")

    except AuthError as e:
        logger.warning(f"Rejected gateway request: {e}")
        return relay_response(401, "Unauthorized")
    except PayloadError as e:
        logger.warning(f"Unreadable gateway body: {e}")
        return relay_response(500, "Internal Server Error")
    except BatchDispatchError as e:
        logger.error(f"Batch failed: {e}")
        return relay_response(500, "Internal Server Error")
    except Exception as e:
        logger.exception(f"Unexpected relay error: {e}")
        return relay_response(500, "Internal Server Error")
