# =============================================================================
# Application Entry Points
# =============================================================================
# Thin transport adapter that parses the invocation and runs the relay.
# =============================================================================

from src.app.relay_handler import relay_handler, relay_response

__all__ = [
    "relay_handler",
    "relay_response",
]
