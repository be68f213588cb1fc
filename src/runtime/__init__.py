# =============================================================================
# Runtime Package - Relay Pipeline Building Blocks
# =============================================================================
# Configuration, authentication, invocation parsing, routing and dispatch.
# Entry points live in src.app; Deps (src.runtime.deps) wires these
# together and is imported directly to keep provider imports acyclic.
# =============================================================================

from src.runtime.auth import Authenticator, create_hash
from src.runtime.config import RelayConfig, load_config
from src.runtime.envelope import Envelope, EnvelopeKind
from src.runtime.errors import (
    AuthError, BatchDispatchError, ConfigError, DispatchError,
    PayloadError, RelayError, RouteError,
)
from src.runtime.parse_event import detect_event_source, extract_raw_events, parse_event

__all__ = [
    "Authenticator",
    "create_hash",
    "RelayConfig",
    "load_config",
    "Envelope",
    "EnvelopeKind",
    "AuthError",
    "BatchDispatchError",
    "ConfigError",
    "DispatchError",
    "PayloadError",
    "RelayError",
    "RouteError",
    "detect_event_source",
    "extract_raw_events",
    "parse_event",
]
