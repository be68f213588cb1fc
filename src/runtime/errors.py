# =============================================================================
# Relay Errors
# =============================================================================
# Exception taxonomy for the relay pipeline.
# Startup errors are fatal; per-event errors become dispatch outcomes;
# anything reaching the entry point becomes an HTTP status.
# =============================================================================

from typing import Any, List


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigError(RelayError):
    """Missing or invalid process configuration. Raised at startup."""


class AuthError(RelayError):
    """Gateway request without a valid credential."""


class PayloadError(RelayError):
    """Gateway body could not be decoded."""


class RouteError(RelayError):
    """Notification type has no destination queue."""

    def __init__(self, notification_type: Any):
        self.notification_type = notification_type
        super().__init__(f"No queue for notification type: {notification_type!r}")


class DispatchError(RelayError):
    """Push of a single event to its queue failed."""

    def __init__(self, queue_name: str, cause: BaseException):
        self.queue_name = queue_name
        self.cause = cause
        super().__init__(f"Failed to push to {queue_name}: {cause}")


class BatchDispatchError(RelayError):
    """One or more events in a batch failed to dispatch."""

    def __init__(self, failures: List[Any]):
        self.failures = failures
        super().__init__(f"{len(failures)} event(s) failed to dispatch")
