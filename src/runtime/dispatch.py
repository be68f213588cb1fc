# =============================================================================
# Event Dispatcher
# =============================================================================
# Pushes canonical events to their destination queues.
# A batch is fanned out concurrently and fanned back in once every push
# has settled. No retries here; that belongs to the transport or caller.
# =============================================================================

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from src.providers.base import CanonicalEvent
from src.runtime.errors import BatchDispatchError, DispatchError, RouteError
from src.runtime.queue import SqsQueue
from src.runtime.router import QueueRouter

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """Result of pushing one event."""
    notification_type: Any
    queue_name: Optional[str]
    ok: bool
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, notification_type: Any, queue_name: str) -> "DispatchOutcome":
        return cls(notification_type=notification_type, queue_name=queue_name, ok=True)

    @classmethod
    def failure(cls, notification_type: Any, queue_name: Optional[str],
                error: BaseException) -> "DispatchOutcome":
        return cls(notification_type=notification_type, queue_name=queue_name, ok=False, error=error)


class Dispatcher:
    """
    Routes and pushes canonical events.

    Args:
        router: QueueRouter for notification type -> queue name
        queue: Transport with push(queue_name, payload)
        max_workers: Upper bound on concurrent pushes in dispatch_all
    """

    def __init__(self, router: QueueRouter, queue: SqsQueue, max_workers: int = 10):
        self.router = router
        self.queue = queue
        self.max_workers = max_workers

    def dispatch(self, event: CanonicalEvent) -> DispatchOutcome:
        """Push one event. Failures are logged and returned, not raised."""
        notification_type = event.notification_type
        try:
            queue_name = self.router.resolve_queue(notification_type)
        except RouteError as e:
            logger.error(f"Failed to send event: {event}")
            logger.exception(f"Routing error: {e}")
            return DispatchOutcome.failure(notification_type, None, e)

        try:
            self.queue.push(queue_name, event.to_dict())
        except Exception as e:
            error = DispatchError(queue_name, e)
            logger.error(f"Failed to send event: {event}")
            logger.exception(f"Push to {queue_name} failed: {e}")
            return DispatchOutcome.failure(notification_type, queue_name, error)

        source = f" [{event.provider}]" if event.provider else ""
        logger.info(f"Sent: {getattr(notification_type, 'value', notification_type)}{source} -> {queue_name}")
        return DispatchOutcome.success(notification_type, queue_name)

    def dispatch_all(self, events: Sequence[CanonicalEvent]) -> List[DispatchOutcome]:
        """
        Push every event concurrently and wait for all of them.

        Returns:
            One outcome per event, in input order
        """
        if not events:
            return []

        workers = min(self.max_workers, len(events))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dispatch") as executor:
            return list(executor.map(self.dispatch, events))


def raise_for_failures(outcomes: Sequence[DispatchOutcome]) -> None:
    """Raise BatchDispatchError if any outcome failed."""
    failures = [outcome for outcome in outcomes if not outcome.ok]
    if failures:
        raise BatchDispatchError(failures)
