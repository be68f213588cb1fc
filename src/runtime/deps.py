# =============================================================================
# Dependency Injection Container
# =============================================================================
# Process-wide configuration, SQS client and pipeline components.
# Built once per Lambda container and shared read-only by every invocation.
# =============================================================================

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

import boto3

from src.providers import Marshaller, get_marshaller
from src.runtime.auth import Authenticator
from src.runtime.config import RelayConfig, load_config
from src.runtime.dispatch import Dispatcher
from src.runtime.queue import SqsQueue
from src.runtime.router import QueueRouter

logger = logging.getLogger(__name__)


@dataclass
class Deps:
    """
    Dependency injection container for the relay.

    The SQS client is lazy-loaded on first access; everything that validates
    configuration (authenticator, marshaller, router) is built eagerly by
    create_deps() so a misconfigured container fails at cold start.

    Usage:
        deps = create_deps()
        deps.authenticator.authenticate(token)
        deps.dispatcher.dispatch_all(events)
    """
    config: RelayConfig

    # ==========================================================================
    # AWS Clients (lazy-loaded)
    # ==========================================================================

    @cached_property
    def sqs(self):
        """SQS client. Explicit keys if configured, else the default chain."""
        kwargs = {"region_name": self.config.sqs_region}
        if self.config.has_explicit_credentials:
            kwargs["aws_access_key_id"] = self.config.sqs_access_key
            kwargs["aws_secret_access_key"] = self.config.sqs_secret_key
        return boto3.client("sqs", **kwargs)

    @cached_property
    def queue(self) -> SqsQueue:
        return SqsQueue(self.sqs)

    # ==========================================================================
    # Pipeline Components
    # ==========================================================================

    @cached_property
    def authenticator(self) -> Authenticator:
        return Authenticator(self.config.auth_secret)

    @cached_property
    def marshaller(self) -> Marshaller:
        return get_marshaller(self.config.provider)

    @cached_property
    def router(self) -> QueueRouter:
        return QueueRouter(self.config.sqs_suffix)

    @cached_property
    def dispatcher(self) -> Dispatcher:
        return Dispatcher(self.router, self.queue, max_workers=self.config.max_workers)

    def validate(self) -> "Deps":
        """Build every config-dependent component now."""
        _ = self.authenticator, self.marshaller, self.router
        return self


def create_deps(config: RelayConfig = None) -> Deps:
    """Create and validate a new Deps instance."""
    deps = Deps(config=config or load_config()).validate()
    logger.info(
        f"Relay configured: provider={deps.config.provider} "
        f"events={deps.marshaller.supported_event_types()} "
        f"queues={sorted(deps.router.queue_names().values())}"
    )
    return deps


# Global deps instance, one per Lambda container
_global_deps: Optional[Deps] = None


def get_deps() -> Deps:
    """Get or create global Deps instance."""
    global _global_deps
    if _global_deps is None:
        _global_deps = create_deps()
    return _global_deps
