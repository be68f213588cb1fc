# =============================================================================
# Provider Adapters
# =============================================================================
# Closed registry of webhook formats. Adding a provider means adding a
# Marshaller subclass here; nothing downstream changes.
# =============================================================================

from typing import Dict, Type

from src.providers.base import CanonicalEvent, Marshaller, NotificationType
from src.providers.sendgrid import SendGridMarshaller
from src.providers.socketlabs import SocketLabsMarshaller
from src.runtime.errors import ConfigError

PROVIDERS: Dict[str, Type[Marshaller]] = {
    SendGridMarshaller.provider: SendGridMarshaller,
    SocketLabsMarshaller.provider: SocketLabsMarshaller,
}


def get_marshaller(provider: str) -> Marshaller:
    """Instantiate the marshaller for a provider name."""
    marshaller_cls = PROVIDERS.get(provider)
    if marshaller_cls is None:
        raise ConfigError(
            f"Only the following providers are supported: {', '.join(sorted(PROVIDERS))}"
        )
    return marshaller_cls()


__all__ = [
    "CanonicalEvent",
    "Marshaller",
    "NotificationType",
    "PROVIDERS",
    "SendGridMarshaller",
    "SocketLabsMarshaller",
    "get_marshaller",
]
