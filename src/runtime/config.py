# =============================================================================
# Relay Configuration
# =============================================================================
# Process-wide configuration, read from the environment once at cold start.
# Immutable after load; passed to components through Deps.
# =============================================================================

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from src.runtime.errors import ConfigError

SUPPORTED_PROVIDERS = ("sendgrid", "socketlabs")
DEFAULT_MAX_WORKERS = 10


@dataclass(frozen=True)
class RelayConfig:
    """
    Relay configuration.

    Attributes:
        auth_secret: Shared secret gateway requests must present as ?auth=
        sqs_suffix: Environment suffix appended to every queue name
        provider: Email provider whose webhook format is accepted
        sqs_region: Region of the destination queues
        sqs_access_key: Explicit access key (None = default credential chain)
        sqs_secret_key: Explicit secret key (None = default credential chain)
        max_workers: Upper bound on concurrent pushes per invocation
    """
    auth_secret: str = field(repr=False)
    sqs_suffix: str
    provider: str
    sqs_region: str
    sqs_access_key: Optional[str] = field(default=None, repr=False)
    sqs_secret_key: Optional[str] = field(default=None, repr=False)
    max_workers: int = DEFAULT_MAX_WORKERS

    @property
    def has_explicit_credentials(self) -> bool:
        return bool(self.sqs_access_key and self.sqs_secret_key)


def _get_env(environ: Mapping[str, str], key: str, default: str = "") -> str:
    return (environ.get(key) or default).strip()


def load_config(environ: Mapping[str, str] = None) -> RelayConfig:
    """
    Build RelayConfig from environment variables.

    Raises:
        ConfigError: if a required value is missing or invalid
    """
    if environ is None:
        environ = os.environ

    auth = _get_env(environ, "AUTH")
    suffix = _get_env(environ, "SQS_SUFFIX")
    provider = _get_env(environ, "PROVIDER")

    missing = [name for name, value in (("AUTH", auth), ("SQS_SUFFIX", suffix), ("PROVIDER", provider)) if not value]
    if missing:
        raise ConfigError(f"Missing config: {', '.join(missing)}")

    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigError(
            f"Only the following providers are supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    region = _get_env(environ, "SQS_REGION") or _get_env(environ, "AWS_REGION")
    if not region:
        raise ConfigError("Missing config: SQS_REGION")

    access_key = _get_env(environ, "SQS_ACCESS_KEY") or None
    secret_key = _get_env(environ, "SQS_SECRET_KEY") or None
    if bool(access_key) != bool(secret_key):
        raise ConfigError("SQS_ACCESS_KEY and SQS_SECRET_KEY must be set together")

    raw_workers = _get_env(environ, "DISPATCH_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))
    try:
        max_workers = int(raw_workers)
    except ValueError:
        raise ConfigError(f"DISPATCH_MAX_WORKERS must be an integer, got {raw_workers!r}")
    if max_workers < 1:
        raise ConfigError("DISPATCH_MAX_WORKERS must be at least 1")

    return RelayConfig(
        auth_secret=auth,
        sqs_suffix=suffix,
        provider=provider,
        sqs_region=region,
        sqs_access_key=access_key,
        sqs_secret_key=secret_key,
        max_workers=max_workers,
    )
