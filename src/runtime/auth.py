# =============================================================================
# Gateway Authentication
# =============================================================================
# Shared-secret check for requests arriving through API Gateway.
# Both sides are reduced to a SHA-256/base64 digest and compared over the
# full length of the configured digest, without early exit.
# =============================================================================

import base64
import hashlib
from typing import Any

from src.runtime.errors import ConfigError


def create_hash(value: str) -> str:
    """SHA-256 digest of value, base64-encoded."""
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


class Authenticator:
    """
    Compares an inbound credential against the configured secret.

    The secret digest is computed once; the secret itself is not kept.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ConfigError("Missing config: AUTH")
        self._expected = create_hash(secret)

    def authenticate(self, candidate: Any) -> bool:
        """
        Check a candidate credential.

        Every position of the configured digest is visited regardless of
        where the first mismatch is. Positions past the end of the candidate
        digest count as mismatches.

        Args:
            candidate: Value of the ?auth= query parameter (may be None)

        Returns:
            True if the candidate matches the configured secret
        """
        if not isinstance(candidate, str):
            return False

        actual = create_hash(candidate)
        equal = len(actual) == len(self._expected)
        for index, char in enumerate(self._expected):
            equal &= index < len(actual) and char == actual[index]
        return equal
