import logging
import os
from typing import Any, Dict

from src.app.relay_handler import relay_handler
from src.runtime.deps import get_deps

# ---------- Logger ----------
logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

# =============================================================================
# COLD START
# =============================================================================
# Configuration is validated when the module is imported. A missing secret,
# suffix or unsupported provider raises ConfigError here and the container
# never serves a request.
# =============================================================================
DEPS = get_deps()


def main(event: Any, context: Any = None) -> Dict[str, Any]:
    """Lambda handler."""
    return relay_handler(event, context, deps=DEPS)


lambda_handler = main
