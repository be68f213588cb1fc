# =============================================================================
# SQS Queue Transport
# =============================================================================
# Push-by-name wrapper around a boto3 SQS client.
# Queue URLs are resolved once per name and cached for the process lifetime.
# =============================================================================

import json
import logging
import threading
from typing import Any, Dict

logger = logging.getLogger(__name__)


class SqsQueue:
    """
    Named-queue push transport.

    Usage:
        queue = SqsQueue(boto3.client("sqs", region_name="us-east-1"))
        queue.push("fxa-email-bounce-prod", {"notificationType": "Bounce", ...})
    """

    def __init__(self, client: Any):
        self.client = client
        self._queue_urls: Dict[str, str] = {}
        self._lock = threading.Lock()

    def queue_url(self, queue_name: str) -> str:
        """Resolve (and cache) the URL for a queue name."""
        with self._lock:
            url = self._queue_urls.get(queue_name)
        if url:
            return url

        url = self.client.get_queue_url(QueueName=queue_name)["QueueUrl"]
        with self._lock:
            self._queue_urls[queue_name] = url
        logger.debug(f"Resolved queue {queue_name} -> {url}")
        return url

    def push(self, queue_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send one JSON message.

        Raises:
            botocore.exceptions.ClientError / BotoCoreError on failure
        """
        response = self.client.send_message(
            QueueUrl=self.queue_url(queue_name),
            MessageBody=json.dumps(payload, ensure_ascii=False, default=str),
        )
        return response
