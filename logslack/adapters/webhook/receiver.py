"""HTTP webhook receiver for log batches.

Accepts the same subscription payload a Lambda invocation receives
({"awslogs": {"data": ...}}) and forwards the decoded events to the
LogBatchPort for processing.
"""

import logging
from typing import Any

from logslack.adapters.envelope.cloudwatch import events_from_invocation
from logslack.core.ports import LogBatchPort

logger = logging.getLogger(__name__)


class WebhookReceiver:
    """Decodes webhook payloads and hands them to the batch port."""

    def __init__(self, batch_port: LogBatchPort):
        """Initialize the webhook receiver.

        Args:
            batch_port: LogBatchPort implementation processing the batches.
        """
        self.batch_port = batch_port

    async def handle_log_batch(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Handle a request carrying a batch of log events.

        Returns:
            Dictionary with the batch summary.

        Raises:
            EnvelopeDecodeError: If the payload cannot be decoded.
            Exception: If a record is malformed or a dispatch fails.
        """
        events = events_from_invocation(payload)
        result = await self.batch_port.process_batch(events)
        logger.info(
            "Log batch processed via webhook",
            extra={"received": result.received, "dispatched": result.dispatched},
        )
        return {
            "status": "success",
            "operation": "logs",
            "result": {
                "received": result.received,
                "excluded": result.excluded,
                "dispatched": result.dispatched,
                "failed": result.failed,
            },
        }
