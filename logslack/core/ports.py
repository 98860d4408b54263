"""Port interfaces for the logslack notification system.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - NotificationPort: Deliver rendered messages to the chat platform

2. **Driving Ports** (adapters/external systems call into core)
   - LogBatchPort: Entry point for one invocation's batch of log events
"""

from abc import ABC, abstractmethod

from .models import BatchResult, LogEvent, NotificationMessage


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class NotificationPort(ABC):
    """Port for delivering notifications to developers.

    Implementations must treat each call as a single best-effort delivery:
    no retries, no inspection of the response body.
    """

    @abstractmethod
    async def send(self, message: NotificationMessage) -> None:
        """Deliver one notification.

        Args:
            message: The assembled notification.

        Raises:
            Exception: If delivery fails (transport error, rejected request).
                The caller records the failure without affecting other
                deliveries in the same batch.
        """


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class LogBatchPort(ABC):
    """Port for processing one batch of log events.

    Called by the Lambda handler, the CLI and the webhook receiver.
    """

    @abstractmethod
    async def process_batch(self, events: list[LogEvent]) -> BatchResult:
        """Parse, filter, order, format and dispatch a batch.

        Args:
            events: Envelope events in any order.

        Returns:
            Summary counters for the batch.

        Raises:
            json.JSONDecodeError: If any record is not valid JSON; nothing
                is dispatched in that case.
            Exception: The first dispatch failure, re-raised after every
                dispatch of the batch has settled.
        """
