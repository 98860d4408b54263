"""Stdout notification adapter.

Implements NotificationPort by printing the webhook payload to the
terminal instead of posting it, for dry runs and local testing.
"""

import asyncio
import json
import logging

from logslack.core.models import NotificationMessage
from logslack.core.ports import NotificationPort

logger = logging.getLogger(__name__)


class StdoutNotificationAdapter(NotificationPort):
    """Prints notifications to stdout."""

    def __init__(self, verbose: bool = False):
        """Initialize stdout notification adapter.

        Args:
            verbose: If True, print the full JSON payload instead of a
                plain-text rendering.
        """
        self.verbose = verbose

    async def send(self, message: NotificationMessage) -> None:
        """Print one message."""
        if self.verbose:
            output = json.dumps(message.to_payload(), indent=2)
        else:
            output = self._format_message(message)
        await asyncio.to_thread(print, output)

    @staticmethod
    def _format_message(message: NotificationMessage) -> str:
        """Render blocks as plain text, one section per paragraph."""
        lines = [
            "=" * 80,
            f"{message.text}  [{message.color.name}]  #{message.channel}",
            "=" * 80,
        ]
        for block in message.blocks:
            if block.get("type") == "divider":
                lines.append("-" * 80)
                continue
            lines.append(block["text"]["text"])
            accessory = block.get("accessory")
            if accessory and accessory.get("url"):
                lines.append(f"  -> {accessory['url']}")
        lines.append("=" * 80)
        return "\n".join(lines)
