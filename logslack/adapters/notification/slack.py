"""Slack incoming-webhook notification adapter.

Implements NotificationPort by posting each rendered message to a
Slack incoming webhook.
"""

import logging

import httpx

from logslack.core.models import NotificationMessage
from logslack.core.ports import NotificationPort

logger = logging.getLogger(__name__)

DEFAULT_SLACK_HOST = "hooks.slack.com"


class SlackWebhookNotificationAdapter(NotificationPort):
    """Posts notifications to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_path: str,
        host: str = DEFAULT_SLACK_HOST,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Slack notification adapter.

        Args:
            webhook_path: Path part of the incoming webhook URL
                (e.g. /services/T000/B000/XXXX).
            host: Webhook host (default: hooks.slack.com).
            timeout_seconds: Per-request timeout.
            transport: Optional httpx transport, used by tests.
        """
        self.webhook_path = webhook_path
        self.host = host
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client.

        Returns:
            httpx.AsyncClient bound to the webhook host.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"https://{self.host}",
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, message: NotificationMessage) -> None:
        """Post one message; non-2xx responses count as failures."""
        try:
            client = await self._get_client()
            response = await client.post(self.webhook_path, json=message.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Slack rejected notification: {e.response.status_code}",
                extra={"channel": message.channel, "title": message.text},
            )
            raise
        except httpx.RequestError as e:
            logger.error(
                f"Failed to send Slack notification: {e}",
                extra={"channel": message.channel, "title": message.text},
            )
            raise

        logger.debug(
            "Sent Slack notification",
            extra={"channel": message.channel, "title": message.text},
        )
