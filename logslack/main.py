"""Composition root for the logslack notification system.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Entry point selection (Lambda handler, CLI, webhook)
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from logslack.adapters.envelope.cloudwatch import events_from_invocation
from logslack.adapters.notification.slack import SlackWebhookNotificationAdapter
from logslack.adapters.notification.stdout import StdoutNotificationAdapter
from logslack.adapters.webhook.http_server import WebhookHTTPServer
from logslack.adapters.webhook.receiver import WebhookReceiver
from logslack.config import Settings, load_settings
from logslack.core.assembler import MessageAssembler
from logslack.core.batch_service import LogBatchService
from logslack.core.models import BatchResult
from logslack.core.ports import NotificationPort

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_notification(settings: Settings) -> NotificationPort:
    """Instantiate the notification adapter selected in configuration."""
    if settings.notification_backend == "stdout":
        logger.info("Notification adapter: Stdout")
        return StdoutNotificationAdapter(verbose=settings.debug)

    if not settings.slack_path:
        raise ValueError("Slack backend selected but SLACK_PATH not set")
    logger.info("Notification adapter: Slack")
    return SlackWebhookNotificationAdapter(
        webhook_path=settings.slack_path,
        host=settings.slack_host,
        timeout_seconds=settings.dispatch_timeout_seconds,
    )


def build_service(settings: Settings, notification: NotificationPort) -> LogBatchService:
    """Wire the core services around an already created notification adapter."""
    assembler = MessageAssembler(
        channel=settings.channel_name,
        application_name=settings.application_name,
    )
    return LogBatchService(
        rules=settings.formatting_rules(),
        notification=notification,
        assembler=assembler,
        log_search_url=settings.deep_link_prefix,
    )


async def process_invocation(settings: Settings, event: dict[str, Any]) -> BatchResult:
    """Process one invocation payload end to end.

    Raises:
        EnvelopeDecodeError: If the payload cannot be decoded.
        Exception: The first dispatch failure of the batch.
    """
    events = events_from_invocation(event)
    notification = build_notification(settings)
    try:
        return await build_service(settings, notification).process_batch(events)
    finally:
        if hasattr(notification, "close"):
            await notification.close()


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """AWS Lambda entry point for CloudWatch Logs subscriptions."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    result = asyncio.run(process_invocation(settings, event))
    return {
        "received": result.received,
        "excluded": result.excluded,
        "dispatched": result.dispatched,
        "failed": result.failed,
    }


async def _read_event(settings: Settings) -> dict[str, Any]:
    """Read the invocation event for CLI mode from a file or stdin."""
    if settings.event_file:
        text = await asyncio.to_thread(Path(settings.event_file).read_text, "utf-8")
    else:
        text = await asyncio.to_thread(sys.stdin.read)
    return json.loads(text)


async def _run_webhook(settings: Settings) -> None:
    notification = build_notification(settings)
    service = build_service(settings, notification)
    http_server = WebhookHTTPServer(
        webhook_receiver=WebhookReceiver(batch_port=service),
        host=settings.webhook_host,
        port=settings.webhook_port,
        api_key=settings.webhook_api_key if settings.webhook_api_key else None,
        require_auth=settings.webhook_require_auth,
    )
    await http_server.start()

    try:
        while True:
            await asyncio.sleep(1)
    finally:
        await http_server.stop()
        if hasattr(notification, "close"):
            await notification.close()


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the selected run mode.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Select and start run mode
    """
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    logger.info(f"Starting logslack in {settings.run_mode} mode...")

    if settings.run_mode == "cli":
        event = await _read_event(settings)
        result = await process_invocation(settings, event)
        logger.info(
            f"Dispatched {result.dispatched} of {result.received} log events "
            f"({result.excluded} excluded)"
        )
    elif settings.run_mode == "webhook":
        await _run_webhook(settings)
    else:
        logger.error(f"Unknown run mode: {settings.run_mode}")
        sys.exit(1)


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
