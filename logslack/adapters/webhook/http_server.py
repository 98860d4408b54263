"""HTTP entry point for log batches.

Serves the subscription payload over plain HTTP for deployments that do
not run as a Lambda function:

    POST /api/logs   {"awslogs": {"data": "..."}}
    GET  /health

The blocking http.server loop runs in a worker thread; each batch is
handed back to the asyncio loop that owns the notification adapter.
"""

import asyncio
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

from logslack.adapters.envelope.cloudwatch import EnvelopeDecodeError
from logslack.adapters.webhook.receiver import WebhookReceiver

logger = logging.getLogger(__name__)

LOGS_PATH = "/api/logs"
HEALTH_PATH = "/health"
MAX_BODY_SIZE = 1024 * 1024
BATCH_TIMEOUT_SECONDS = 30

# Raised for payloads the sender has to fix; anything else is a 500.
CLIENT_ERRORS = (EnvelopeDecodeError, json.JSONDecodeError)


def make_webhook_handler(
    webhook_receiver: WebhookReceiver,
    event_loop: asyncio.AbstractEventLoop,
    api_key: str | None,
) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to one receiver and loop.

    Args:
        webhook_receiver: Receiver that decodes and processes batches.
        event_loop: Loop the receiver's coroutines must run on.
        api_key: Expected key, or None to accept unauthenticated batches.
    """

    class LogBatchHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            if self.path == HEALTH_PATH:
                self._reply(200, {"status": "healthy"})
            else:
                self.send_error(404, "Not found")

        def do_POST(self) -> None:
            if not self._authorized():
                self.send_error(401, "Unauthorized: invalid or missing API key")
                return
            if self.path != LOGS_PATH:
                self.send_error(404, "Not found")
                return

            length = int(self.headers.get("Content-Length", 0))
            if length > MAX_BODY_SIZE:
                self.send_error(413, "Request body too large")
                return

            try:
                payload = json.loads(self.rfile.read(length) or b"{}")
            except json.JSONDecodeError:
                self.send_error(400, "Invalid JSON body")
                return

            future = asyncio.run_coroutine_threadsafe(
                webhook_receiver.handle_log_batch(payload), event_loop
            )
            try:
                result = future.result(timeout=BATCH_TIMEOUT_SECONDS)
            except CLIENT_ERRORS as e:
                logger.warning(f"Rejected log batch: {e}")
                self.send_error(400, "Invalid log batch")
                return
            except Exception as e:
                logger.error(f"Failed to process log batch: {e}", exc_info=True)
                self.send_error(500, "Internal server error")
                return
            self._reply(200, result)

        def _authorized(self) -> bool:
            if api_key is None:
                return True
            auth = self.headers.get("Authorization", "")
            if auth.startswith("Bearer "):
                presented = auth.removeprefix("Bearer ")
            else:
                presented = self.headers.get("X-API-Key", "")
            return bool(presented) and hmac.compare_digest(presented, api_key)

        def _reply(self, status: int, body: dict[str, Any]) -> None:
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps(body).encode())

        def log_message(self, format: str, *args: Any) -> None:
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return LogBatchHandler


class WebhookHTTPServer:
    """Runs the log batch HTTP entry point alongside the asyncio loop."""

    def __init__(
        self,
        webhook_receiver: WebhookReceiver,
        host: str = "0.0.0.0",
        port: int = 8080,
        api_key: str | None = None,
        require_auth: bool = False,
    ):
        """Initialize the HTTP server.

        Args:
            webhook_receiver: WebhookReceiver instance to handle requests.
            host: Host to listen on.
            port: Port to listen on; 0 picks a free port.
            api_key: Optional API key for authentication.
            require_auth: Whether batches must carry the API key.

        Raises:
            ValueError: If require_auth is set without an api_key.
        """
        if require_auth and not api_key:
            raise ValueError(
                "require_auth=True but no API key provided. "
                "Set WEBHOOK_API_KEY or disable WEBHOOK_REQUIRE_AUTH."
            )
        self.webhook_receiver = webhook_receiver
        self.host = host
        self.port = port
        self.api_key = api_key
        self.require_auth = require_auth
        self.server: HTTPServer | None = None
        self._serve_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        handler_class = make_webhook_handler(
            webhook_receiver=self.webhook_receiver,
            event_loop=asyncio.get_running_loop(),
            api_key=self.api_key if self.require_auth else None,
        )
        self.server = HTTPServer((self.host, self.port), handler_class)
        self._serve_task = asyncio.create_task(asyncio.to_thread(self.server.serve_forever))
        logger.info(
            f"Listening for log batches on {self.host}:{self.server.server_address[1]}",
            extra={"require_auth": self.require_auth},
        )

    async def stop(self) -> None:
        if self.server is not None:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._serve_task is not None:
            await self._serve_task
        logger.info("Webhook HTTP server stopped")
