"""CloudWatch Logs subscription envelope decoding.

Subscription filters deliver log batches as base64 encoded, gzip
compressed JSON documents:

    {"awslogs": {"data": "H4sIAAAAAAAA..."}}

which decode to

    {"logGroup": "...", "logEvents": [{"id": "...", "timestamp": 0, "message": "{...}"}]}
"""

import base64
import binascii
import gzip
import json
import logging
import zlib
from typing import Any

from logslack.core.models import LogEvent

logger = logging.getLogger(__name__)


class EnvelopeDecodeError(ValueError):
    """Raised when an invocation payload cannot be decoded."""


def decode_envelope(data: str | bytes) -> dict[str, Any]:
    """Decode base64, decompress gzip and parse the JSON document.

    Args:
        data: The base64 text found under awslogs.data.

    Returns:
        The decoded subscription document.

    Raises:
        EnvelopeDecodeError: If any decoding step fails.
    """
    try:
        compressed = base64.b64decode(data, validate=True)
        payload = gzip.decompress(compressed).decode("utf-8")
        document = json.loads(payload)
    except (binascii.Error, OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
        raise EnvelopeDecodeError(f"Cannot decode log envelope: {e}") from e
    except json.JSONDecodeError as e:
        raise EnvelopeDecodeError(f"Log envelope is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise EnvelopeDecodeError("Log envelope must be a JSON object")
    return document


def events_from_document(document: dict[str, Any]) -> list[LogEvent]:
    """Extract the log event wrappers from a decoded document."""
    raw_events = document.get("logEvents", [])
    if not isinstance(raw_events, list):
        raise EnvelopeDecodeError("logEvents must be a list")

    events = []
    for raw in raw_events:
        if not isinstance(raw, dict) or not isinstance(raw.get("message"), str):
            raise EnvelopeDecodeError(f"Malformed log event: {raw!r}")
        events.append(
            LogEvent(
                id=str(raw.get("id", "")),
                message=raw["message"],
                timestamp=raw.get("timestamp"),
            )
        )
    return events


def events_from_invocation(event: dict[str, Any]) -> list[LogEvent]:
    """Extract log events from a Lambda or webhook invocation payload.

    Raises:
        EnvelopeDecodeError: If the payload is not a subscription envelope.
    """
    awslogs = event.get("awslogs") if isinstance(event, dict) else None
    if not isinstance(awslogs, dict) or "data" not in awslogs:
        raise EnvelopeDecodeError("Invocation payload has no awslogs.data")

    document = decode_envelope(awslogs["data"])
    events = events_from_document(document)
    logger.debug(
        f"Decoded {len(events)} log events",
        extra={"log_group": document.get("logGroup")},
    )
    return events


def encode_envelope(document: dict[str, Any]) -> str:
    """Encode a subscription document the way CloudWatch does.

    Used to build invocation payloads for local runs and tests.
    """
    compressed = gzip.compress(json.dumps(document).encode("utf-8"))
    return base64.b64encode(compressed).decode("ascii")
