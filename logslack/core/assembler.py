"""Notification message assembly.

Combines the pieces produced by the locator, the stack trace normalizer
and the version formatter into a Slack message, keeping every block
under the platform's per-block character ceiling.
"""

from typing import Any

from .models import (
    BLOCK_TEXT_LIMIT,
    LogRecord,
    MessageColor,
    NotificationMessage,
    ResolvedLocation,
)

CRITICAL_MARKER = "CRITICAL"
ERROR_SEVERITY = "ERROR"
DEEP_LINK_LABEL = "Open in log search"


def calculate_color(record: LogRecord) -> MessageColor:
    """CRITICAL in the message beats the severity field."""
    if CRITICAL_MARKER in record.message:
        return MessageColor.CRITICAL
    if record.severity == ERROR_SEVERITY:
        return MessageColor.ERROR
    return MessageColor.WARNING


def truncate_segment(segment: str, limit: int = BLOCK_TEXT_LIMIT) -> str:
    """Keep whole lines of a trace segment while they fit in one block.

    Lines are accumulated until the next one would push the text past the
    limit; the remainder of the segment is dropped. A trailing ellipsis
    line is not worth a line of its own and is removed. A first line that
    is longer than the limit on its own is cut rather than dropped.
    """
    lines = segment.split("\n")
    kept: list[str] = []
    total = 0
    for line in lines:
        added = len(line) + (1 if kept else 0)
        if total + added > limit:
            break
        kept.append(line)
        total += added

    if not kept:
        return lines[0].strip()[:limit]

    if kept[-1].strip() == "...":
        kept.pop()

    return "\n".join(kept).strip()[:limit]


def section(text: str, block_id: str | None = None) -> dict[str, Any]:
    block: dict[str, Any] = {
        "type": "section",
        "text": {"type": "mrkdwn", "text": text[:BLOCK_TEXT_LIMIT]},
    }
    if block_id:
        block["block_id"] = block_id
    return block


class MessageAssembler:
    """Builds NotificationMessage instances for single log records."""

    def __init__(self, channel: str, application_name: str = ""):
        self.channel = channel
        self.application_name = application_name

    def assemble(
        self,
        record: LogRecord,
        class_location: ResolvedLocation | None,
        trace_segments: list[str],
        version_label: str,
        color: MessageColor,
        deep_link_url: str | None = None,
    ) -> NotificationMessage:
        """Assemble the notification for one record.

        Block order: class, status code (when present), version (with the
        log search action when a deep link is available), message,
        divider, then one block per trace segment in causal order.
        """
        blocks: list[dict[str, Any]] = [
            section(f"*Class:* {self._format_service(record, class_location)}", "class")
        ]

        if record.internal_status_code is not None:
            blocks.append(
                section(f"*Status code:* {record.internal_status_code}", "status")
            )

        version_block = section(f"*Version:* {version_label}", "version")
        if deep_link_url:
            version_block["accessory"] = {
                "type": "button",
                "text": {"type": "plain_text", "text": DEEP_LINK_LABEL},
                "url": deep_link_url,
                "action_id": "open_log_search",
            }
        blocks.append(version_block)

        blocks.append(section(f"*Message:* {record.message}", "message"))
        blocks.append({"type": "divider"})

        for segment in trace_segments:
            text = truncate_segment(segment)
            if text:
                blocks.append(section(text))

        return NotificationMessage(
            channel=self.channel,
            text=self._format_title(record),
            color=color,
            blocks=tuple(blocks),
        )

    def _format_title(self, record: LogRecord) -> str:
        name = self.application_name or record.application_name or ""
        timestamp = record.timestamp.isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )
        return f"*{name}* @ {timestamp}"

    @staticmethod
    def _format_service(
        record: LogRecord, class_location: ResolvedLocation | None
    ) -> str:
        service = record.service or ""
        if class_location is None:
            return service
        return f"<{class_location.url}|{service}>"
