"""Domain models for the logslack notification system.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

# Slack rejects section blocks whose text is longer than this.
BLOCK_TEXT_LIMIT = 3000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LogEvent:
    """A single wrapper from the log subscription envelope.

    The message is the still-encoded JSON text of a log record.
    """

    id: str
    message: str
    timestamp: int | None = None  # epoch millis assigned by the log platform


@dataclass(frozen=True)
class LogRecord:
    """A structured log record emitted by the monitored application."""

    timestamp: datetime
    severity: str
    message: str
    record_id: str
    service: str | None = None
    application_name: str | None = None
    version: str | None = None
    stack_trace: str | None = None
    internal_status_code: int | None = None
    fields: dict[str, Any] | MappingProxyType[str, Any] = field(
        default_factory=dict
    )  # raw record JSON, converted to proxy in __post_init__

    def __post_init__(self) -> None:
        """Convert the raw fields dict to a read-only proxy."""
        if isinstance(self.fields, dict):
            object.__setattr__(self, "fields", MappingProxyType(self.fields))

    @classmethod
    def from_event(cls, event: LogEvent) -> "LogRecord":
        """Parse the record JSON carried by an envelope event.

        Raises:
            json.JSONDecodeError: If the event message is not valid JSON.
        """
        data = json.loads(event.message)
        if not isinstance(data, dict):
            raise ValueError(f"Log record {event.id} is not a JSON object")

        return cls(
            timestamp=_parse_timestamp(data.get("time"), event.timestamp),
            severity=str(data.get("sev") or ""),
            message=str(data.get("msg") or ""),
            record_id=event.id,
            service=_optional_text(data.get("service")),
            application_name=_optional_text(data.get("app")),
            version=_optional_text(data.get("ver")),
            stack_trace=_optional_text(data.get("stack_trace")),
            internal_status_code=_parse_status_code(data.get("code")),
            fields=data,
        )

    def field_text(self, name: str) -> str | None:
        """Return the raw text of a record field, or None if it is absent."""
        return _optional_text(self.fields.get(name))


def _optional_text(value: Any) -> str | None:
    """Keep strings, render other JSON values as JSON text, map null to None."""
    if value is None:
        return None
    return value if isinstance(value, str) else json.dumps(value)


def _parse_timestamp(value: Any, fallback_millis: int | None) -> datetime:
    """Parse an ISO-8601 record time, falling back to the wrapper timestamp."""
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    if fallback_millis is not None:
        return datetime.fromtimestamp(fallback_millis / 1000, tz=timezone.utc)
    return _EPOCH


def _parse_status_code(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ModuleMapping:
    """Maps a package pattern to a module path template.

    The template may reference capture groups of the pattern as $1..$4,
    e.g. pattern "com.awesome.project.(\\w+).(\\w+)" with template "$1-$2".
    """

    pattern: str
    template: str


@dataclass(frozen=True)
class FormattingRules:
    """Process-wide, read-only rules driving link resolution and shortening.

    Built once at start-up from configuration and shared by every record
    processed in an invocation.
    """

    application_packages: tuple[str, ...] = ()
    exception_packages: tuple[str, ...] = ()
    module_mapping: tuple[ModuleMapping, ...] = ()  # first match wins
    exclusion_rules: tuple[Mapping[str, str], ...] = ()
    vcs_file_url: str = ""
    vcs_search_url: str = ""
    vcs_tree_url: str = ""

    def __post_init__(self) -> None:
        """Freeze the exclusion rule mappings."""
        object.__setattr__(
            self,
            "exclusion_rules",
            tuple(MappingProxyType(dict(rule)) for rule in self.exclusion_rules),
        )


@dataclass(frozen=True)
class ResolvedLocation:
    """A source-control location resolved for a class or call frame."""

    url: str
    revision: str
    module_path: str
    package_path: str
    file_or_class_name: str
    line_number: int | None = None


class MessageColor(Enum):
    """Attachment colors keyed by how loud the notification should be."""

    CRITICAL = "#000000"
    ERROR = "#FF0000"
    WARNING = "#FFD300"


@dataclass(frozen=True)
class NotificationMessage:
    """A chat notification ready to be dispatched."""

    channel: str
    text: str
    color: MessageColor
    blocks: tuple[dict[str, Any], ...]
    icon_emoji: str = ":aws:"

    def to_payload(self) -> dict[str, Any]:
        """Render the Slack incoming-webhook JSON body."""
        return {
            "channel": self.channel,
            "text": self.text,
            "icon_emoji": self.icon_emoji,
            "attachments": [
                {
                    "color": self.color.value,
                    "blocks": [dict(block) for block in self.blocks],
                }
            ],
        }


@dataclass(frozen=True)
class BatchResult:
    """Summary of one invocation batch."""

    received: int
    excluded: int
    dispatched: int
    failed: int = 0
