"""Core domain logic for the logslack notification system.

This package contains zero external dependencies and represents
the pure formatting logic of the application. Envelope decoding,
delivery and configuration are handled by the adapters package.
"""

from .models import (
    BLOCK_TEXT_LIMIT,
    BatchResult,
    FormattingRules,
    LogEvent,
    LogRecord,
    MessageColor,
    ModuleMapping,
    NotificationMessage,
    ResolvedLocation,
)

__all__ = [
    "BLOCK_TEXT_LIMIT",
    "BatchResult",
    "FormattingRules",
    "LogEvent",
    "LogRecord",
    "MessageColor",
    "ModuleMapping",
    "NotificationMessage",
    "ResolvedLocation",
]
