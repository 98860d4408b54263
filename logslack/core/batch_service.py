"""Batch processing for one invocation.

This module implements the pipeline that turns a batch of envelope
events into dispatched notifications: parse, filter, order by time,
format and hand every message to the notification port concurrently.
"""

import asyncio
import logging
from urllib.parse import quote

from .assembler import MessageAssembler, calculate_color
from .filters import is_included
from .locator import SourceLocator
from .models import (
    BatchResult,
    FormattingRules,
    LogEvent,
    LogRecord,
    NotificationMessage,
)
from .ports import LogBatchPort, NotificationPort
from .stacktrace import StackTraceNormalizer
from .version import VersionFormatter

logger = logging.getLogger(__name__)


class LogBatchService(LogBatchPort):
    """Implements the per-invocation pipeline.

    This service orchestrates:
    - Parsing log records out of envelope events
    - Dropping records matched by exclusion rules
    - Ordering records by timestamp
    - Formatting and dispatching one notification per record
    """

    def __init__(
        self,
        rules: FormattingRules,
        notification: NotificationPort,
        assembler: MessageAssembler,
        log_search_url: str | None = None,
    ):
        self.rules = rules
        self.notification = notification
        self.assembler = assembler
        self.log_search_url = log_search_url
        self.locator = SourceLocator(rules)
        self.normalizer = StackTraceNormalizer(rules, self.locator)
        self.version_formatter = VersionFormatter(rules.vcs_tree_url)

    async def process_batch(self, events: list[LogEvent]) -> BatchResult:
        """Turn a batch of events into dispatched notifications."""
        messages = self.build_messages(events)
        excluded = len(events) - len(messages)

        results = await asyncio.gather(
            *(self.notification.send(message) for message in messages),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, BaseException)]
        for message, result in zip(messages, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to dispatch notification: {result}",
                    exc_info=result,
                    extra={"title": message.text},
                )

        batch_result = BatchResult(
            received=len(events),
            excluded=excluded,
            dispatched=len(messages) - len(failures),
            failed=len(failures),
        )
        logger.info(
            f"Processed batch of {batch_result.received} log events",
            extra={
                "excluded": batch_result.excluded,
                "dispatched": batch_result.dispatched,
                "failed": batch_result.failed,
            },
        )

        if failures:
            raise failures[0]
        return batch_result

    def build_messages(self, events: list[LogEvent]) -> list[NotificationMessage]:
        """Build dispatch-ready messages in ascending timestamp order.

        Raises:
            json.JSONDecodeError: If any event carries malformed record JSON.
        """
        records = [LogRecord.from_event(event) for event in events]

        included = [
            record
            for record in records
            if is_included(record, self.rules.exclusion_rules)
        ]
        if len(included) < len(records):
            logger.debug(
                f"Excluded {len(records) - len(included)} of {len(records)} records"
            )

        included.sort(key=lambda record: record.timestamp)
        return [self.build_message(record) for record in included]

    def build_message(self, record: LogRecord) -> NotificationMessage:
        """Format a single record."""
        class_location = (
            self.locator.resolve(record.service, False, record.version)
            if record.service
            else None
        )
        return self.assembler.assemble(
            record,
            class_location,
            self.normalizer.normalize(record.stack_trace, record.version),
            self.version_formatter.format(record.version),
            calculate_color(record),
            self.deep_link(record),
        )

    def deep_link(self, record: LogRecord) -> str | None:
        """Link to the record in the log search UI, if one is configured."""
        if not self.log_search_url or not record.record_id:
            return None
        return f"{self.log_search_url}{quote(record.record_id, safe='')}"
