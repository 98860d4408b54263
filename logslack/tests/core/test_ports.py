"""Unit tests for port interface contracts.

Tests verify that port abstract base classes are properly defined
and that implementations must satisfy the interface contract.
"""

import pytest

from logslack.core.models import BatchResult, LogEvent, MessageColor, NotificationMessage
from logslack.core.ports import LogBatchPort, NotificationPort
from logslack.tests.fakes import FakeLogBatchPort, FakeNotificationPort


@pytest.fixture
def message() -> NotificationMessage:
    return NotificationMessage(
        channel="awesome-logs",
        text="*Awesome* @ 2024-01-01T12:00:00.000Z",
        color=MessageColor.ERROR,
        blocks=(),
    )


class TestNotificationPort:
    """Tests for the NotificationPort contract."""

    def test_cannot_instantiate_abstract_port(self) -> None:
        with pytest.raises(TypeError):
            NotificationPort()  # type: ignore[abstract]

    def test_implementation_must_define_send(self) -> None:
        class Incomplete(NotificationPort):
            pass

        with pytest.raises(TypeError):
            Incomplete()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_fake_records_messages(self, message: NotificationMessage) -> None:
        port = FakeNotificationPort()

        await port.send(message)

        assert port.get_last_message() is message
        assert port.completed_messages == [message]

        port.reset()
        assert port.get_last_message() is None
        assert port.send_call_count == 0

    @pytest.mark.asyncio
    async def test_fake_failure(self, message: NotificationMessage) -> None:
        port = FakeNotificationPort()
        port.fail_for(message.text, "rejected")

        with pytest.raises(RuntimeError, match="rejected"):
            await port.send(message)

        assert port.send_call_count == 1
        assert port.completed_messages == []


class TestLogBatchPort:
    """Tests for the LogBatchPort contract."""

    def test_cannot_instantiate_abstract_port(self) -> None:
        with pytest.raises(TypeError):
            LogBatchPort()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_fake_reports_every_event_dispatched(self) -> None:
        port = FakeLogBatchPort()

        result = await port.process_batch([LogEvent(id="1", message="{}")])

        assert result == BatchResult(received=1, excluded=0, dispatched=1)
        assert len(port.batches) == 1
