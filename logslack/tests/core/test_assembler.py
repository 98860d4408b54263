"""Unit tests for MessageAssembler, color selection and truncation."""

from datetime import datetime, timezone

import pytest

from logslack.core.assembler import MessageAssembler, calculate_color, truncate_segment
from logslack.core.models import (
    BLOCK_TEXT_LIMIT,
    LogRecord,
    MessageColor,
    ResolvedLocation,
)


def make_record(**overrides) -> LogRecord:
    values = {
        "timestamp": datetime(2020, 9, 3, 14, 33, 30, 913000, tzinfo=timezone.utc),
        "severity": "ERROR",
        "message": "User not found",
        "record_id": "evt-1",
        "service": "com.awesome.project.services.UserServiceImpl",
        "application_name": "awesome-app",
        "version": "1.2.3",
    }
    values.update(overrides)
    return LogRecord(**values)


@pytest.fixture
def assembler() -> MessageAssembler:
    return MessageAssembler(channel="awesome-logs", application_name="My Awesome Project")


@pytest.fixture
def class_location() -> ResolvedLocation:
    return ResolvedLocation(
        url="https://vcs/blob/1.2.3/awesome-services/src/main/java/com/awesome/project/services/UserServiceImpl.java",
        revision="1.2.3",
        module_path="awesome-services",
        package_path="com/awesome/project/services",
        file_or_class_name="UserServiceImpl",
    )


class TestColor:
    """Tests for severity color selection."""

    def test_critical_message_is_black_regardless_of_severity(self) -> None:
        for severity in ("ERROR", "WARN", "INFO"):
            record = make_record(severity=severity, message="CRITICAL: payments down")
            assert calculate_color(record) is MessageColor.CRITICAL
        assert MessageColor.CRITICAL.value == "#000000"

    def test_error_is_red(self) -> None:
        assert calculate_color(make_record(severity="ERROR")) is MessageColor.ERROR
        assert MessageColor.ERROR.value == "#FF0000"

    def test_anything_else_is_amber(self) -> None:
        assert calculate_color(make_record(severity="WARN")) is MessageColor.WARNING
        assert MessageColor.WARNING.value == "#FFD300"


class TestTruncation:
    """Tests for per-block truncation of trace segments."""

    def test_short_segment_is_unchanged(self) -> None:
        assert truncate_segment("*Boom*\n\tat x") == "*Boom*\n\tat x"

    def test_long_segment_keeps_whole_lines_within_limit(self) -> None:
        lines = ["*RuntimeException: boom*"] + [f"\tframe {i:04d} " + "x" * 80 for i in range(100)]
        segment = "\n".join(lines)

        text = truncate_segment(segment)

        assert len(text) <= BLOCK_TEXT_LIMIT
        kept = text.split("\n")
        assert kept == lines[: len(kept)]
        assert len("\n".join(lines[: len(kept) + 1])) > BLOCK_TEXT_LIMIT

    def test_no_dangling_ellipsis_after_truncation(self) -> None:
        frame = "\t_UserService.find_ services : <https://vcs/x|1>" + "y" * 60
        lines = ["*RuntimeException: boom*"]
        while len("\n".join(lines)) < BLOCK_TEXT_LIMIT - 200:
            lines.append(frame)
        lines.append("\t...")
        lines.extend([frame] * 10)

        text = truncate_segment("\n".join(lines))

        assert len(text) <= BLOCK_TEXT_LIMIT
        assert not text.endswith("...")

    def test_oversized_first_line_is_cut_to_limit(self) -> None:
        header = "*" + "x" * (BLOCK_TEXT_LIMIT + 150) + "*"

        text = truncate_segment(header + "\n\tframe")

        assert len(text) == BLOCK_TEXT_LIMIT
        assert text == header[:BLOCK_TEXT_LIMIT]

    def test_trailing_ellipsis_is_dropped(self) -> None:
        assert truncate_segment("*Boom*\n\t...") == "*Boom*"


class TestAssemble:
    """Tests for the block layout of assembled messages."""

    def test_block_order(
        self, assembler: MessageAssembler, class_location: ResolvedLocation
    ) -> None:
        message = assembler.assemble(
            make_record(),
            class_location,
            ["*UserNotFoundException: 42*\n\t...", "*Caused by: IOException*"],
            "<https://vcs/tree/1.2.3|1.2.3>",
            MessageColor.ERROR,
        )

        texts = [block.get("text", {}).get("text") for block in message.blocks]
        assert texts == [
            f"*Class:* <{class_location.url}|com.awesome.project.services.UserServiceImpl>",
            "*Version:* <https://vcs/tree/1.2.3|1.2.3>",
            "*Message:* User not found",
            None,
            "*UserNotFoundException: 42*",
            "*Caused by: IOException*",
        ]
        assert message.blocks[3] == {"type": "divider"}
        assert message.channel == "awesome-logs"
        assert message.text == "*My Awesome Project* @ 2020-09-03T14:33:30.913Z"
        assert message.color is MessageColor.ERROR

    def test_status_code_follows_class_line(self, assembler: MessageAssembler) -> None:
        message = assembler.assemble(
            make_record(internal_status_code=4711), None, [], "undefined", MessageColor.WARNING
        )

        block_ids = [block.get("block_id") for block in message.blocks]
        assert block_ids == ["class", "status", "version", "message", None]
        assert message.blocks[1]["text"]["text"] == "*Status code:* 4711"

    def test_unresolved_class_is_plain_text(self, assembler: MessageAssembler) -> None:
        message = assembler.assemble(make_record(), None, [], "undefined", MessageColor.ERROR)

        assert message.blocks[0]["text"]["text"] == (
            "*Class:* com.awesome.project.services.UserServiceImpl"
        )

    def test_deep_link_is_an_action_on_version_block(
        self, assembler: MessageAssembler
    ) -> None:
        message = assembler.assemble(
            make_record(),
            None,
            [],
            "undefined",
            MessageColor.ERROR,
            deep_link_url="https://kibana/app/discover#/doc/evt-1",
        )

        version_block = message.blocks[1]
        assert version_block["block_id"] == "version"
        assert version_block["accessory"]["type"] == "button"
        assert version_block["accessory"]["url"] == "https://kibana/app/discover#/doc/evt-1"
        assert all("accessory" not in block for block in message.blocks[2:])

    def test_each_segment_is_truncated_independently(
        self, assembler: MessageAssembler
    ) -> None:
        long_segment = "\n".join(["*First*"] + ["\t" + "a" * 99] * 60)
        other_segment = "\n".join(["*Caused by: Second*"] + ["\t" + "b" * 99] * 60)

        message = assembler.assemble(
            make_record(), None, [long_segment, other_segment], "undefined", MessageColor.ERROR
        )

        trace_blocks = message.blocks[4:]
        assert len(trace_blocks) == 2
        assert trace_blocks[0]["text"]["text"].startswith("*First*")
        assert trace_blocks[1]["text"]["text"].startswith("*Caused by: Second*")
        assert all(len(block["text"]["text"]) <= BLOCK_TEXT_LIMIT for block in trace_blocks)

    def test_oversized_exception_header_keeps_its_block(
        self, assembler: MessageAssembler
    ) -> None:
        sql_header = (
            "*SQLGrammarException: could not prepare statement [select "
            + "u.column, " * 300
            + "from users u]*"
        )

        message = assembler.assemble(
            make_record(),
            None,
            [sql_header, "*Caused by: java.sql.SQLException: bad*"],
            "undefined",
            MessageColor.ERROR,
        )

        trace_blocks = message.blocks[4:]
        assert len(trace_blocks) == 2
        assert trace_blocks[0]["text"]["text"].startswith("*SQLGrammarException:")
        assert len(trace_blocks[0]["text"]["text"]) == BLOCK_TEXT_LIMIT
        assert trace_blocks[1]["text"]["text"] == "*Caused by: java.sql.SQLException: bad*"

    def test_long_message_is_cut_to_block_limit(self, assembler: MessageAssembler) -> None:
        message = assembler.assemble(
            make_record(message="m" * 5000), None, [], "undefined", MessageColor.ERROR
        )

        assert len(message.blocks[2]["text"]["text"]) == BLOCK_TEXT_LIMIT

    def test_title_falls_back_to_record_application(self) -> None:
        message = MessageAssembler(channel="c").assemble(
            make_record(), None, [], "undefined", MessageColor.ERROR
        )

        assert message.text.startswith("*awesome-app* @ ")

    def test_payload_shape(self, assembler: MessageAssembler) -> None:
        payload = assembler.assemble(
            make_record(), None, [], "undefined", MessageColor.CRITICAL
        ).to_payload()

        assert payload["channel"] == "awesome-logs"
        assert payload["icon_emoji"] == ":aws:"
        assert payload["attachments"][0]["color"] == "#000000"
        assert payload["attachments"][0]["blocks"][0]["type"] == "section"
