"""Test cases for LogParser using Factorio console log lines."""

import pytest

from factorio_bridge.log_monitor.parser import (
    ChatRecord,
    JoinRecord,
    LeaveRecord,
    LogParser,
)


@pytest.fixture
def parser():
    """Create LogParser instance."""
    return LogParser()


class TestChatParsing:
    """Test chat line parsing."""

    def test_bare_chat_line(self, parser):
        assert parser.parse_line("[CHAT] Foo: bar") == ChatRecord(
            user="Foo", message="bar"
        )

    def test_chat_line_with_timestamp(self, parser):
        """Test a chat line as written by the headless server."""
        line = "2024-03-01 18:22:05 [CHAT] Player_1: anyone got iron plates?"

        record = parser.parse_line(line)

        assert record == ChatRecord(user="Player_1", message="anyone got iron plates?")

    def test_message_keeps_further_colons(self, parser):
        record = parser.parse_line("[CHAT] Foo: time: 12:30: ok")

        assert record == ChatRecord(user="Foo", message="time: 12:30: ok")

    def test_server_chat_is_ignored(self, parser):
        assert parser.parse_line("[CHAT] <server>: hi") is None

    def test_server_chat_with_timestamp_is_ignored(self, parser):
        line = "2024-03-01 18:22:05 [CHAT] <server>: Bob: hello from telegram"

        assert parser.parse_line(line) is None

    @pytest.mark.parametrize(
        "line",
        [
            "[CHAT] Foo:",
            "[CHAT] Foo: ",
            "[CHAT] no colon here",
            "[CHAT] Foo Bar: two words",
            "[CHAT]",
        ],
    )
    def test_malformed_chat_line(self, parser, line):
        assert parser.parse_line(line) is None


class TestJoinLeaveParsing:
    """Test join and leave line parsing."""

    def test_join(self, parser):
        assert parser.parse_line("[JOIN] user joined") == JoinRecord(user="user")

    def test_join_with_timestamp_and_suffix(self, parser):
        line = "2024-03-01 18:20:00 [JOIN] Qin_Ning joined the game"

        assert parser.parse_line(line) == JoinRecord(user="Qin_Ning")

    def test_leave(self, parser):
        assert parser.parse_line("[LEAVE] user left") == LeaveRecord(user="user")

    def test_leave_with_timestamp_and_suffix(self, parser):
        line = "2024-03-01 19:01:12 [LEAVE] Player_1 left the game"

        assert parser.parse_line(line) == LeaveRecord(user="Player_1")

    def test_malformed_join(self, parser):
        assert parser.parse_line("[JOIN] someone arrived") is None

    def test_malformed_leave(self, parser):
        assert parser.parse_line("[LEAVE] someone vanished") is None


class TestUnrecognizedLines:
    """Lines without a marker never produce a record."""

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   0.000 2024-03-01 18:00:00; Factorio 1.1.104 (build 62214, linux64, headless)",
            "Foo: bar",
            "user joined",
            "user left",
            "[COMMAND] Foo (command): /give iron-plate",
            "[chat] Foo: lowercase marker",
        ],
    )
    def test_no_marker(self, parser, line):
        assert parser.parse_line(line) is None

    def test_first_marker_wins(self, parser):
        """A chat line mentioning another marker is still a chat line."""
        record = parser.parse_line("[CHAT] Foo: I saw [JOIN] bar joined")

        assert record == ChatRecord(user="Foo", message="I saw [JOIN] bar joined")
