"""Log parser for Factorio server logs."""

import re
from dataclasses import dataclass
from typing import Optional, Union

SERVER_USER = "<server>"

_CHAT_PATTERN = re.compile(r"\[CHAT\] (\w+|<server>): (.+)")
_JOIN_PATTERN = re.compile(r"\[JOIN\] (\w+) joined")
_LEAVE_PATTERN = re.compile(r"\[LEAVE\] (\w+) left")


@dataclass(frozen=True)
class ChatRecord:
    user: str
    message: str


@dataclass(frozen=True)
class JoinRecord:
    user: str


@dataclass(frozen=True)
class LeaveRecord:
    user: str


LogRecord = Union[ChatRecord, JoinRecord, LeaveRecord]


class LogParser:
    """Parses Factorio console log lines into records."""

    def parse_line(self, line: str) -> Optional[LogRecord]:
        """Parse a log line and return a record if it is recognized.

        The marker decides which pattern applies; a line whose payload does
        not match that pattern is ignored. Chat lines written by the server
        itself (for example RCON output echoed into chat) are ignored too.

        Args:
            line: Log line to parse

        Returns:
            Parsed record or None if no match
        """
        if "[CHAT]" in line:
            match = _CHAT_PATTERN.search(line)
            if match is None:
                return None
            user, message = match.groups()
            if user == SERVER_USER:
                return None
            return ChatRecord(user=user, message=message)

        if "[JOIN]" in line:
            match = _JOIN_PATTERN.search(line)
            return JoinRecord(user=match.group(1)) if match else None

        if "[LEAVE]" in line:
            match = _LEAVE_PATTERN.search(line)
            return LeaveRecord(user=match.group(1)) if match else None

        return None
