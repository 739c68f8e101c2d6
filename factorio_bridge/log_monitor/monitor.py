"""Log file monitoring using watchfiles."""

from pathlib import Path
from typing import Optional, assert_never

import aiofiles
from aiofiles import os as aioos
from watchfiles import Change, awatch

from ..events import EventBus, GameMessageEvent
from ..logger import logger
from .parser import ChatRecord, JoinRecord, LeaveRecord, LogParser, LogRecord


def record_to_event(record: LogRecord) -> GameMessageEvent:
    """Render a parsed log record as a chat message event."""
    match record:
        case ChatRecord(user=user, message=message):
            return GameMessageEvent(text=f"💬{user}: {message}", silent=False)
        case JoinRecord(user=user):
            return GameMessageEvent(text=f"😊{user} joined", silent=True)
        case LeaveRecord(user=user):
            return GameMessageEvent(text=f"👋{user} left", silent=True)
        case _:
            assert_never(record)


class LogMonitor:
    """Tails the Factorio log file and publishes game events on the bus."""

    def __init__(self, log_path: Path, log_parser: LogParser, bus: EventBus):
        """Initialize log monitor.

        Args:
            log_path: Path to the Factorio console log
            log_parser: Log parser for parsing log lines
            bus: Event bus the game events are published on
        """
        self.log_path = Path(log_path).absolute()
        self.log_parser = log_parser
        self.bus = bus

        # Offset of the first byte not yet consumed
        self._file_pointer = 0

    async def run(self) -> None:
        """Watch the log file until cancelled.

        Raises:
            FileNotFoundError: The log file does not exist
            BusClosedError: The bus was closed under the monitor
        """
        logger.info(f"Starting Factorio log reader for {self.log_path}")

        if not await aioos.path.exists(self.log_path):
            raise FileNotFoundError(f"Factorio log file not found: {self.log_path}")

        # Start from current end of file
        self._file_pointer = await aioos.path.getsize(self.log_path)
        logger.info(f"Log file found, size: {self._file_pointer}")

        async for changes in awatch(self.log_path.parent):
            for change_type, changed_path in changes:
                if Path(changed_path) != self.log_path:
                    continue

                if change_type == Change.deleted:
                    logger.info(f"Log file deleted: {self.log_path}")
                    continue

                if change_type == Change.added:
                    logger.info(f"Log file created: {self.log_path}")
                    self._file_pointer = 0

                logger.debug("Processing log changes")
                await self._process_log_changes()

    async def _process_log_changes(self) -> None:
        """Read the bytes appended since the last call and handle complete lines."""
        if not await aioos.path.exists(self.log_path):
            return

        current_size = await aioos.path.getsize(self.log_path)

        # File truncated in place
        if current_size < self._file_pointer:
            logger.info("Log file truncated, reading from beginning")
            self._file_pointer = 0

        if current_size <= self._file_pointer:
            return

        async with aiofiles.open(self.log_path, "rb") as f:
            await f.seek(self._file_pointer)
            new_content = await f.read()

        # A trailing partial line stays in the file until its newline arrives
        end = new_content.rfind(b"\n")
        if end == -1:
            return
        self._file_pointer += end + 1

        for raw_line in new_content[:end].split(b"\n"):
            line = raw_line.decode("utf-8", errors="replace").strip()
            if line:
                await self._handle_line(line)

    async def _handle_line(self, line: str) -> Optional[GameMessageEvent]:
        record = self.log_parser.parse_line(line)
        if record is None:
            return None

        event = record_to_event(record)
        await self.bus.publish(event)
        return event
