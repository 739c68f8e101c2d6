import asyncio
import signal
from typing import Coroutine, Mapping, Optional, Sequence

from .config import Settings, load_settings
from .events import EventBus
from .log_monitor import LogMonitor, LogParser
from .logger import logger, setup_logging
from .rcon import ConsoleCommandSender
from .router import EventRouter
from .telegram import ChatListener, ChatSender, TelegramClient


async def supervise(
    tasks: Mapping[str, Coroutine],
    stop_event: Optional[asyncio.Event] = None,
    handle_signals: bool = True,
) -> None:
    """Run the tasks until the first one finishes or a stop is requested.

    The remaining tasks are cancelled; events still on the bus are dropped.
    An exception from the first finished task is re-raised.

    Args:
        tasks: Long-running coroutines by name
        stop_event: Set to request a shutdown, created if not given
        handle_signals: Set the stop event on SIGINT and SIGTERM
    """
    stop = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()

    installed = []
    if handle_signals:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except (NotImplementedError, RuntimeError, ValueError):
                continue
            installed.append(sig)

    running = [asyncio.create_task(coro, name=name) for name, coro in tasks.items()]
    stopper = asyncio.create_task(stop.wait(), name="stop")

    try:
        done, _ = await asyncio.wait(
            [*running, stopper], return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (*running, stopper):
            task.cancel()
        await asyncio.gather(*running, stopper, return_exceptions=True)
        for sig in installed:
            loop.remove_signal_handler(sig)

    for task in running:
        if task in done:
            if task.exception() is not None:
                logger.error(f"Task {task.get_name()} failed: {task.exception()!r}")
                raise task.exception()  # type: ignore[misc]
            logger.info(f"Task {task.get_name()} finished, shutting down")
            return

    logger.info("Stop requested, shutting down")


async def run(settings: Settings, stop_event: Optional[asyncio.Event] = None) -> None:
    """Wire the components from settings and run them."""
    logger.info(f"Factorio log file: {settings.factorio_log_file}")

    bus = EventBus(settings.channel_capacity)
    console = ConsoleCommandSender(
        settings.rcon_host, settings.rcon_password, timeout=settings.rcon_timeout
    )

    async with TelegramClient(
        settings.telegram_token,
        api_url=settings.telegram_api_url,
        poll_timeout=settings.telegram_poll_timeout,
    ) as telegram:
        monitor = LogMonitor(settings.factorio_log_file, LogParser(), bus)
        listener = ChatListener(
            telegram,
            settings.telegram_chat_id,
            bus,
            command_prefix=settings.command_prefix,
        )
        router = EventRouter(
            bus, ChatSender(telegram, settings.telegram_chat_id), console
        )

        await supervise(
            {
                "log-monitor": monitor.run(),
                "chat-listener": listener.run(),
                "event-router": router.run(),
            },
            stop_event=stop_event,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings(argv)
    setup_logging(settings.log_level, settings.logs_dir)

    try:
        asyncio.run(run(settings))
    except Exception as e:
        logger.critical(f"Bridge stopped: {type(e).__name__}: {e}", exc_info=True)
        return 1
    return 0
