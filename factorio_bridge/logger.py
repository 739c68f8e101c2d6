import functools
import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from gzip import GzipFile
from pathlib import Path
from typing import Callable, Optional, ParamSpec, TypeVar

logger = logging.getLogger("factorio_bridge")
logger.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s %(levelname)s [%(module)s:%(funcName)s:%(lineno)d] %(message)s"
)


def rotator(source, dest):
    with open(source, "rb") as f_in:
        with gzip.open(dest + ".gz", "wb") as f_out:
            assert isinstance(f_out, GzipFile)
            shutil.copyfileobj(f_in, f_out)
    os.remove(source)


def setup_logging(level: str = "INFO", logs_dir: Optional[Path] = None) -> None:
    """Attach the stdout handler and, if logs_dir is given, a daily rotated file.

    Calling it again replaces the handlers installed by the previous call.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level.upper())

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if logs_dir is not None:
        logs_dir = Path(logs_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.TimedRotatingFileHandler(
            logs_dir / "factorio-bridge.log", when="midnight", encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.rotator = rotator
        logger.addHandler(file_handler)


P = ParamSpec("P")
R = TypeVar("R")


def log_exception(
    prefix: str = "",
    default_return: R | None = None,
    level: int = logging.ERROR,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator that logs and swallows any exception raised by the wrapped function.

    Works on sync and async functions. The log line carries the bound
    arguments, the prefix (``{param}`` placeholders are filled from the
    arguments) and the exception; the wrapper then returns ``default_return``.

    Args:
        prefix: Optional prefix to prepend to the error message
        default_return: Value returned when the wrapped call fails
        level: Logging level of the failure record

    Usage:
        @log_exception("Failed to run {command!r}", level=logging.WARNING)
        async def run(command: str) -> str:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        sig = inspect.signature(func)
        func_name = func.__qualname__

        def bind_arguments(args: tuple, kwargs: dict) -> dict:
            try:
                bound = sig.bind(*args, **kwargs)
                bound.apply_defaults()
                return dict(bound.arguments)
            except TypeError as e:
                logger.warning(
                    f"Failed to bind arguments for function {func_name}: {e}",
                    stacklevel=3,
                )
                return {}

        def format_arguments(arguments: dict) -> str:
            params = ", ".join(
                f"{k}={v!r}" for k, v in arguments.items() if k not in ("self", "cls")
            )
            return f"[{params}] " if params else ""

        def format_prefix(arguments: dict) -> str:
            if not prefix:
                return ""

            if "{" in prefix and "}" in prefix:
                try:
                    return f"{prefix.format_map(arguments)}: "
                except (KeyError, ValueError, AttributeError, IndexError) as e:
                    logger.warning(
                        f"Failed to format prefix '{prefix}' with arguments: {e}",
                        stacklevel=3,
                    )
            return f"{prefix}: "

        def report(e: Exception, args: tuple, kwargs: dict) -> None:
            arguments = bind_arguments(args, kwargs)
            logger.log(
                level,
                f"{format_arguments(arguments)}{format_prefix(arguments)}"
                f"{type(e).__name__}: {e}",
                exc_info=True,
                stacklevel=3,
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    report(e, args, kwargs)
                    return default_return  # type: ignore[return-value]

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report(e, args, kwargs)
                return default_return  # type: ignore[return-value]

        return sync_wrapper

    return decorator
