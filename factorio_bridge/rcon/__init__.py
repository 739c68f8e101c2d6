"""Remote console (RCON) access to the Factorio server."""

from .client import (
    RconAuthError,
    RconClient,
    RconConnectError,
    RconError,
    RconExecError,
)
from .sender import ConsoleCommandSender

__all__ = [
    "ConsoleCommandSender",
    "RconAuthError",
    "RconClient",
    "RconConnectError",
    "RconError",
    "RconExecError",
]
