"""Console command sink used by the router."""

from ..config import split_address
from ..logger import logger
from .client import RconClient


class ConsoleCommandSender:
    """Runs console commands on the Factorio server, one RCON session per call."""

    def __init__(self, address: str, password: str, timeout: float = 10.0):
        """Initialize the sender.

        Args:
            address: RCON address as ``host:port``
            password: RCON password
            timeout: Seconds allowed for each network step
        """
        self.host, self.port = split_address(address)
        self._password = password
        self.timeout = timeout

    async def send_command(self, command: str) -> str:
        """Connect, authenticate, run the command and return its output.

        Failures are raised as RconError subclasses and never retried here.
        """
        async with RconClient(
            self.host, self.port, self._password, timeout=self.timeout
        ) as conn:
            response = await conn.command(command)

        logger.debug(f"RCON {command!r} -> {response!r}")
        return response
