"""
Minimal Source RCON client.

Speaks the Valve remote console protocol that Factorio implements: one
authentication round trip, then request/response command packets.
"""

import asyncio
import itertools
import struct
from dataclasses import dataclass
from types import TracebackType
from typing import Optional

from ..logger import logger

# Packet types
SERVERDATA_AUTH = 3
SERVERDATA_AUTH_RESPONSE = 2
SERVERDATA_EXECCOMMAND = 2
SERVERDATA_RESPONSE_VALUE = 0

AUTH_FAILED_ID = -1

# id + type + two terminating NUL bytes
_MIN_PACKET_SIZE = 10
# Factorio sends command output as a single packet, which can be large
_MAX_PACKET_SIZE = 4 * 1024 * 1024

_HEADER = struct.Struct("<iii")
_SIZE = struct.Struct("<i")


class RconError(Exception):
    """Base class for RCON failures."""


class RconConnectError(RconError):
    """The server could not be reached or dropped the connection."""


class RconAuthError(RconError):
    """The server rejected the password."""


class RconExecError(RconError):
    """The command could not be executed or its response was malformed."""


# =============================================================================
# Packet Encoding/Decoding
# =============================================================================


@dataclass(frozen=True)
class Packet:
    request_id: int
    packet_type: int
    body: str

    def encode(self) -> bytes:
        """Encode as size-prefixed little-endian packet."""
        payload = self.body.encode("utf-8") + b"\x00\x00"
        return (
            _SIZE.pack(_HEADER.size - _SIZE.size + len(payload))
            + struct.pack("<ii", self.request_id, self.packet_type)
            + payload
        )

    @classmethod
    def decode(cls, data: bytes) -> "Packet":
        """Decode a packet without its size prefix."""
        if len(data) < _MIN_PACKET_SIZE:
            raise RconExecError(f"RCON packet too short: {len(data)} bytes")
        request_id, packet_type = struct.unpack_from("<ii", data)
        body = data[8:].rstrip(b"\x00").decode("utf-8", errors="replace")
        return cls(request_id=request_id, packet_type=packet_type, body=body)


async def read_packet(reader: asyncio.StreamReader) -> Packet:
    """Read one packet from the stream."""
    (size,) = _SIZE.unpack(await reader.readexactly(_SIZE.size))
    if not _MIN_PACKET_SIZE <= size <= _MAX_PACKET_SIZE:
        raise RconExecError(f"Invalid RCON packet size: {size}")
    return Packet.decode(await reader.readexactly(size))


# =============================================================================
# Client
# =============================================================================


class RconClient:
    """One authenticated RCON connection.

    Usage:
        async with RconClient("127.0.0.1", 27015, "secret") as conn:
            reply = await conn.command("/players online")
    """

    def __init__(self, host: str, port: int, password: str, timeout: float = 10.0):
        self.host = host
        self.port = port
        self._password = password
        self.timeout = timeout

        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RconClient":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the TCP connection and authenticate.

        Raises:
            RconConnectError: Connection failed or timed out
            RconAuthError: Wrong password
        """
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise RconConnectError(
                f"Failed to connect to {self.host}:{self.port}: {e!r}"
            ) from e

        try:
            await self._authenticate()
        except BaseException:
            await self.close()
            raise

    async def _authenticate(self) -> None:
        request_id = next(self._ids)
        await self._send(Packet(request_id, SERVERDATA_AUTH, self._password))

        while True:
            packet = await self._receive()
            # Source servers send an empty RESPONSE_VALUE before the auth response
            if packet.packet_type == SERVERDATA_RESPONSE_VALUE:
                continue
            if packet.packet_type != SERVERDATA_AUTH_RESPONSE:
                raise RconAuthError(f"Unexpected packet type {packet.packet_type}")
            if packet.request_id == AUTH_FAILED_ID:
                raise RconAuthError("Authentication failed: wrong RCON password")
            if packet.request_id != request_id:
                raise RconAuthError(
                    f"Auth response id {packet.request_id} != {request_id}"
                )
            logger.debug(f"Authenticated to RCON at {self.host}:{self.port}")
            return

    async def command(self, command: str) -> str:
        """Execute a console command and return its output.

        Raises:
            RconConnectError: Connection lost or timed out
            RconExecError: Unexpected response
        """
        if self._writer is None:
            raise RconExecError("RCON client is not connected")

        request_id = next(self._ids)
        await self._send(Packet(request_id, SERVERDATA_EXECCOMMAND, command))

        packet = await self._receive()
        if packet.packet_type != SERVERDATA_RESPONSE_VALUE:
            raise RconExecError(f"Unexpected packet type {packet.packet_type}")
        if packet.request_id != request_id:
            raise RconExecError(
                f"Response id {packet.request_id} != request id {request_id}"
            )
        return packet.body

    async def close(self) -> None:
        if self._writer is None:
            return

        writer, self._writer, self._reader = self._writer, None, None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing RCON connection: {e}")

    async def _send(self, packet: Packet) -> None:
        assert self._writer is not None
        try:
            self._writer.write(packet.encode())
            await asyncio.wait_for(self._writer.drain(), self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            raise RconConnectError(f"Failed to send RCON packet: {e!r}") from e

    async def _receive(self) -> Packet:
        assert self._reader is not None
        try:
            return await asyncio.wait_for(read_packet(self._reader), self.timeout)
        except asyncio.IncompleteReadError as e:
            raise RconConnectError("RCON connection closed by server") from e
        except (OSError, asyncio.TimeoutError) as e:
            raise RconConnectError(f"Failed to read RCON packet: {e!r}") from e
