"""
channels.py

Engine channel set: one connection per SPDZ engine, ordered by engine index.

- TcpEngineChannel: asyncio stream connection to an engine at base_port + index.
  The client id is written raw as the first bytes; every later message is framed
  with an 8-byte little-endian length.
- QueueEngineChannel: in-memory channel backed by asyncio.Queue pairs, used to
  stand in for engines. Putting None on the engine side simulates a dropped link.
- ChannelSet: ordered collection with send_all / receive / close_all. Exchanges are
  strictly sequential; a broken link is fatal (no partial quorum).
"""

from __future__ import annotations
import asyncio
from typing import Iterator, List, Optional, Sequence

from . import constants, logger
from .errors import ConfigurationError, TransportFailure, WireFormatError
from .utils.serialization import FRAME_HEADER, frame_message, pack_client_id


def _check_frame_length(engine_index: int, length: int, max_length: Optional[int]) -> None:
    if max_length is not None and length > max_length:
        raise WireFormatError(
            f"Engine {engine_index} announced a {length}-byte message, at most {max_length} expected"
        )


class EngineChannel:
    engine_index: int

    async def send(self, payload: bytes) -> None:
        raise NotImplementedError

    async def receive(self, max_length: Optional[int] = None) -> bytearray:
        """Next framed message; a frame longer than max_length is a WireFormatError."""
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class TcpEngineChannel(EngineChannel):
    def __init__(self, engine_index: int, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.engine_index = engine_index
        self._reader = reader
        self._writer = writer

    @classmethod
    async def open(cls, host: str, port: int, client_id: int, engine_index: int) -> "TcpEngineChannel":
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            raise TransportFailure(f"Cannot connect to engine {engine_index} at {host}:{port}: {e}") from e
        try:
            writer.write(pack_client_id(client_id))
            await writer.drain()
        except OSError as e:
            writer.close()
            raise TransportFailure(f"Cannot announce client id to engine {engine_index} at {host}:{port}: {e}") from e
        logger.secure_log("info", "Connected to engine", engine=engine_index, host=host, port=port)
        return cls(engine_index, reader, writer)

    async def send(self, payload: bytes) -> None:
        try:
            self._writer.write(frame_message(payload))
            await self._writer.drain()
        except OSError as e:
            raise TransportFailure(f"Send to engine {self.engine_index} failed: {e}") from e

    async def receive(self, max_length: Optional[int] = None) -> bytearray:
        try:
            header = await self._reader.readexactly(FRAME_HEADER.size)
            (length,) = FRAME_HEADER.unpack(header)
            _check_frame_length(self.engine_index, length, max_length)
            payload = await self._reader.readexactly(length)
        except asyncio.IncompleteReadError as e:
            raise TransportFailure(f"Engine {self.engine_index} closed the connection mid-message") from e
        except OSError as e:
            raise TransportFailure(f"Receive from engine {self.engine_index} failed: {e}") from e
        return bytearray(payload)

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.secure_log("warning", "Error while closing engine connection", engine=self.engine_index, err=str(e))


class QueueEngineChannel(EngineChannel):
    def __init__(self, engine_index: int, to_engine: Optional[asyncio.Queue] = None,
                 from_engine: Optional[asyncio.Queue] = None):
        self.engine_index = engine_index
        self.to_engine: asyncio.Queue = to_engine if to_engine is not None else asyncio.Queue()
        self.from_engine: asyncio.Queue = from_engine if from_engine is not None else asyncio.Queue()
        self.closed = False

    async def send(self, payload: bytes) -> None:
        if self.closed:
            raise TransportFailure(f"Channel to engine {self.engine_index} is closed")
        await self.to_engine.put(bytes(payload))

    async def receive(self, max_length: Optional[int] = None) -> bytearray:
        if self.closed:
            raise TransportFailure(f"Channel to engine {self.engine_index} is closed")
        payload = await self.from_engine.get()
        if payload is None:
            raise TransportFailure(f"Engine {self.engine_index} dropped the connection")
        _check_frame_length(self.engine_index, len(payload), max_length)
        return bytearray(payload)

    async def close(self) -> None:
        self.closed = True


class ChannelSet:
    def __init__(self, channels: Sequence[EngineChannel]):
        if not channels:
            raise ConfigurationError("At least one engine channel is required")
        self._channels: List[EngineChannel] = list(channels)

    @classmethod
    async def connect(cls, hosts: Sequence[str], base_port: int, client_id: int,
                      engine_count: Optional[int] = None) -> "ChannelSet":
        """
        Open one channel per engine at base_port + engine_index and announce client_id.
        Any failure closes the channels already opened and raises TransportFailure.
        """
        n = len(hosts) if engine_count is None else engine_count
        if n < 1:
            raise ConfigurationError("engine_count must be at least 1")
        if len(hosts) < n:
            raise ConfigurationError(f"{n} engines requested but only {len(hosts)} host names given")

        opened: List[EngineChannel] = []
        try:
            for i in range(n):
                opened.append(await TcpEngineChannel.open(hosts[i], base_port + i, client_id, i))
        except TransportFailure:
            for ch in opened:
                await ch.close()
            raise
        logger.secure_log("info", "Finished setting up connections to SPDZ engines", engines=n)
        return cls(opened)

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[EngineChannel]:
        return iter(self._channels)

    def __getitem__(self, index: int) -> EngineChannel:
        return self._channels[index]

    async def send_all(self, payload: bytes) -> None:
        for ch in self._channels:
            await ch.send(payload)

    async def receive(self, index: int, max_length: Optional[int] = None) -> bytearray:
        return await self._channels[index].receive(max_length)

    async def close_all(self) -> None:
        errors = []
        for ch in self._channels:
            try:
                await ch.close()
            except Exception as e:
                errors.append(e)
                logger.secure_log("warning", "Failed to close engine channel", engine=ch.engine_index, err=str(e))
        logger.secure_log("info", "Closed engine channels", engines=len(self._channels), failures=len(errors))

    async def __aenter__(self) -> "ChannelSet":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close_all()


def default_hosts(engine_count: int) -> List[str]:
    return [constants.DEFAULTS["DEFAULT_HOST"]] * engine_count
