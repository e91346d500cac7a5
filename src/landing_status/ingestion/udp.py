"""Asynchronous UDP listener for live simulator bridges.

Each datagram carries one UTF-8 JSON object with optional ``on_ground``
(boolean) and ``gforce`` (number) keys, or the equivalent simulator variable
names ``"SIM ON GROUND"`` and ``"G FORCE"``.  Decoded readings are forwarded
to an :class:`~landing_status.ingestion.events.EventFeed`; malformed
datagrams are counted and logged without interrupting the loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import socket
from types import TracebackType
from typing import Tuple, cast

from landing_status.ingestion.events import SIMVARS, EventFeed, LandingStatusEvents

__all__ = ["AsyncLandingUDPListener", "decode_datagram"]


logger = logging.getLogger(__name__)


def decode_datagram(payload: bytes) -> LandingStatusEvents:
    """Decode one datagram, raising :class:`ValueError` when malformed."""

    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Datagram is not UTF-8 JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Datagram must contain a JSON object")
    if any(simvar in data for simvar in SIMVARS):
        return LandingStatusEvents.from_simvars(data)
    return LandingStatusEvents.from_mapping(data)


class _LandingDatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, listener: "AsyncLandingUDPListener") -> None:
        self._listener = listener

    def connection_made(self, transport: asyncio.BaseTransport) -> None:  # pragma: no cover - exercised indirectly
        self._listener._connection_made(transport)

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._listener._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:  # pragma: no cover - defensive
        logger.warning(
            "UDP listener socket error.",
            extra={"event": "live.socket_error", "error": str(exc)},
        )

    def connection_lost(self, exc: Exception | None) -> None:
        self._listener._connection_lost(exc)


class AsyncLandingUDPListener:
    """Receive landing telemetry datagrams on an asyncio event loop."""

    def __init__(
        self,
        feed: EventFeed,
        host: str = "127.0.0.1",
        port: int = 49005,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._feed = feed
        self._host = host
        self._requested_port = port
        self._loop = loop
        self._transport: asyncio.DatagramTransport | None = None
        self._address: Tuple[str, int] = ("", 0)
        self._closed_event = asyncio.Event()
        self._closed_event.set()
        self._statistics = {"received": 0, "delivered": 0, "malformed": 0}

    async def start(self) -> None:
        if self._transport is not None:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        self._closed_event = asyncio.Event()
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _LandingDatagramProtocol(self),
            local_addr=(self._host, self._requested_port),
            family=socket.AF_INET,
        )
        self._transport = transport
        self._record_address(transport)

    async def __aenter__(self) -> "AsyncLandingUDPListener":
        if self._transport is None:
            await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def address(self) -> Tuple[str, int]:
        return self._address

    @property
    def statistics(self) -> dict[str, int]:
        return dict(self._statistics)

    async def close(self) -> None:
        transport = self._transport
        if transport is None:
            return
        transport.close()
        await self._closed_event.wait()

    async def serve(self, duration: float | None = None) -> None:
        """Listen until ``duration`` seconds elapse or the listener is closed."""

        await self.start()
        try:
            if duration is None:
                await self._closed_event.wait()
            else:
                try:
                    await asyncio.wait_for(self._closed_event.wait(), duration)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.close()

    def _record_address(self, transport: asyncio.BaseTransport) -> None:
        sockname = transport.get_extra_info("sockname")
        if isinstance(sockname, tuple) and len(sockname) >= 2:
            self._address = (str(sockname[0]), int(sockname[1]))
        else:
            self._address = (self._host, self._requested_port)

    def _connection_made(self, transport: asyncio.BaseTransport) -> None:
        # Selector datagram transports only subclass ``asyncio.Transport``
        # before Python 3.12.
        self._transport = cast(asyncio.DatagramTransport, transport)
        self._record_address(transport)
        logger.info(
            "Listening for landing telemetry.",
            extra={"event": "live.listening", "host": self._address[0], "port": self._address[1]},
        )

    def _on_datagram(self, payload: bytes, source: tuple[str, int]) -> None:
        self._statistics["received"] += 1
        try:
            event = decode_datagram(payload)
        except ValueError as exc:
            self._statistics["malformed"] += 1
            logger.warning(
                "Ignoring malformed landing datagram.",
                extra={
                    "event": "live.malformed",
                    "source_host": source[0],
                    "error": str(exc),
                },
            )
            return
        self._feed.publish(event)
        self._statistics["delivered"] += 1

    def _connection_lost(self, _exc: Exception | None) -> None:
        self._transport = None
        self._closed_event.set()
