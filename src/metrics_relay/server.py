"""Service runtime wiring listeners and the scrape server together."""
from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

import structlog
import uvicorn

from .config import RelaySettings
from .ingestion import UDPPacketConnection, forward_listener, forward_packets
from .main import create_app
from .registry import MetricsRegistry

_logger = structlog.get_logger(__name__)


class RelayService:
    """Runs the UDP, TCP and HTTP surfaces around one registry."""

    def __init__(self, settings: RelaySettings, registry: MetricsRegistry) -> None:
        self.settings = settings
        self.registry = registry
        self._packets: Optional[UDPPacketConnection] = None
        self._packet_task: asyncio.Task[None] | None = None
        self._tcp_server: asyncio.Server | None = None
        self._http_server: uvicorn.Server | None = None
        self._http_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        try:
            await self._start()
        except BaseException:
            await self.stop()
            raise

    async def _start(self) -> None:
        settings = self.settings
        if settings.udp_port:
            self._packets = UDPPacketConnection.bind(settings.udp_host, settings.udp_port)
            self._packet_task = asyncio.create_task(self._run_packets(self._packets))
            _logger.info("udp listener started", address=self._packets.address)
        if settings.tcp_port:
            self._tcp_server = await forward_listener(
                settings.tcp_host, settings.tcp_port, self.registry, strict=settings.strict
            )
            _logger.info("tcp listener started", port=settings.tcp_port, strict=settings.strict)
        config = uvicorn.Config(
            create_app(self.registry),
            host=settings.http_host,
            port=settings.http_port,
            log_config=None,
        )
        self._http_server = uvicorn.Server(config)
        self._http_task = asyncio.create_task(self._http_server.serve())
        _logger.info("http server started", host=settings.http_host, port=settings.http_port)

    async def _run_packets(self, conn: UDPPacketConnection) -> None:
        try:
            await forward_packets(conn, self.registry)
        except OSError as exc:
            _logger.error("udp listener stopped", error=str(exc))
            raise

    async def wait(self) -> None:
        """Block until the HTTP server or the packet listener exits."""
        tasks = [task for task in (self._http_task, self._packet_task) if task is not None]
        if tasks:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                task.result()

    async def stop(self) -> None:
        if self._packet_task:
            self._packet_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, OSError):
                await self._packet_task
        if self._packets:
            self._packets.close()
        if self._tcp_server:
            self._tcp_server.close()
            await self._tcp_server.wait_closed()
        if self._http_server and self._http_task:
            self._http_server.should_exit = True
            await self._http_task
        _logger.info("relay stopped")
