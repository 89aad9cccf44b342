"""Datagram ingestion."""
from __future__ import annotations

import asyncio
import socket
from typing import Protocol

import structlog

from ..errors import RelayError
from ..registry import MetricsRegistry
from .base import handle_record

_logger = structlog.get_logger(__name__)

MAX_DATAGRAM_SIZE = 64 * 1024


class PacketConnection(Protocol):
    async def read_packet(self, buf: bytearray) -> int:
        """Read one datagram into ``buf`` and return its length."""
        ...


class UDPPacketConnection:
    """Non-blocking UDP socket read through the running event loop."""

    def __init__(self, sock: socket.socket) -> None:
        sock.setblocking(False)
        self.sock = sock

    @classmethod
    def bind(cls, host: str, port: int) -> "UDPPacketConnection":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind((host, port))
        return cls(sock)

    @property
    def address(self) -> tuple[str, int]:
        return self.sock.getsockname()

    async def read_packet(self, buf: bytearray) -> int:
        loop = asyncio.get_running_loop()
        return await loop.sock_recv_into(self.sock, buf)

    def close(self) -> None:
        self.sock.close()


async def forward_packets(conn: PacketConnection, registry: MetricsRegistry) -> None:
    """Feed every datagram from ``conn`` into ``registry``.

    Bad records are logged and skipped. Transport errors end the loop and
    propagate to the caller.
    """
    buf = bytearray(MAX_DATAGRAM_SIZE)
    while True:
        size = await conn.read_packet(buf)
        try:
            name = handle_record(bytes(buf[:size]), registry)
        except RelayError as exc:
            _logger.error("line rejected", error=str(exc))
            continue
        _logger.debug("line accepted", name=name)
