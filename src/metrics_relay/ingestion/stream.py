"""Newline-delimited stream ingestion."""
from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from ..errors import RelayError
from ..registry import MetricsRegistry
from .base import handle_record

_logger = structlog.get_logger(__name__)

MAX_LINE_SIZE = 64 * 1024


@asynccontextmanager
async def _connection(writer: asyncio.StreamWriter) -> AsyncIterator[None]:
    try:
        yield
    finally:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    registry: MetricsRegistry,
    strict: bool = False,
) -> None:
    """Apply every line from one connection.

    In strict mode the first rejected line closes the connection; otherwise
    rejected lines are logged and skipped.
    """
    logger = _logger.bind(remote_addr=writer.get_extra_info("peername"))
    async with _connection(writer):
        while True:
            try:
                line = await reader.readline()
            except (ValueError, ConnectionError) as exc:
                logger.error("connection read failed", error=str(exc))
                return
            if not line:
                return
            try:
                name = handle_record(_strip_newline(line), registry)
            except RelayError as exc:
                logger.error("line rejected", error=str(exc))
                if strict:
                    return
                continue
            logger.debug("line accepted", name=name)


async def forward_listener(
    host: str,
    port: int,
    registry: MetricsRegistry,
    strict: bool = False,
) -> asyncio.Server:
    """Start a TCP server handing each connection to :func:`handle_connection`."""

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await handle_connection(reader, writer, registry, strict=strict)

    return await asyncio.start_server(on_connect, host, port, limit=MAX_LINE_SIZE)


def _strip_newline(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line
