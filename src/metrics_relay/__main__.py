"""Entrypoint for running the relay via `python -m metrics_relay`."""
from __future__ import annotations

import asyncio

import structlog

from .config import get_settings, settings_dict
from .decoding import load_declarations
from .logging_utils import configure_logging
from .registry import MetricsRegistry
from .server import RelayService

_logger = structlog.get_logger(__name__)


async def run() -> None:
    settings = get_settings()
    declarations = load_declarations(settings.declarations_path) if settings.declarations_path else []
    registry = MetricsRegistry(declarations)
    service = RelayService(settings, registry)
    await service.start()
    _logger.info("relay started", settings=settings_dict(), families=len(registry))
    try:
        await service.wait()
    finally:
        await service.stop()


def main() -> None:
    configure_logging(get_settings().log_level)
    asyncio.run(run())


if __name__ == "__main__":  # pragma: no cover
    main()
