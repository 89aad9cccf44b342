"""Shared record pipeline for every transport."""
from __future__ import annotations

from ..compression import decompress_if_gzipped
from ..decoding import decode_line
from ..registry import MetricsRegistry


def handle_record(data: bytes, registry: MetricsRegistry) -> str:
    """Decompress, decode and apply one record; return the metric name.

    Raises :class:`~metrics_relay.errors.RelayError` subclasses, leaving the
    registry untouched on failure.
    """
    observation = decode_line(decompress_if_gzipped(data))
    registry.observe(observation)
    return observation.name
