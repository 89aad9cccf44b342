"""Relay that aggregates pushed metric records and serves them to Prometheus."""
from .errors import (
    DeclarationConflict,
    DecodeError,
    DecompressionError,
    InvalidLine,
    RelayError,
    UnknownMetric,
)
from .models import MetricKind, Observation
from .registry import MetricsRegistry

__version__ = "0.1.0"

__all__ = [
    "DeclarationConflict",
    "DecodeError",
    "DecompressionError",
    "InvalidLine",
    "MetricKind",
    "MetricsRegistry",
    "Observation",
    "RelayError",
    "UnknownMetric",
]
