"""In-memory metric registry."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable

import structlog

from .accumulators import Accumulator, HistogramState, ScalarState, new_accumulator
from .errors import DeclarationConflict, DecodeError, UnknownMetric
from .models import DEFAULT_BUCKETS, MetricKind, Observation

_logger = structlog.get_logger(__name__)

LabelSet = tuple[tuple[str, str], ...]


def canonical_labels(labels: Dict[str, str]) -> LabelSet:
    """Order-independent identity of a label set."""
    return tuple(sorted(labels.items()))


@dataclass
class Series:
    labels: LabelSet
    accumulator: Accumulator


@dataclass
class MetricFamily:
    name: str
    kind: MetricKind
    help: str = ""
    buckets: tuple[float, ...] = ()
    series: Dict[LabelSet, Series] = field(default_factory=dict)


@dataclass(frozen=True)
class SeriesSnapshot:
    labels: LabelSet
    state: ScalarState | HistogramState


@dataclass(frozen=True)
class FamilySnapshot:
    name: str
    kind: MetricKind
    help: str
    series: tuple[SeriesSnapshot, ...]


class MetricsRegistry:
    """Owns every metric family and series.

    All reads and writes go through one lock so that concurrent observers
    never race on a series and a snapshot reflects a consistent prefix of
    the observations applied so far.
    """

    def __init__(self, declarations: Iterable[Observation] = ()) -> None:
        self._families: Dict[str, MetricFamily] = {}
        self._lock = threading.Lock()
        for declaration in declarations:
            self.observe(declaration)

    def observe(self, observation: Observation) -> None:
        with self._lock:
            if observation.is_declaration:
                self._declare(observation)
            else:
                self._update(observation)

    def _declare(self, observation: Observation) -> None:
        kind = MetricKind(observation.kind)
        family = self._families.get(observation.name)
        if family is None:
            buckets = observation.buckets
            if kind is MetricKind.HISTOGRAM and buckets is None:
                buckets = DEFAULT_BUCKETS
            self._families[observation.name] = MetricFamily(
                name=observation.name,
                kind=kind,
                help=observation.help or "",
                buckets=tuple(buckets or ()),
            )
            _logger.debug("family declared", name=observation.name, kind=kind.value)
            return

        if family.kind is not kind:
            raise DeclarationConflict(
                f"{family.name} is already declared as {family.kind.value}, not {kind.value}"
            )
        buckets = observation.buckets
        if buckets is not None and buckets != family.buckets and family.series:
            raise DeclarationConflict(f"{family.name} already has series; its buckets cannot change")

        if observation.help is not None:
            family.help = observation.help
        if buckets is not None:
            family.buckets = buckets

    def _update(self, observation: Observation) -> None:
        family = self._families.get(observation.name)
        if family is None:
            raise UnknownMetric(f"{observation.name} has not been declared")
        if observation.value is None:
            # A bare name with neither kind nor value carries nothing to apply.
            return
        if family.kind is MetricKind.HISTOGRAM and "le" in observation.labels:
            raise DecodeError(f"{family.name}: label le is reserved for histogram buckets", "le")
        key = canonical_labels(observation.labels)
        series = family.series.get(key)
        if series is None:
            series = Series(labels=key, accumulator=new_accumulator(family.kind, family.buckets))
            family.series[key] = series
        series.accumulator.observe(observation.value)

    def snapshot(self) -> list[FamilySnapshot]:
        """Return an immutable copy of every family, ordered by name."""
        with self._lock:
            return [
                FamilySnapshot(
                    name=family.name,
                    kind=family.kind,
                    help=family.help,
                    series=tuple(
                        SeriesSnapshot(labels=key, state=family.series[key].accumulator.state())
                        for key in sorted(family.series)
                    ),
                )
                for family in sorted(self._families.values(), key=lambda f: f.name)
            ]

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._families

    def __len__(self) -> int:
        with self._lock:
            return len(self._families)
