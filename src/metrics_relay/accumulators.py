"""Per-kind accumulation rules."""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Sequence

from .models import MetricKind


@dataclass(frozen=True)
class ScalarState:
    value: float


@dataclass(frozen=True)
class HistogramState:
    buckets: tuple[tuple[float, int], ...]
    sum: float
    count: int


class Accumulator(ABC):
    """Mutable state of one series. Callers serialize access."""

    kind: MetricKind

    @abstractmethod
    def observe(self, value: float) -> None:
        ...

    @abstractmethod
    def state(self) -> ScalarState | HistogramState:
        ...


@dataclass
class Counter(Accumulator):
    total: float = 0.0
    kind = MetricKind.COUNTER

    def observe(self, value: float) -> None:
        self.total += value

    def state(self) -> ScalarState:
        return ScalarState(self.total)


@dataclass
class Gauge(Accumulator):
    value: float = 0.0
    kind = MetricKind.GAUGE

    def observe(self, value: float) -> None:
        self.value = value

    def state(self) -> ScalarState:
        return ScalarState(self.value)


@dataclass
class Histogram(Accumulator):
    """Counts per sub-range; the last slot holds values above every bound."""

    bounds: tuple[float, ...]
    counts: list[int] = field(default_factory=list)
    sum: float = 0.0
    count: int = 0
    kind = MetricKind.HISTOGRAM

    def __post_init__(self) -> None:
        if not self.counts:
            self.counts = [0] * (len(self.bounds) + 1)

    def observe(self, value: float) -> None:
        slot = len(self.bounds) if math.isnan(value) else bisect_left(self.bounds, value)
        self.counts[slot] += 1
        self.sum += value
        self.count += 1

    def state(self) -> HistogramState:
        cumulative = []
        running = 0
        for bound, hits in zip(self.bounds, self.counts):
            running += hits
            cumulative.append((bound, running))
        return HistogramState(buckets=tuple(cumulative), sum=self.sum, count=self.count)


def new_accumulator(kind: MetricKind, bounds: Sequence[float] = ()) -> Accumulator:
    if kind is MetricKind.COUNTER:
        return Counter()
    if kind is MetricKind.GAUGE:
        return Gauge()
    return Histogram(bounds=tuple(bounds))
