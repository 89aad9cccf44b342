"""Pydantic models for decoded records."""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, field_validator, model_validator


class MetricKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


DEFAULT_BUCKETS: tuple[float, ...] = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class Observation(BaseModel):
    """One decoded record: either a declaration or a value update.

    A record carrying ``kind`` declares (or refreshes) a metric family. A
    record without ``kind`` updates the series selected by ``labels``; its
    ``value`` is ``None`` only when nothing was sent at all.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    kind: Optional[MetricKind] = Field(default=None, alias="type")
    help: Optional[str] = None
    buckets: Optional[tuple[StrictFloat, ...]] = None
    labels: dict[str, str] = Field(default_factory=dict)
    value: Optional[StrictFloat] = None

    @field_validator("labels", mode="before")
    @classmethod
    def _null_labels(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("buckets")
    @classmethod
    def _ascending_buckets(cls, value: Optional[tuple[float, ...]]) -> Optional[tuple[float, ...]]:
        if value is None:
            return value
        if any(not math.isfinite(bound) for bound in value):
            raise ValueError("bucket boundaries must be finite")
        if any(lower >= upper for lower, upper in zip(value, value[1:])):
            raise ValueError("bucket boundaries must be strictly ascending")
        return value

    @model_validator(mode="after")
    def _buckets_need_histogram(self) -> "Observation":
        if self.buckets is not None and self.kind is not MetricKind.HISTOGRAM:
            raise ValueError("buckets are only valid on histogram declarations")
        return self

    @property
    def is_declaration(self) -> bool:
        return self.kind is not None
