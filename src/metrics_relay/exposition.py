"""Prometheus text exposition of a registry snapshot."""
from __future__ import annotations

import math
from typing import Iterable

from .accumulators import HistogramState, ScalarState
from .registry import FamilySnapshot, LabelSet

CONTENT_TYPE = "text/plain; version=0.0.4"


def render(families: Iterable[FamilySnapshot]) -> str:
    """Render families in name order, separated by blank lines.

    Families without any series are left out so that a declaration alone
    never shows up in a scrape.
    """
    blocks = []
    for family in sorted(families, key=lambda f: f.name):
        if not family.series:
            continue
        lines = [
            f"# HELP {family.name} {_escape_help(family.help)}",
            f"# TYPE {family.name} {family.kind.value}",
        ]
        for series in family.series:
            if isinstance(series.state, HistogramState):
                lines.extend(_histogram_lines(family.name, series.labels, series.state))
            else:
                lines.append(_scalar_line(family.name, series.labels, series.state))
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)


def _scalar_line(name: str, labels: LabelSet, state: ScalarState) -> str:
    return f"{name}{format_labels(labels)} {format_value(state.value)}"


def _histogram_lines(name: str, labels: LabelSet, state: HistogramState) -> list[str]:
    lines = [
        f"{name}_bucket{format_labels(labels, le=format_bound(bound))} {cumulative}"
        for bound, cumulative in state.buckets
    ]
    lines.append(f"{name}_bucket{format_labels(labels, le='+Inf')} {state.count}")
    lines.append(f"{name}_sum{format_labels(labels)} {format_value(state.sum)}")
    lines.append(f"{name}_count{format_labels(labels)} {state.count}")
    return lines


def format_labels(labels: LabelSet, le: str | None = None) -> str:
    pairs = [f'{key}="{_escape_label(value)}"' for key, value in labels]
    if le is not None:
        pairs.append(f'le="{le}"')
    return "{" + ",".join(pairs) + "}"


def format_value(value: float) -> str:
    """Six decimals; non-finite values use the exposition spellings."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:.6f}"


def format_bound(bound: float) -> str:
    """Shortest round-trip form: ``0.01``, ``1``, ``10``, ``1e-05``."""
    text = repr(float(bound))
    return text[:-2] if text.endswith(".0") else text


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")
