from typing import Iterable

from metrics_relay.decoding import decode_line
from metrics_relay.models import Observation
from metrics_relay.registry import MetricsRegistry


def make_observations(lines: Iterable[str]) -> list[Observation]:
    return [decode_line(line.encode("utf-8")) for line in lines]


def load_observations(registry: MetricsRegistry, lines: Iterable[str]) -> None:
    for obs in make_observations(lines):
        registry.observe(obs)


def normalize(text: str) -> str:
    return "\n".join(line.strip() for line in text.strip().splitlines())
