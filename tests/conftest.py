import pytest

from helpers import make_observations
from metrics_relay.registry import MetricsRegistry


@pytest.fixture
def registry() -> MetricsRegistry:
    return MetricsRegistry(
        make_observations(
            [
                '{"name":"foo_total","type":"counter","help":"Total number of foos."}',
                '{"name":"bar_seconds","type":"histogram","help":"Bar duration in seconds.","buckets":[0.01, 0.05, 0.1, 0.5, 1, 2, 5, 10]}',
                '{"name":"baz_size","type":"gauge","help":"Current size of baz widget."}',
                '{"name":"qux_count","type":"counter","help":"Count of qux events."}',
            ]
        )
    )
