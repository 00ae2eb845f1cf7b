"""Per-scrape metric sink rendered as a Prometheus text exposition.

Probe workers write samples concurrently; the writer keeps them in arrival
order and renders every family in one pass once the probe has finished, so
no partially written line can reach the scraper.
"""

from __future__ import annotations

import dataclasses
import threading
import typing as typ

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily

if typ.TYPE_CHECKING:
    import collections.abc as cabc

METRIC_HELP: dict[str, str] = {
    "sentry_projects_total": "Number of projects in the Sentry organization.",
    "sentry_events_total": "Events in the last hour by stat and project.",
    "sentry_project_latest_timestamp": "Newest bucket with events per project.",
    "sentry_project_lag_seconds": "Seconds since the newest bucket with events.",
    "sentry_project_rate_limit_seconds_total": (
        "Rate limit of the first project key in requests per second."
    ),
    "sentry_events_latest_timestamp": "Newest bucket with events in any project.",
    "sentry_events_lag_seconds": "Seconds since events were last received.",
    "sentry_fetch_failures": "Sentry API calls that failed during this probe.",
    "sentry_project_high_freq_issues": (
        "Unresolved issues above the event threshold per project."
    ),
    "sentry_high_freq_issues": "Unresolved issues above the event threshold.",
    "probe_duration_seconds": "Seconds the probe took to complete.",
    "probe_success": "Whether the probe succeeded.",
}


@dataclasses.dataclass(frozen=True, slots=True)
class Sample:
    """One written metric value with its labels in write order."""

    name: str
    labels: tuple[tuple[str, str], ...]
    value: float

    @property
    def label_map(self) -> dict[str, str]:
        """Return the labels as a dictionary."""
        return dict(self.labels)


class _SampleCollector:
    """Expose captured samples to a ``CollectorRegistry`` as gauges."""

    def __init__(self, samples: tuple[Sample, ...]) -> None:
        self._samples = samples

    def collect(self) -> cabc.Iterator[GaugeMetricFamily]:
        families: dict[str, GaugeMetricFamily] = {}
        for sample in self._samples:
            family = families.get(sample.name)
            if family is None:
                family = GaugeMetricFamily(
                    sample.name,
                    METRIC_HELP.get(sample.name, sample.name),
                    labels=[name for name, _ in sample.labels],
                )
                families[sample.name] = family
            family.add_metric([value for _, value in sample.labels], sample.value)
        yield from families.values()


class MetricsWriter:
    """Collect the samples produced by one probe."""

    def __init__(self) -> None:
        """Create an empty writer."""
        self._samples: list[Sample] = []
        self._lock = threading.Lock()

    def write(self, name: str, value: float, /, **labels: str) -> None:
        """Record ``value`` for metric ``name`` with ``labels``."""
        sample = Sample(name=name, labels=tuple(labels.items()), value=float(value))
        with self._lock:
            self._samples.append(sample)

    @property
    def samples(self) -> tuple[Sample, ...]:
        """Return a snapshot of every sample written so far."""
        with self._lock:
            return tuple(self._samples)

    def find(self, name: str, **labels: str) -> list[Sample]:
        """Return samples named ``name`` whose labels include ``labels``."""
        return [
            sample
            for sample in self.samples
            if sample.name == name
            and all(sample.label_map.get(key) == val for key, val in labels.items())
        ]

    def render(self) -> bytes:
        """Render every sample in the Prometheus text exposition format."""
        registry = CollectorRegistry(auto_describe=False)
        registry.register(_SampleCollector(self.samples))
        return generate_latest(registry)
