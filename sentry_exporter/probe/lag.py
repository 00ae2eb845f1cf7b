"""Event lag probe: concurrent per-project event counts and freshness.

For every project the probe reads the last hour of ``received`` and
``rejected`` event counts, reports how long ago events last arrived, and
optionally the project key's rate limit. Failed calls are counted, never
retried, and never stop the other projects.
"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from sentry_exporter.common.time import lag_seconds, unix_now
from sentry_exporter.logging import (
    get_logger,
    log_debug,
    log_error,
    log_exception,
    log_info,
)
from sentry_exporter.sentry.decoders import decode_event_series, decode_rate_limit
from sentry_exporter.sentry.errors import SentryAPIError

from .pacer import LaunchPacer

if typ.TYPE_CHECKING:
    from sentry_exporter.sentry.client import SentryClient

    from .writer import MetricsWriter

logger = get_logger(__name__)

EVENT_STATS: tuple[str, ...] = ("received", "rejected")
LOOKBACK_SECONDS = 60 * 60
STATS_RESOLUTION = "10s"


class FailureCounter:
    """Count failed Sentry calls across the workers of one probe."""

    def __init__(self) -> None:
        """Start counting from zero."""
        self._value = 0

    @property
    def value(self) -> int:
        """Return the number of failures recorded."""
        return self._value

    def increment(self) -> None:
        """Record one failed call."""
        # Workers share one event loop; increments never interleave.
        self._value += 1


@dataclasses.dataclass(frozen=True, slots=True)
class ProbeResult:
    """Aggregates of one lag probe.

    Attributes
    ----------
    projects : int
        Projects visited.
    failures : int
        Failed Sentry calls, including a failed project list refresh.
    latest_timestamp : int | None
        Newest non-zero ``received`` bucket across all projects, or ``None``
        when no project received events in the lookback window.

    """

    projects: int
    failures: int
    latest_timestamp: int | None


class LagProber:
    """Fan out event lag checks over a set of projects."""

    def __init__(
        self,
        client: SentryClient,
        writer: MetricsWriter,
        *,
        ratelimit: bool = False,
        pacer: LaunchPacer | None = None,
        clock: typ.Callable[[], int] = unix_now,
    ) -> None:
        """Bind the prober to a client, an output writer and its options."""
        self._client = client
        self._writer = writer
        self._ratelimit = ratelimit
        self._pacer = pacer or LaunchPacer()
        self._clock = clock

    async def probe_all(
        self,
        targets: typ.Sequence[str],
        failures: FailureCounter | None = None,
    ) -> ProbeResult:
        """Probe every target and write the organization-wide aggregates.

        One task is launched per project, paced by the launch pacer. Each task
        reports its newest ``received`` timestamp on a queue sized to the
        number of targets; the aggregates are computed only after every task
        has finished. An unexpected error in one task is logged and counted
        as a single failure without disturbing the others.
        """
        counter = FailureCounter() if failures is None else failures
        log_info(logger, "Processing lag probe for %d Sentry projects", len(targets))

        reports: asyncio.Queue[int] = asyncio.Queue(maxsize=max(len(targets), 1))
        tasks: list[asyncio.Task[None]] = []
        for project in targets:
            await self._pacer.acquire()
            tasks.append(
                asyncio.create_task(self._probe_project(project, reports, counter))
            )
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        for project, outcome in zip(targets, outcomes, strict=True):
            if isinstance(outcome, Exception):
                log_exception(logger, f"Unexpected error probing {project}", outcome)
                counter.increment()

        latest: int | None = None
        while not reports.empty():
            timestamp = reports.get_nowait()
            if timestamp > 0 and (latest is None or timestamp > latest):
                latest = timestamp

        if latest is not None:
            self._writer.write("sentry_events_latest_timestamp", latest)
            self._writer.write(
                "sentry_events_lag_seconds", lag_seconds(latest, now=self._clock())
            )
        self._writer.write("sentry_fetch_failures", counter.value)
        log_info(logger, "Processed probe with %d fetch failures", counter.value)

        return ProbeResult(
            projects=len(targets),
            failures=counter.value,
            latest_timestamp=latest,
        )

    async def _probe_project(
        self,
        project: str,
        reports: asyncio.Queue[int],
        failures: FailureCounter,
    ) -> None:
        latest_timestamp = 0
        try:
            for stat in EVENT_STATS:
                try:
                    timestamp = await self._request_event_count(project, stat)
                except SentryAPIError as exc:
                    log_error(
                        logger,
                        "Error fetching %s events for %s: %s",
                        stat,
                        project,
                        exc,
                    )
                    failures.increment()
                    continue
                if stat == "received":
                    latest_timestamp = timestamp

            if self._ratelimit:
                try:
                    await self._request_rate_limit(project)
                except SentryAPIError as exc:
                    log_error(
                        logger, "Error fetching rate limit for %s: %s", project, exc
                    )
                    failures.increment()
        finally:
            reports.put_nowait(latest_timestamp)
        log_debug(logger, "Processed project %s", project)

    async def _request_event_count(self, project: str, stat: str) -> int:
        """Write the event metrics for ``stat`` and return its newest timestamp."""
        now = self._clock()
        since = now - LOOKBACK_SECONDS
        response = await self._client.request(
            f"projects/{self._client.organization}/{project}/stats/"
            f"?resolution={STATS_RESOLUTION}&stat={stat}&since={since}"
        )
        summary = decode_event_series(response.content)

        self._writer.write(
            "sentry_events_total", summary.total, stat=stat, project=project
        )
        if summary.latest_timestamp > 0:
            self._writer.write(
                "sentry_project_latest_timestamp",
                summary.latest_timestamp,
                stat=stat,
                project=project,
            )
            self._writer.write(
                "sentry_project_lag_seconds",
                lag_seconds(summary.latest_timestamp, now=now),
                stat=stat,
                project=project,
            )
        return summary.latest_timestamp

    async def _request_rate_limit(self, project: str) -> None:
        response = await self._client.request(
            f"projects/{self._client.organization}/{project}/keys/"
        )
        rate = decode_rate_limit(response.content)
        self._writer.write(
            "sentry_project_rate_limit_seconds_total", rate, project=project
        )
