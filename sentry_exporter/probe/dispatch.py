"""Probe selection and execution for one scrape."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from sentry_exporter.logging import get_logger, log_error, log_info
from sentry_exporter.sentry.client import SentryClient

from .errors import ProbeConfigError
from .issues import probe_issues, resolve_issue_options
from .lag import FailureCounter, LagProber
from .params import resolve_timeout

if typ.TYPE_CHECKING:
    import httpx

    from sentry_exporter.config.models import Module

    from .cache import ProjectCache
    from .pacer import LaunchPacer
    from .params import ProbeParams
    from .writer import MetricsWriter

logger = get_logger(__name__)


class ProbeKind(enum.StrEnum):
    """Probes selectable through the ``prober`` query parameter."""

    LAG = "lag"
    ISSUES = "issues"


DEFAULT_PROBE_KIND = ProbeKind.LAG


class UnknownProbeKindError(ValueError):
    """Raised when the ``prober`` parameter names no known probe."""

    def __init__(self, name: str) -> None:
        """Record the rejected probe name."""
        self.name = name
        super().__init__(f'Unknown prober "{name}"')


def parse_probe_kind(name: str | None) -> ProbeKind:
    """Return the probe kind for ``name``; ``None`` selects the default."""
    if name is None:
        return DEFAULT_PROBE_KIND
    try:
        return ProbeKind(name)
    except ValueError as exc:
        raise UnknownProbeKindError(name) from exc


@dataclasses.dataclass(frozen=True, slots=True)
class ProbeContext:
    """Everything one probe run needs.

    Attributes
    ----------
    module
        Module configuration snapshot for this scrape.
    params
        Query parameter overrides.
    cache
        Project list cache shared across scrapes.
    writer
        Sink for this scrape's samples.
    transport
        Optional HTTP transport for the Sentry client.
    pacer
        Optional launch pacer for the lag probe.

    """

    module: Module
    params: ProbeParams
    cache: ProjectCache
    writer: MetricsWriter
    transport: httpx.AsyncBaseTransport | None = None
    pacer: LaunchPacer | None = None


async def run_probe(kind: ProbeKind, context: ProbeContext) -> bool:
    """Run the probe selected by ``kind`` and return whether it succeeded."""
    log_info(logger, "Starting prober %s with params %r", kind, context.params)
    match kind:
        case ProbeKind.LAG:
            return await _run_lag(context)
        case ProbeKind.ISSUES:
            return await _run_issues(context)


async def _run_lag(context: ProbeContext) -> bool:
    config = context.module.http
    client = SentryClient(
        config,
        timeout=resolve_timeout(context.params.timeout, config.lag.timeout_seconds),
        transport=context.transport,
    )
    try:
        failures = FailureCounter()
        targets = await context.cache.get_targets(
            context.params.target, client, context.writer, failures
        )
        prober = LagProber(
            client, context.writer, ratelimit=config.ratelimit, pacer=context.pacer
        )
        await prober.probe_all(targets, failures)
    finally:
        await client.aclose()
    return True


async def _run_issues(context: ProbeContext) -> bool:
    config = context.module.http
    try:
        options = resolve_issue_options(context.params, config.issues)
    except ProbeConfigError as exc:
        log_error(logger, "Issues probe not started: %s", exc)
        return False

    client = SentryClient(
        config,
        timeout=resolve_timeout(context.params.timeout, config.issues.timeout_seconds),
        transport=context.transport,
    )
    try:
        return await probe_issues(client, options, context.writer)
    finally:
        await client.aclose()
