"""High-frequency issues probe.

Counts unresolved issues whose event count reached a threshold within a
stats period, per project and across the organization.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from sentry_exporter.config.validation import VALID_ISSUE_PERIODS
from sentry_exporter.logging import get_logger, log_info
from sentry_exporter.sentry.pagination import IssueFrequencyWalker, IssueWalkResult

from .errors import ProbeConfigError

if typ.TYPE_CHECKING:
    from sentry_exporter.config.models import IssuesOptions
    from sentry_exporter.sentry.client import SentryClient

    from .params import ProbeParams
    from .writer import MetricsWriter

logger = get_logger(__name__)

DEFAULT_ISSUE_THRESHOLD = 10000
DEFAULT_ISSUE_PERIOD = "14d"


@dataclasses.dataclass(frozen=True, slots=True)
class IssueProbeOptions:
    """Effective threshold and period for one issues probe."""

    above: int
    period: str
    exhaustive: bool = False


def resolve_issue_options(
    params: ProbeParams, options: IssuesOptions
) -> IssueProbeOptions:
    """Resolve threshold and period: query parameter, then module, then default.

    Raises
    ------
    ProbeConfigError
        If the threshold override is not a positive integer or the period is
        not one of the supported values.

    """
    above = options.above if options.above > 0 else DEFAULT_ISSUE_THRESHOLD
    if params.above is not None:
        try:
            above = int(params.above)
        except ValueError as exc:
            raise ProbeConfigError.invalid_threshold(params.above) from exc
        if above <= 0:
            raise ProbeConfigError.invalid_threshold(params.above)

    period = params.period or options.period or DEFAULT_ISSUE_PERIOD
    if period not in VALID_ISSUE_PERIODS:
        raise ProbeConfigError.invalid_period(period, VALID_ISSUE_PERIODS)

    return IssueProbeOptions(above=above, period=period, exhaustive=options.exhaustive)


def write_issue_metrics(
    writer: MetricsWriter, result: IssueWalkResult, options: IssueProbeOptions
) -> None:
    """Write per-project and organization-wide qualifying issue counts."""
    above = str(options.above)
    for project, count in result.per_project.items():
        if count > 0:
            writer.write(
                "sentry_project_high_freq_issues",
                count,
                project=project,
                above=above,
                period=options.period,
            )
    writer.write(
        "sentry_high_freq_issues", result.total, above=above, period=options.period
    )
    writer.write("sentry_fetch_failures", 1 if result.failed else 0)


async def probe_issues(
    client: SentryClient, options: IssueProbeOptions, writer: MetricsWriter
) -> bool:
    """Walk the issue list and write the high-frequency issue metrics."""
    log_info(
        logger,
        "Processing issues probe for period %s above %d",
        options.period,
        options.above,
    )
    walker = IssueFrequencyWalker(
        client,
        threshold=options.above,
        period=options.period,
        exhaustive=options.exhaustive,
    )
    result = await walker.walk()
    write_issue_metrics(writer, result, options)
    log_info(
        logger,
        "Processed issues probe: %d issues over %d pages",
        result.total,
        result.pages,
    )
    return True
