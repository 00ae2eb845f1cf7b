"""Probe engine: project discovery, concurrent lag checks and issue counts.

Run a lag probe against a configured module::

    >>> from sentry_exporter.probe import (
    ...     MetricsWriter, ProbeContext, ProbeKind, ProbeParams, ProjectCache,
    ...     run_probe,
    ... )
    >>> writer = MetricsWriter()
    >>> context = ProbeContext(
    ...     module=config.modules["sentry"],
    ...     params=ProbeParams(),
    ...     cache=ProjectCache(),
    ...     writer=writer,
    ... )
    >>> await run_probe(ProbeKind.LAG, context)
    True
    >>> body = writer.render()
"""

from __future__ import annotations

from .cache import ProjectCache
from .dispatch import (
    DEFAULT_PROBE_KIND,
    ProbeContext,
    ProbeKind,
    UnknownProbeKindError,
    parse_probe_kind,
    run_probe,
)
from .errors import ProbeConfigError
from .issues import IssueProbeOptions, probe_issues, resolve_issue_options
from .lag import FailureCounter, LagProber, ProbeResult
from .pacer import LaunchPacer
from .params import ProbeParams, resolve_timeout
from .writer import MetricsWriter, Sample

__all__ = [
    "DEFAULT_PROBE_KIND",
    "FailureCounter",
    "IssueProbeOptions",
    "LagProber",
    "LaunchPacer",
    "MetricsWriter",
    "ProbeConfigError",
    "ProbeContext",
    "ProbeKind",
    "ProbeParams",
    "ProbeResult",
    "ProjectCache",
    "Sample",
    "UnknownProbeKindError",
    "parse_probe_kind",
    "probe_issues",
    "resolve_issue_options",
    "resolve_timeout",
    "run_probe",
]
