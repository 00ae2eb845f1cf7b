"""Query parameters accepted by the probe endpoint."""

from __future__ import annotations

import dataclasses
import typing as typ

from sentry_exporter.common.duration import DurationError, parse_duration
from sentry_exporter.logging import get_logger, log_warning

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class ProbeParams:
    """Per-scrape overrides taken from the probe request.

    Attributes
    ----------
    module
        Name of the configured module to use.
    prober
        Probe kind, ``lag`` or ``issues``.
    target
        Single project slug to probe instead of every project.
    timeout
        Per-call timeout override as a Prometheus duration string.
    above
        Issue event threshold override.
    period
        Issue stats period override.

    """

    module: str | None = None
    prober: str | None = None
    target: str | None = None
    timeout: str | None = None
    above: str | None = None
    period: str | None = None

    @classmethod
    def from_query(cls, query: typ.Mapping[str, str]) -> ProbeParams:
        """Build parameters from a query mapping; blank values count as absent."""
        values: dict[str, str | None] = {}
        for field in dataclasses.fields(cls):
            raw = (query.get(field.name) or "").strip()
            values[field.name] = raw or None
        return cls(**values)


def resolve_timeout(override: str | None, configured: float) -> float:
    """Return the per-call timeout in seconds for one probe.

    A valid, positive ``override`` wins over the module's ``configured``
    timeout. An unusable override is logged and ignored.
    """
    if override is None:
        return configured
    try:
        seconds = parse_duration(override).total_seconds()
    except DurationError as exc:
        log_warning(logger, "Ignoring timeout override: %s", exc)
        return configured
    if seconds <= 0:
        log_warning(logger, "Ignoring non-positive timeout override %r", override)
        return configured
    return seconds
