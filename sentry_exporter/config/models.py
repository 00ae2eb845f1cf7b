"""Typed exporter configuration structures."""

from __future__ import annotations

import msgspec

from sentry_exporter.common.duration import parse_duration

DEFAULT_TIMEOUT_SECONDS = 10.0


def _timeout_seconds(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    return parse_duration(raw).total_seconds()


class IssuesOptions(msgspec.Struct, kw_only=True, frozen=True):
    """Defaults for the high-frequency issues probe.

    Attributes
    ----------
    timeout : str, optional
        Per-call timeout as a Prometheus duration string.
    period : str
        Issue stats period, ``14d`` or ``24h``. Empty selects the built-in
        default.
    above : int
        Event count an issue must reach to be counted. ``0`` selects the
        built-in default.
    exhaustive : bool
        Follow pagination cursors to the last page instead of stopping at the
        first page that contains an issue below the threshold.

    """

    timeout: str | None = None
    period: str = ""
    above: int = 0
    exhaustive: bool = False

    @property
    def timeout_seconds(self) -> float:
        """Return the configured per-call timeout in seconds."""
        return _timeout_seconds(self.timeout)


class LagOptions(msgspec.Struct, kw_only=True, frozen=True):
    """Defaults for the event lag probe."""

    timeout: str | None = None

    @property
    def timeout_seconds(self) -> float:
        """Return the configured per-call timeout in seconds."""
        return _timeout_seconds(self.timeout)


class HTTPProbe(msgspec.Struct, kw_only=True, frozen=True):
    """Connection and probe settings for one Sentry organization.

    Attributes
    ----------
    domain : str
        Base address of the Sentry installation, e.g. ``https://sentry.io``.
    organization : str
        Organization slug whose projects are probed.
    valid_status_codes : tuple[int, ...]
        Accepted HTTP status codes. Empty means any 2xx.
    ratelimit : bool
        Report the first project key's rate limit for every project.
    headers : dict[str, str]
        Headers sent with every request. ``Host`` overrides the virtual host.
    issues : IssuesOptions
        Issues probe defaults.
    lag : LagOptions
        Lag probe defaults.

    """

    domain: str = ""
    organization: str = ""
    valid_status_codes: tuple[int, ...] = ()
    ratelimit: bool = False
    headers: dict[str, str] = msgspec.field(default_factory=dict)
    issues: IssuesOptions = msgspec.field(default_factory=IssuesOptions)
    lag: LagOptions = msgspec.field(default_factory=LagOptions)


class Module(msgspec.Struct, kw_only=True, frozen=True):
    """Named probe module selected by the ``module`` query parameter."""

    http: HTTPProbe = msgspec.field(default_factory=HTTPProbe)


class ExporterConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Top-level exporter configuration file."""

    modules: dict[str, Module] = msgspec.field(default_factory=dict)
