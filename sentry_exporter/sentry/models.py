"""Typed views of the Sentry API payloads the probes consume.

Only the fields the probes read are declared; msgspec ignores the rest of
each payload.
"""

from __future__ import annotations

import dataclasses

import msgspec


class ProjectSummary(msgspec.Struct):
    """Element of ``organizations/{org}/projects/``."""

    slug: str


class RateLimit(msgspec.Struct):
    """Rate limit configured on a project key."""

    window: int = 0
    count: int = 0


class ProjectKey(msgspec.Struct, rename="camel"):
    """Element of ``projects/{org}/{project}/keys/``."""

    id: str = ""
    name: str = ""
    label: str = ""
    rate_limit: RateLimit | None = None


class IssueProject(msgspec.Struct):
    """Project reference embedded in an issue."""

    slug: str
    id: str = ""


class IssueSummary(msgspec.Struct):
    """Element of ``organizations/{org}/issues/``."""

    id: str
    project: IssueProject


class IssueStatCounts(msgspec.Struct, rename="camel"):
    """Event counters for an issue over one span of time."""

    count: str | int = "0"
    first_seen: str | None = None
    last_seen: str | None = None


class IssueStats(msgspec.Struct):
    """Element of ``organizations/{org}/issues-stats/``.

    ``count`` covers the requested stats period; ``lifetime`` covers the
    whole life of the issue.
    """

    id: str
    count: str | int = "0"
    lifetime: IssueStatCounts | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class EventSeriesSummary:
    """Derived values of a ``stats`` event-count series.

    Attributes
    ----------
    total : int
        Sum of every bucket count.
    latest_timestamp : int
        Timestamp of the newest bucket with a non-zero count, or ``0`` when
        every bucket is empty.

    """

    total: int
    latest_timestamp: int
