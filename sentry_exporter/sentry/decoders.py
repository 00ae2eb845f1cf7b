"""Decoders that turn Sentry API bodies into the numbers the probes emit."""

from __future__ import annotations

import typing as typ

import msgspec

from .errors import SentryDecodeError
from .models import (
    EventSeriesSummary,
    IssueStats,
    IssueSummary,
    ProjectKey,
    ProjectSummary,
)

T = typ.TypeVar("T")


def _decode(body: bytes, type_: type[T], *, shape: str) -> T:
    try:
        return msgspec.json.decode(body, type=type_)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise SentryDecodeError.for_shape(shape, exc) from exc


def decode_project_slugs(body: bytes) -> tuple[str, ...]:
    """Return the slug of every project in a project list response."""
    projects = _decode(body, list[ProjectSummary], shape="project list")
    return tuple(project.slug for project in projects)


def decode_rate_limit(body: bytes) -> float:
    """Return the first project key's rate limit in requests per second.

    A key list that is empty, or whose first key has no rate limit
    configured, yields ``0.0``.

    Examples
    --------
    >>> decode_rate_limit(b'[{"rateLimit": {"window": 60, "count": 120}}]')
    2.0

    """
    keys = _decode(body, list[ProjectKey], shape="project key list")
    if not keys or keys[0].rate_limit is None:
        return 0.0
    rate_limit = keys[0].rate_limit
    if rate_limit.window <= 0:
        return 0.0
    return rate_limit.count / rate_limit.window


def summarize_event_series(
    buckets: typ.Sequence[tuple[int, int]],
) -> EventSeriesSummary:
    """Sum an oldest-to-newest series and find its newest non-zero bucket.

    Every bucket, including the newest one that may still be filling, is
    part of the total.
    """
    total = sum(count for _, count in buckets)
    latest_timestamp = next(
        (timestamp for timestamp, count in reversed(buckets) if count > 0),
        0,
    )
    return EventSeriesSummary(total=total, latest_timestamp=latest_timestamp)


def decode_event_series(body: bytes) -> EventSeriesSummary:
    """Decode a ``stats`` response and summarize it."""
    buckets = _decode(body, list[tuple[int, int]], shape="event count series")
    return summarize_event_series(buckets)


def decode_issues(body: bytes) -> list[IssueSummary]:
    """Decode one page of the organization issue list."""
    return _decode(body, list[IssueSummary], shape="issue list")


def _as_count(issue_id: str, value: str | int) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except ValueError as exc:
        raise SentryDecodeError.invalid_count(issue_id, value) from exc


def decode_issue_counts(body: bytes) -> dict[str, int]:
    """Map issue ids to their event counts from an ``issues-stats`` batch.

    The lifetime count is used when present; otherwise the count for the
    requested stats period.
    """
    stats = _decode(body, list[IssueStats], shape="issue stats batch")
    counts: dict[str, int] = {}
    for entry in stats:
        raw = entry.lifetime.count if entry.lifetime is not None else entry.count
        counts[entry.id] = _as_count(entry.id, raw)
    return counts
