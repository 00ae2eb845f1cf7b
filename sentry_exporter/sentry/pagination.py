"""Cursor pagination over the organization issue list.

Sentry paginates list endpoints through a ``link`` response header::

    <https://...&cursor=0:0:1>; rel="previous"; results="false"; cursor="0:0:1",
    <https://...&cursor=0:25:0>; rel="next"; results="true"; cursor="0:25:0"

The walker in this module follows the ``rel="next"`` cursor while pages keep
producing issues whose event count reaches a threshold.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from urllib.parse import quote

from sentry_exporter.logging import get_logger, log_error, log_info

from .decoders import decode_issue_counts, decode_issues
from .errors import SentryAPIError

if typ.TYPE_CHECKING:
    from .client import SentryClient

logger = get_logger(__name__)

ISSUES_PAGE_SIZE = 25

_SEGMENT_SEPARATOR = ", "
_NEXT_MARKER = 'rel="next"'
_CURSOR_PREFIX = 'cursor="'
_NO_RESULTS_MARKER = 'results="false"'


def _next_segment(link_header: str) -> str | None:
    for segment in link_header.split(_SEGMENT_SEPARATOR):
        if _NEXT_MARKER in segment:
            return segment
    return None


def parse_next_cursor(link_header: str | None) -> str | None:
    """Return the ``rel="next"`` cursor in a ``link`` header, if any.

    Examples
    --------
    >>> parse_next_cursor('<https://x>; rel="next"; results="true"; cursor="0:25:0"')
    '0:25:0'
    >>> parse_next_cursor('<https://x>; rel="previous"; cursor="0:0:1"') is None
    True

    """
    if not link_header:
        return None
    segment = _next_segment(link_header)
    if segment is None:
        return None
    for part in segment.split(";"):
        token = part.strip()
        if token.startswith(_CURSOR_PREFIX):
            return token.removeprefix(_CURSOR_PREFIX).removesuffix('"')
    return None


def has_more_results(link_header: str | None) -> bool:
    """Return ``False`` when the next link says it has no results."""
    if not link_header:
        return False
    segment = _next_segment(link_header)
    return segment is not None and _NO_RESULTS_MARKER not in segment


def cursor_query(cursor: str | None) -> str:
    """Render ``cursor`` as a query string fragment; empty for the first page."""
    if not cursor:
        return ""
    return f"cursor={quote(cursor, safe=':')}"


@dataclasses.dataclass(slots=True)
class IssueWalkResult:
    """Outcome of one walk over the issue list.

    Attributes
    ----------
    per_project : dict[str, int]
        Qualifying issues per project slug.
    total : int
        Qualifying issues across the organization.
    pages : int
        Issue list pages fetched.
    failed : bool
        ``True`` when an upstream error cut the walk short.

    """

    per_project: dict[str, int] = dataclasses.field(default_factory=dict)
    total: int = 0
    pages: int = 0
    failed: bool = False


class IssueFrequencyWalker:
    """Count unresolved issues whose event count reaches a threshold.

    The issue list is requested sorted by frequency, so by default the walk
    ends at the first page containing an issue below the threshold. With
    ``exhaustive`` set, every page is scanned.
    """

    def __init__(
        self,
        client: SentryClient,
        *,
        threshold: int,
        period: str,
        exhaustive: bool = False,
    ) -> None:
        """Prepare a walk over ``client``'s organization."""
        self._client = client
        self._threshold = threshold
        self._period = period
        self._exhaustive = exhaustive

    def issues_path(self, cursor: str | None) -> str:
        """Return the issue list path for the page at ``cursor``."""
        path = (
            f"organizations/{self._client.organization}/issues/"
            "?collapse=stats&expand=owners&expand=inbox"
            f"&limit={ISSUES_PAGE_SIZE}&query=is%3Aunresolved&sort=freq"
            f"&statsPeriod={self._period}"
        )
        query = cursor_query(cursor)
        return f"{path}&{query}" if query else path

    def issue_stats_path(self, issue_ids: typ.Sequence[str]) -> str:
        """Return the batched issue stats path for ``issue_ids``."""
        groups = "".join(f"&groups={issue_id}" for issue_id in issue_ids)
        return (
            f"organizations/{self._client.organization}/issues-stats/"
            f"?query=is:unresolved&sort=freq&statsPeriod={self._period}{groups}"
        )

    async def walk(self) -> IssueWalkResult:
        """Scan issue pages and return per-project qualifying counts.

        Upstream errors end the walk early; the counts gathered so far are
        returned with :attr:`IssueWalkResult.failed` set.
        """
        result = IssueWalkResult()
        seen_cursors: set[str] = set()
        cursor: str | None = None

        while True:
            log_info(logger, "Querying issues list with cursor '%s'", cursor or "")
            try:
                cursor = await self._scan_page(cursor, result)
            except SentryAPIError as exc:
                log_error(
                    logger,
                    "Issues walk aborted after %d pages: %s",
                    result.pages,
                    exc,
                )
                result.failed = True
                return result

            if cursor is None or cursor in seen_cursors:
                return result
            seen_cursors.add(cursor)

    async def _scan_page(
        self, cursor: str | None, result: IssueWalkResult
    ) -> str | None:
        """Count one page into ``result`` and return the cursor to follow.

        Issues are weighed by their lifetime event count, falling back to the
        count for the stats period. This differs from exporters that only
        read the period count. An issue missing from the stats batch counts
        as zero, so it stops an early-stopping walk instead of being skipped.
        """
        response = await self._client.request(self.issues_path(cursor))
        result.pages += 1
        issues = decode_issues(response.content)
        if not issues:
            return None

        project_by_issue = {issue.id: issue.project.slug for issue in issues}
        issue_ids = list(project_by_issue)
        stats_response = await self._client.request(self.issue_stats_path(issue_ids))
        counts = decode_issue_counts(stats_response.content)

        below_threshold = False
        for issue_id in issue_ids:
            if counts.get(issue_id, 0) >= self._threshold:
                project = project_by_issue[issue_id]
                result.per_project[project] = result.per_project.get(project, 0) + 1
                result.total += 1
            else:
                below_threshold = True

        if below_threshold and not self._exhaustive:
            return None

        link_header = response.headers.get("link")
        if not has_more_results(link_header):
            return None
        return parse_next_cursor(link_header)
