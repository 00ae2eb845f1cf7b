"""Sentry API client, payload decoders and issue pagination."""

from __future__ import annotations

from .client import SentryClient, is_accepted_status, split_host_header
from .decoders import (
    decode_event_series,
    decode_issue_counts,
    decode_issues,
    decode_project_slugs,
    decode_rate_limit,
    summarize_event_series,
)
from .errors import (
    SentryAPIError,
    SentryDecodeError,
    SentryStatusError,
    SentryTransportError,
)
from .models import EventSeriesSummary
from .pagination import (
    IssueFrequencyWalker,
    IssueWalkResult,
    parse_next_cursor,
)

__all__ = [
    "EventSeriesSummary",
    "IssueFrequencyWalker",
    "IssueWalkResult",
    "SentryAPIError",
    "SentryClient",
    "SentryDecodeError",
    "SentryStatusError",
    "SentryTransportError",
    "decode_event_series",
    "decode_issue_counts",
    "decode_issues",
    "decode_project_slugs",
    "decode_rate_limit",
    "is_accepted_status",
    "parse_next_cursor",
    "split_host_header",
    "summarize_event_series",
]
