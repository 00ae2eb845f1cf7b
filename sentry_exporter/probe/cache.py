"""Project list cache shared by consecutive lag probes.

Listing every project in an organization is expensive, so the list is reused
for a number of scrapes before it is fetched again. Eviction counts scrapes,
not wall-clock time.
"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from sentry_exporter.logging import get_logger, log_error, log_info
from sentry_exporter.sentry.decoders import decode_project_slugs
from sentry_exporter.sentry.errors import SentryAPIError

if typ.TYPE_CHECKING:
    from sentry_exporter.sentry.client import SentryClient

    from .lag import FailureCounter
    from .writer import MetricsWriter

logger = get_logger(__name__)

DEFAULT_MAX_STALENESS = 50


@dataclasses.dataclass(slots=True)
class _ProjectList:
    """Cached slugs of one organization and the scrapes served since refresh."""

    projects: tuple[str, ...] = ()
    staleness: int = 0
    lock: asyncio.Lock = dataclasses.field(default_factory=asyncio.Lock)


class ProjectCache:
    """Serve each organization's project slugs, refreshing them periodically.

    Lists are kept per Sentry installation and organization, so modules that
    point at different organizations never share slugs. Refresh-or-serve
    decisions for one organization hold that organization's ``asyncio.Lock``
    so that concurrent scrapes neither race on the staleness counter nor list
    projects twice.
    """

    def __init__(self, *, max_staleness: int = DEFAULT_MAX_STALENESS) -> None:
        """Create an empty cache refreshed once staleness exceeds ``max_staleness``."""
        self._max_staleness = max_staleness
        self._lists: dict[tuple[str, str], _ProjectList] = {}

    def projects_for(self, client: SentryClient) -> tuple[str, ...]:
        """Return the cached project slugs of ``client``'s organization."""
        entry = self._lists.get(client.organization_key)
        return () if entry is None else entry.projects

    def staleness_for(self, client: SentryClient) -> int:
        """Return how many scrapes were served since the last refresh."""
        entry = self._lists.get(client.organization_key)
        return 0 if entry is None else entry.staleness

    async def get_targets(
        self,
        explicit_target: str | None,
        client: SentryClient,
        writer: MetricsWriter,
        failures: FailureCounter,
    ) -> tuple[str, ...]:
        """Return the projects a lag probe should visit.

        An explicit target bypasses the cache entirely. Otherwise the cached
        list of ``client``'s organization is returned, after refreshing it when
        it is empty or stale. A failed refresh is counted in ``failures`` and
        the previous list, which may be empty, is served.
        """
        if explicit_target:
            return (explicit_target,)

        entry = self._lists.setdefault(client.organization_key, _ProjectList())
        async with entry.lock:
            if entry.projects and entry.staleness <= self._max_staleness:
                entry.staleness += 1
                return entry.projects

            try:
                projects = await self._list_projects(client)
            except SentryAPIError as exc:
                log_error(logger, "Error listing Sentry projects: %s", exc)
                failures.increment()
                return entry.projects

            entry.projects = projects
            entry.staleness = 0
            writer.write("sentry_projects_total", len(projects))
            log_info(
                logger,
                "Refreshed project list of %s with %d projects",
                client.organization,
                len(projects),
            )
            return entry.projects

    async def _list_projects(self, client: SentryClient) -> tuple[str, ...]:
        response = await client.request(
            f"organizations/{client.organization}/projects/"
        )
        return decode_project_slugs(response.content)
