"""Unit tests for the project list cache."""

from __future__ import annotations

import asyncio
import typing as typ

import httpx
import pytest

from sentry_exporter.probe import FailureCounter, MetricsWriter, ProjectCache
from sentry_exporter.sentry import SentryClient
from tests.helpers.sentry_fake import FAKE_ORG, http_probe

if typ.TYPE_CHECKING:
    from tests.helpers.sentry_fake import FakeSentry

PROJECTS_PATH = f"organizations/{FAKE_ORG}/projects/"


async def _scrape(cache: ProjectCache, client: SentryClient) -> tuple[str, ...]:
    return await cache.get_targets(None, client, MetricsWriter(), FailureCounter())


class TestProjectCache:
    """Tests for ProjectCache.get_targets."""

    @pytest.mark.asyncio
    async def test_explicit_target_bypasses_cache(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """A target parameter is probed alone without listing projects."""
        cache = ProjectCache()

        targets = await cache.get_targets(
            "web", sentry_client, MetricsWriter(), FailureCounter()
        )

        assert targets == ("web",)
        assert fake_sentry.requests == [], "no upstream call expected"
        assert cache.staleness_for(sentry_client) == 0

    @pytest.mark.asyncio
    async def test_first_scrape_lists_projects(
        self,
        fake_sentry: FakeSentry,
        sentry_client: SentryClient,
        writer: MetricsWriter,
    ) -> None:
        """The first scrape fetches the list and reports its size."""
        fake_sentry.projects("web", "api", "worker")
        cache = ProjectCache()

        targets = await cache.get_targets(
            None, sentry_client, writer, FailureCounter()
        )

        assert targets == ("web", "api", "worker")
        (sample,) = writer.find("sentry_projects_total")
        assert sample.value == 3
        assert cache.staleness_for(sentry_client) == 0

    @pytest.mark.asyncio
    async def test_refreshes_after_staleness_exceeds_limit(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """Scrapes 2 to 52 are served from cache; scrape 53 refreshes."""
        fake_sentry.projects("web")
        cache = ProjectCache()

        await _scrape(cache, sentry_client)
        for scrape in range(2, 53):
            await _scrape(cache, sentry_client)
            assert cache.staleness_for(sentry_client) == scrape - 1
        assert fake_sentry.calls_to(PROJECTS_PATH) == 1

        await _scrape(cache, sentry_client)

        assert fake_sentry.calls_to(PROJECTS_PATH) == 2
        assert cache.staleness_for(sentry_client) == 0

    @pytest.mark.asyncio
    async def test_cached_scrape_does_not_report_total(
        self,
        fake_sentry: FakeSentry,
        sentry_client: SentryClient,
        writer: MetricsWriter,
    ) -> None:
        """The project total is only written when the list is fetched."""
        fake_sentry.projects("web")
        cache = ProjectCache()
        await _scrape(cache, sentry_client)

        await cache.get_targets(None, sentry_client, writer, FailureCounter())

        assert writer.find("sentry_projects_total") == []

    @pytest.mark.asyncio
    async def test_failed_refresh_serves_previous_list(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """A failed refresh counts a failure and keeps the old list."""
        upstream = {"healthy": True}

        def projects(_request: httpx.Request) -> httpx.Response:
            if not upstream["healthy"]:
                return httpx.Response(503)
            return httpx.Response(200, json=[{"slug": "web"}, {"slug": "api"}])

        fake_sentry.route(PROJECTS_PATH, projects)
        cache = ProjectCache(max_staleness=0)
        await _scrape(cache, sentry_client)
        await _scrape(cache, sentry_client)
        upstream["healthy"] = False
        failures = FailureCounter()

        targets = await cache.get_targets(
            None, sentry_client, MetricsWriter(), failures
        )

        assert targets == ("web", "api")
        assert failures.value == 1
        assert fake_sentry.calls_to(PROJECTS_PATH) == 2

    @pytest.mark.asyncio
    async def test_failed_first_refresh_serves_nothing(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """With nothing cached a failed refresh yields no targets."""
        fake_sentry.connection_error(PROJECTS_PATH)
        failures = FailureCounter()

        targets = await ProjectCache().get_targets(
            None, sentry_client, MetricsWriter(), failures
        )

        assert targets == ()
        assert failures.value == 1

    @pytest.mark.asyncio
    async def test_organizations_keep_separate_lists(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """Modules pointing at different organizations never share slugs."""
        fake_sentry.projects("acme-web")
        fake_sentry.json(
            "organizations/platform/projects/", [{"slug": "platform-api"}]
        )
        platform = SentryClient(
            http_probe(organization="platform"),
            timeout=1.0,
            transport=fake_sentry.transport,
        )
        cache = ProjectCache()
        try:
            acme_targets = await _scrape(cache, sentry_client)
            platform_targets = await _scrape(cache, platform)
            await _scrape(cache, sentry_client)
        finally:
            await platform.aclose()

        assert acme_targets == ("acme-web",)
        assert platform_targets == ("platform-api",)
        assert fake_sentry.calls_to(PROJECTS_PATH) == 1
        assert fake_sentry.calls_to("organizations/platform/projects/") == 1
        assert cache.staleness_for(sentry_client) == 1
        assert cache.staleness_for(platform) == 0
        assert cache.projects_for(platform) == ("platform-api",)

    @pytest.mark.asyncio
    async def test_concurrent_scrapes_list_projects_once(
        self, fake_sentry: FakeSentry, sentry_client: SentryClient
    ) -> None:
        """Overlapping scrapes wait for one refresh and then share its list."""

        async def slow_projects(_request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.05)
            return httpx.Response(200, json=[{"slug": "web"}, {"slug": "api"}])

        fake_sentry.route(PROJECTS_PATH, slow_projects)
        cache = ProjectCache()

        results = await asyncio.gather(
            *(_scrape(cache, sentry_client) for _ in range(5))
        )

        assert all(targets == ("web", "api") for targets in results)
        assert fake_sentry.calls_to(PROJECTS_PATH) == 1
        assert cache.staleness_for(sentry_client) == 4
