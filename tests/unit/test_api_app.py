"""Unit tests for sentry_exporter.api.app application factory.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_app.py

"""

from __future__ import annotations

import typing as typ

import falcon
import falcon.asgi
import falcon.testing
import pytest
from prometheus_client.parser import text_string_to_metric_families

from sentry_exporter.api.app import AppDependencies, create_app
from sentry_exporter.config import ConfigStore, ExporterConfig
from sentry_exporter.probe import LaunchPacer
from tests.helpers.sentry_fake import FakeSentry, exporter_config

if typ.TYPE_CHECKING:
    from pathlib import Path

_CONFIG_FILE = """\
modules:
  sentry:
    http:
      domain: https://sentry.example.test
      organization: acme
"""


def _client(
    fake: FakeSentry, config: ExporterConfig | None = None
) -> falcon.testing.TestClient:
    store = ConfigStore("unused.yml", config or exporter_config())
    deps = AppDependencies(
        config_store=store,
        transport=fake.transport,
        pacer_factory=lambda: LaunchPacer(0),
    )
    return falcon.testing.TestClient(create_app(deps))


def _samples(body: str) -> dict[str, float]:
    return {
        sample.name: sample.value
        for family in text_string_to_metric_families(body)
        for sample in family.samples
        if not sample.labels
    }


@pytest.fixture
def client(fake_sentry: FakeSentry) -> falcon.testing.TestClient:
    """Build a test client around a single ``sentry`` module."""
    return _client(fake_sentry)


class TestCreateApp:
    """Tests for create_app() route registration."""

    def test_returns_falcon_app(self) -> None:
        """create_app() returns a Falcon ASGI App."""
        store = ConfigStore("unused.yml", ExporterConfig())
        app = create_app(AppDependencies(config_store=store))
        assert isinstance(app, falcon.asgi.App), "expected Falcon ASGI App"

    def test_health_route(self, client: falcon.testing.TestClient) -> None:
        """The app responds to /health."""
        result = client.simulate_get("/health")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /health"
        assert result.json == {"status": "ok"}, "wrong /health body"

    def test_ready_route(self, client: falcon.testing.TestClient) -> None:
        """/ready reports the number of configured modules."""
        result = client.simulate_get("/ready")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /ready"
        assert result.json == {"status": "ready", "modules": 1}, "wrong /ready body"

    def test_ready_without_modules(self, fake_sentry: FakeSentry) -> None:
        """/ready is unavailable while no module is configured."""
        result = _client(fake_sentry, ExporterConfig()).simulate_get("/ready")
        assert result.status == falcon.HTTP_503, "expected HTTP 503 from /ready"

    def test_index_page(self, client: falcon.testing.TestClient) -> None:
        """The landing page links to the probe endpoint."""
        result = client.simulate_get("/")
        assert result.status == falcon.HTTP_200
        assert 'href="/probe"' in result.text
        assert result.headers["content-type"].startswith("text/html")


class TestProbeEndpoint:
    """Tests for GET /probe."""

    def test_lag_probe_returns_metrics(
        self, fake_sentry: FakeSentry, client: falcon.testing.TestClient
    ) -> None:
        """A lag probe renders its metrics followed by probe_success."""
        fake_sentry.projects("web")
        fake_sentry.event_stats("web", "received", [(1_700_000_000, 4)])
        fake_sentry.event_stats("web", "rejected", [(1_700_000_000, 0)])

        result = client.simulate_get("/probe", params={"module": "sentry"})

        assert result.status == falcon.HTTP_200
        assert result.headers["content-type"].startswith("text/plain")
        samples = _samples(result.text)
        assert samples["probe_success"] == 1.0
        assert samples["sentry_projects_total"] == 1.0
        assert samples["sentry_fetch_failures"] == 0.0
        assert "probe_duration_seconds" in samples
        (events,) = [
            sample
            for family in text_string_to_metric_families(result.text)
            for sample in family.samples
            if sample.name == "sentry_events_total"
            and sample.labels == {"stat": "received", "project": "web"}
        ]
        assert events.value == 4.0

    def test_module_defaults_to_sentry(
        self, fake_sentry: FakeSentry, client: falcon.testing.TestClient
    ) -> None:
        """Without a module parameter the ``sentry`` module is used."""
        fake_sentry.projects()

        result = client.simulate_get("/probe")

        assert result.status == falcon.HTTP_200
        assert _samples(result.text)["sentry_projects_total"] == 0.0

    def test_unknown_module_is_rejected(
        self, client: falcon.testing.TestClient
    ) -> None:
        """An unknown module is a client error."""
        result = client.simulate_get("/probe", params={"module": "nope"})

        assert result.status == falcon.HTTP_400
        assert result.json == {
            "title": "Unknown module",
            "description": 'Unknown module "nope"',
        }

    def test_unknown_prober_is_rejected(
        self, client: falcon.testing.TestClient
    ) -> None:
        """An unknown prober is a client error."""
        result = client.simulate_get("/probe", params={"prober": "http"})

        assert result.status == falcon.HTTP_400
        assert result.json["description"] == 'Unknown prober "http"'

    def test_invalid_period_reports_failure(
        self, fake_sentry: FakeSentry, client: falcon.testing.TestClient
    ) -> None:
        """An invalid issues period still answers 200 with probe_success 0."""
        result = client.simulate_get(
            "/probe", params={"prober": "issues", "period": "30d"}
        )

        assert result.status == falcon.HTTP_200
        assert _samples(result.text)["probe_success"] == 0.0
        assert fake_sentry.requests == []

    def test_empty_project_list_is_refetched(
        self, fake_sentry: FakeSentry, client: falcon.testing.TestClient
    ) -> None:
        """An empty project list is fetched again on every scrape."""
        fake_sentry.projects()

        client.simulate_get("/probe")
        client.simulate_get("/probe")
        client.simulate_get("/probe")

        assert fake_sentry.calls_to("organizations/acme/projects/") == 3

    def test_non_empty_project_list_is_cached(
        self, fake_sentry: FakeSentry, client: falcon.testing.TestClient
    ) -> None:
        """A non-empty project list is fetched once for several scrapes."""
        fake_sentry.projects("web")

        client.simulate_get("/probe")
        second = client.simulate_get("/probe")

        assert fake_sentry.calls_to("organizations/acme/projects/") == 1
        assert "sentry_projects_total" not in _samples(second.text)


class TestMetricsEndpoint:
    """Tests for GET /metrics."""

    def test_exposes_build_info(self, client: falcon.testing.TestClient) -> None:
        """The exporter's own metrics include its build information."""
        result = client.simulate_get("/metrics")

        assert result.status == falcon.HTTP_200
        assert "sentry_exporter_build_info{" in result.text


class TestReloadEndpoint:
    """Tests for POST /-/reload."""

    @pytest.fixture
    def config_path(self, tmp_path: Path) -> Path:
        """Write a valid configuration file."""
        path = tmp_path / "sentry_exporter.yml"
        path.write_text(_CONFIG_FILE, encoding="utf-8")
        return path

    def test_reload_succeeds(self, config_path: Path) -> None:
        """A valid file is reloaded with HTTP 200."""
        store = ConfigStore.load(config_path)
        config_path.write_text(
            _CONFIG_FILE.replace("sentry:", "other:"), encoding="utf-8"
        )
        client = falcon.testing.TestClient(
            create_app(AppDependencies(config_store=store))
        )

        result = client.simulate_post("/-/reload")

        assert result.status == falcon.HTTP_200
        assert set(store.current.modules) == {"other"}

    def test_reload_failure_returns_500(self, config_path: Path) -> None:
        """A broken file answers 500 and keeps the previous config."""
        store = ConfigStore.load(config_path)
        config_path.write_text("modules: [", encoding="utf-8")
        client = falcon.testing.TestClient(
            create_app(AppDependencies(config_store=store))
        )

        result = client.simulate_post("/-/reload")

        assert result.status == falcon.HTTP_500
        assert result.text.startswith("failed to reload config:")
        assert set(store.current.modules) == {"sentry"}

    def test_reload_requires_post(self, config_path: Path) -> None:
        """Other methods are not allowed."""
        client = falcon.testing.TestClient(
            create_app(AppDependencies(config_store=ConfigStore.load(config_path)))
        )

        result = client.simulate_get("/-/reload")

        assert result.status == falcon.HTTP_405
