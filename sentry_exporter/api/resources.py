"""Falcon resources for probing Sentry and operating the exporter.

Usage
-----
Register the routes on the Falcon app::

    app.add_route("/probe", ProbeResource(config_store, project_cache))
    app.add_route("/metrics", MetricsResource())
    app.add_route("/-/reload", ReloadResource(config_store))
    app.add_route("/", IndexResource())

"""

from __future__ import annotations

import asyncio
import dataclasses
import platform
import time
import typing as typ
from http import HTTPStatus

import falcon
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Info, generate_latest

from sentry_exporter.config import ConfigValidationError
from sentry_exporter.logging import get_logger, log_info
from sentry_exporter.probe import (
    MetricsWriter,
    ProbeContext,
    ProbeParams,
    parse_probe_kind,
    run_probe,
)
from sentry_exporter.version import exporter_version

from .errors import UnknownModuleError

if typ.TYPE_CHECKING:
    import httpx
    from falcon.asgi import Request, Response

    from sentry_exporter.config import ConfigStore
    from sentry_exporter.probe import LaunchPacer, ProjectCache

__all__ = [
    "DEFAULT_MODULE",
    "IndexResource",
    "MetricsResource",
    "ProbeResource",
    "ReloadResource",
]

logger = get_logger(__name__)

DEFAULT_MODULE = "sentry"
_QUERY_FIELDS = ("module", "prober", "target", "timeout", "above", "period")

BUILD_INFO = Info("sentry_exporter_build", "Build information of sentry_exporter.")
BUILD_INFO.info(
    {"version": exporter_version(), "pythonversion": platform.python_version()}
)

_INDEX_PAGE = """<html>
<head><title>Sentry Exporter</title></head>
<body>
<h1>Sentry Exporter</h1>
<p><a href="/probe?target=apimutate">Probe specific Sentry project</a></p>
<p><a href="/probe">Probe all Sentry projects</a></p>
<p><a href="/probe?prober=issues">Probe high frequency issues</a></p>
<p><a href="/metrics">Metrics</a></p>
</body>
</html>
"""


@dataclasses.dataclass(frozen=True, slots=True)
class ProbeResourceOptions:
    """Test seams for the probe resource."""

    transport: httpx.AsyncBaseTransport | None = None
    pacer_factory: typ.Callable[[], LaunchPacer] | None = None


class ProbeResource:
    """Run one probe per request and return its metrics.

    ``GET /probe?module=<name>&prober=<lag|issues>`` with optional
    ``target``, ``timeout``, ``above`` and ``period`` overrides.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        project_cache: ProjectCache,
        options: ProbeResourceOptions | None = None,
    ) -> None:
        """Bind the resource to configuration and the shared project cache."""
        self._config_store = config_store
        self._project_cache = project_cache
        self._options = options or ProbeResourceOptions()

    async def on_get(self, req: Request, resp: Response) -> None:
        """Handle GET /probe requests.

        Raises
        ------
        UnknownModuleError
            If the ``module`` parameter names no configured module.
        UnknownProbeKindError
            If the ``prober`` parameter names no known probe.

        """
        params = ProbeParams.from_query(
            {name: req.get_param(name) or "" for name in _QUERY_FIELDS}
        )
        module_name = params.module or DEFAULT_MODULE
        module = self._config_store.current.modules.get(module_name)
        if module is None:
            raise UnknownModuleError(module_name)
        kind = parse_probe_kind(params.prober)

        writer = MetricsWriter()
        pacer_factory = self._options.pacer_factory
        context = ProbeContext(
            module=module,
            params=params,
            cache=self._project_cache,
            writer=writer,
            transport=self._options.transport,
            pacer=pacer_factory() if pacer_factory is not None else None,
        )

        start = time.perf_counter()
        success = await run_probe(kind, context)
        writer.write("probe_duration_seconds", time.perf_counter() - start)
        writer.write("probe_success", 1 if success else 0)

        resp.content_type = CONTENT_TYPE_LATEST
        resp.data = writer.render()
        resp.status = HTTPStatus.OK


class MetricsResource:
    """Expose the exporter's own process metrics."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /metrics requests."""
        resp.content_type = CONTENT_TYPE_LATEST
        resp.data = generate_latest(REGISTRY)
        resp.status = HTTPStatus.OK


class ReloadResource:
    """Reload the configuration file on ``POST /-/reload``."""

    def __init__(self, config_store: ConfigStore) -> None:
        """Bind the resource to the reloadable configuration."""
        self._config_store = config_store

    async def on_post(self, _req: Request, resp: Response) -> None:
        """Handle POST /-/reload requests."""
        try:
            config = await asyncio.to_thread(self._config_store.reload)
        except ConfigValidationError as exc:
            resp.status = HTTPStatus.INTERNAL_SERVER_ERROR
            resp.content_type = falcon.MEDIA_TEXT
            resp.text = f"failed to reload config: {exc}\n"
            return
        log_info(logger, "Reloaded %d modules via HTTP", len(config.modules))
        resp.status = HTTPStatus.OK
        resp.content_type = falcon.MEDIA_TEXT
        resp.text = ""


class IndexResource:
    """Landing page linking to the probe and metrics endpoints."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET / requests."""
        resp.content_type = falcon.MEDIA_HTML
        resp.text = _INDEX_PAGE
        resp.status = HTTPStatus.OK
