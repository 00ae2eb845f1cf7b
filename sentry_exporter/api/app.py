"""Application factory for the exporter's Falcon ASGI application.

Usage
-----
Create an app around a loaded configuration::

    from sentry_exporter.api.app import AppDependencies, create_app
    from sentry_exporter.config import ConfigStore

    deps = AppDependencies(config_store=ConfigStore.load("sentry_exporter.yml"))
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from sentry_exporter.api.errors import (
    UnknownModuleError,
    handle_unknown_module,
    handle_unknown_prober,
)
from sentry_exporter.api.health.resources import HealthResource, ReadyResource
from sentry_exporter.api.resources import (
    IndexResource,
    MetricsResource,
    ProbeResource,
    ProbeResourceOptions,
    ReloadResource,
)
from sentry_exporter.probe import ProjectCache, UnknownProbeKindError

if typ.TYPE_CHECKING:
    import httpx

    from sentry_exporter.config import ConfigStore
    from sentry_exporter.probe import LaunchPacer

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    config_store
        Reloadable configuration read at the start of every scrape.
    project_cache
        Project list cache shared by all lag probes of this process.
    transport
        Optional HTTP transport for Sentry clients, used by tests.
    pacer_factory
        Optional factory for per-scrape launch pacers.

    """

    config_store: ConfigStore
    project_cache: ProjectCache = dc.field(default_factory=ProjectCache)
    transport: httpx.AsyncBaseTransport | None = None
    pacer_factory: typ.Callable[[], LaunchPacer] | None = None


def create_app(dependencies: AppDependencies) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Registers ``/probe``, ``/metrics``, ``/-/reload``, ``/health``,
    ``/ready`` and the ``/`` landing page.

    Parameters
    ----------
    dependencies
        Configuration store, shared cache and optional test seams.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()  # type: ignore[no-matching-overload]  # Falcon stubs
    store = dependencies.config_store

    app.add_route("/", IndexResource())
    app.add_route(
        "/probe",
        ProbeResource(
            store,
            dependencies.project_cache,
            ProbeResourceOptions(
                transport=dependencies.transport,
                pacer_factory=dependencies.pacer_factory,
            ),
        ),
    )
    app.add_route("/metrics", MetricsResource())
    app.add_route("/-/reload", ReloadResource(store))
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(store))

    app.add_error_handler(UnknownModuleError, handle_unknown_module)
    app.add_error_handler(UnknownProbeKindError, handle_unknown_prober)

    return app
