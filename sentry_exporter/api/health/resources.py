"""Liveness and readiness resources.

Usage
-----
Register health endpoints on the Falcon app::

    from sentry_exporter.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(config_store))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from sentry_exporter.config import ConfigStore

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    The exporter is ready once at least one module is configured; before
    that every probe request would be rejected.
    """

    def __init__(self, config_store: ConfigStore) -> None:
        """Bind the resource to the configuration it reports on."""
        self._config_store = config_store

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status and the number
            of configured modules.

        """
        modules = len(self._config_store.current.modules)
        if modules == 0:
            resp.media = {"status": "unconfigured", "modules": 0}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
            return
        resp.media = {"status": "ready", "modules": modules}
        resp.status = HTTPStatus.OK
