"""Request errors raised by API resources and their Falcon handlers.

Usage
-----
Register error handlers on the Falcon app::

    from sentry_exporter.api.errors import (
        UnknownModuleError,
        handle_unknown_module,
        handle_unknown_prober,
    )
    from sentry_exporter.probe import UnknownProbeKindError

    app.add_error_handler(UnknownModuleError, handle_unknown_module)
    app.add_error_handler(UnknownProbeKindError, handle_unknown_prober)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from sentry_exporter.probe import UnknownProbeKindError

__all__ = [
    "UnknownModuleError",
    "handle_unknown_module",
    "handle_unknown_prober",
]


class UnknownModuleError(Exception):
    """Raised when the ``module`` parameter names no configured module.

    Attributes
    ----------
    name
        The requested module name.

    """

    def __init__(self, name: str) -> None:
        """Initialize with the requested module name."""
        self.name = name
        super().__init__(f'Unknown module "{name}"')


async def handle_unknown_module(
    _req: Request,
    resp: Response,
    ex: UnknownModuleError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``UnknownModuleError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {"title": "Unknown module", "description": str(ex)}


async def handle_unknown_prober(
    _req: Request,
    resp: Response,
    ex: UnknownProbeKindError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``UnknownProbeKindError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {"title": "Unknown prober", "description": str(ex)}
