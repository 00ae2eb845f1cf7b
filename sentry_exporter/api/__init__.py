"""Exporter HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application serving probe scrapes, the exporter's own metrics and
configuration reloads.

Usage
-----
Create the application::

    from sentry_exporter.api import AppDependencies, create_app

    app = create_app(AppDependencies(config_store=store))

Public API
----------
create_app
    Application factory that registers every route and error handler.
AppDependencies
    Configuration store, shared project cache and test seams.
"""

from sentry_exporter.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
