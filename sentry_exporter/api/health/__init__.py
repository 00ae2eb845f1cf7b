"""Liveness and readiness resources.

Usage
-----
Import health resources for route registration::

    from sentry_exporter.api.health.resources import HealthResource, ReadyResource
"""
