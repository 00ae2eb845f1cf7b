"""Installed version of the exporter."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "sentry-exporter"


def exporter_version() -> str:
    """Return the installed distribution version, or ``unknown`` from a checkout."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"
