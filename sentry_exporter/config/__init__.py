"""Exporter configuration: typed models, YAML loading and reloads.

Load a configuration file::

    >>> from sentry_exporter.config import load_config
    >>> config = load_config("sentry_exporter.yml")
    >>> config.modules["sentry"].http.organization
    'acme'

Keep it reloadable for the HTTP surface::

    >>> from sentry_exporter.config import ConfigStore
    >>> store = ConfigStore.load("sentry_exporter.yml")
    >>> store.reload()
"""

from __future__ import annotations

from .loader import load_config
from .models import ExporterConfig, HTTPProbe, IssuesOptions, LagOptions, Module
from .store import ConfigStore
from .validation import VALID_ISSUE_PERIODS, ConfigValidationError, validate_config

__all__ = [
    "VALID_ISSUE_PERIODS",
    "ConfigStore",
    "ConfigValidationError",
    "ExporterConfig",
    "HTTPProbe",
    "IssuesOptions",
    "LagOptions",
    "Module",
    "load_config",
    "validate_config",
]
