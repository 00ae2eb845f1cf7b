"""Reloadable holder for the active exporter configuration."""

from __future__ import annotations

import threading
import typing as typ
from pathlib import Path

from sentry_exporter.logging import get_logger, log_error, log_info

from .loader import load_config
from .validation import ConfigValidationError

if typ.TYPE_CHECKING:
    from .models import ExporterConfig

logger = get_logger(__name__)


class ConfigStore:
    """Hold the current configuration and swap it atomically on reload.

    Probes read :attr:`current` once at the start of a scrape and keep that
    snapshot for the whole probe, so a reload never changes settings under a
    running scrape.
    """

    def __init__(self, path: Path | str, config: ExporterConfig) -> None:
        """Create a store for ``path`` seeded with an already loaded config."""
        self._path = Path(path)
        self._config = config
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: Path | str) -> ConfigStore:
        """Load ``path`` and return a store holding the result."""
        config = load_config(path)
        log_info(logger, "Loaded config file %s", path)
        return cls(path, config)

    @property
    def path(self) -> Path:
        """Return the configuration file path."""
        return self._path

    @property
    def current(self) -> ExporterConfig:
        """Return the active configuration snapshot."""
        with self._lock:
            return self._config

    def reload(self) -> ExporterConfig:
        """Re-read the configuration file and make it active.

        The previous configuration stays active when loading fails.

        Raises
        ------
        ConfigValidationError
            If the file cannot be loaded.

        """
        try:
            config = load_config(self._path)
        except ConfigValidationError as exc:
            log_error(logger, "Error reloading config %s: %s", self._path, exc)
            raise

        with self._lock:
            self._config = config
        log_info(logger, "Reloaded config file %s", self._path)
        return config
