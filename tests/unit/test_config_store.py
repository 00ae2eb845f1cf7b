"""Unit tests for the reloadable configuration store."""

from __future__ import annotations

import typing as typ

import pytest

from sentry_exporter.config import ConfigStore, ConfigValidationError

if typ.TYPE_CHECKING:
    from pathlib import Path

_TEMPLATE = """\
modules:
  sentry:
    http:
      domain: https://sentry.io
      organization: {organization}
"""


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a valid configuration file and return its path."""
    path = tmp_path / "sentry_exporter.yml"
    path.write_text(_TEMPLATE.format(organization="acme"), encoding="utf-8")
    return path


class TestConfigStore:
    """Tests for ConfigStore load and reload."""

    def test_load_holds_parsed_config(self, config_path: Path) -> None:
        """ConfigStore.load parses the file and exposes it as current."""
        store = ConfigStore.load(config_path)

        assert store.path == config_path
        assert store.current.modules["sentry"].http.organization == "acme"

    def test_reload_swaps_in_new_config(self, config_path: Path) -> None:
        """A successful reload replaces the current configuration."""
        store = ConfigStore.load(config_path)
        config_path.write_text(_TEMPLATE.format(organization="beta"), encoding="utf-8")

        reloaded = store.reload()

        assert reloaded.modules["sentry"].http.organization == "beta"
        assert store.current is reloaded

    def test_failed_reload_keeps_previous_config(self, config_path: Path) -> None:
        """A broken file raises and leaves the previous configuration active."""
        store = ConfigStore.load(config_path)
        previous = store.current
        config_path.write_text("modules: [", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            store.reload()

        assert store.current is previous, "previous config should stay active"

    def test_load_rejects_invalid_file(self, tmp_path: Path) -> None:
        """Loading an invalid file raises ConfigValidationError."""
        path = tmp_path / "bad.yml"
        path.write_text(_TEMPLATE.format(organization='""'), encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="organization"):
            ConfigStore.load(path)
