"""YAML loader for exporter configuration files."""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import ExporterConfig
from .validation import ConfigValidationError, validate_config

YAML_VERSION = (1, 2)


def load_config(path: Path | str) -> ExporterConfig:
    """Parse and validate a YAML configuration file.

    Parameters
    ----------
    path : Path | str
        Location of the ``modules:`` configuration file.

    Returns
    -------
    ExporterConfig
        The validated configuration.

    Raises
    ------
    ConfigValidationError
        If the file cannot be read or parsed, does not match the schema, or
        fails semantic validation.

    """
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ConfigValidationError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise ConfigValidationError(["config file is empty"])

    try:
        config = msgspec.convert(loaded, type=ExporterConfig)
    except msgspec.ValidationError as exc:
        raise ConfigValidationError([f"schema validation failed: {exc}"]) from exc

    return validate_config(config)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
