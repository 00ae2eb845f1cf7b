"""Semantic validation rules for exporter configuration."""

from __future__ import annotations

import typing as typ

from sentry_exporter.common.duration import DurationError, parse_duration

if typ.TYPE_CHECKING:
    from .models import ExporterConfig, HTTPProbe

VALID_ISSUE_PERIODS = frozenset({"14d", "24h"})

_MIN_STATUS_CODE = 100
_MAX_STATUS_CODE = 599


class ConfigValidationError(ValueError):
    """Raised when a configuration file cannot be loaded or is inconsistent."""

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        message = "\n".join(issues)
        super().__init__(message)
        self.issues = issues


def validate_config(config: ExporterConfig) -> ExporterConfig:
    """Validate every module, returning ``config`` when all checks pass."""
    issues: list[str] = []
    for name, module in config.modules.items():
        _validate_http_probe(f"modules.{name}.http", module.http, issues)

    if issues:
        raise ConfigValidationError(issues)
    return config


def _validate_http_probe(prefix: str, probe: HTTPProbe, issues: list[str]) -> None:
    if not probe.domain.strip():
        issues.append(f"{prefix}.domain must not be empty")
    elif not probe.domain.startswith(("http://", "https://")):
        issues.append(f"{prefix}.domain must start with http:// or https://")

    if not probe.organization.strip():
        issues.append(f"{prefix}.organization must not be empty")

    issues.extend(
        f"{prefix}.valid_status_codes contains invalid code {code}"
        for code in probe.valid_status_codes
        if not _MIN_STATUS_CODE <= code <= _MAX_STATUS_CODE
    )

    if probe.issues.period and probe.issues.period not in VALID_ISSUE_PERIODS:
        issues.append(
            f"{prefix}.issues.period must be one of "
            f"{', '.join(sorted(VALID_ISSUE_PERIODS))}, got {probe.issues.period!r}"
        )
    if probe.issues.above < 0:
        issues.append(f"{prefix}.issues.above must be >= 0")

    for field, raw in (
        ("issues.timeout", probe.issues.timeout),
        ("lag.timeout", probe.lag.timeout),
    ):
        if raw is None:
            continue
        try:
            parse_duration(raw)
        except DurationError as exc:
            issues.append(f"{prefix}.{field}: {exc}")
