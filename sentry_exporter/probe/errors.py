"""Probe configuration errors."""

from __future__ import annotations

import typing as typ


class ProbeConfigError(ValueError):
    """Raised when a probe's effective settings are unusable."""

    @classmethod
    def invalid_period(
        cls, period: str, valid: typ.Collection[str]
    ) -> ProbeConfigError:
        """Return an error for an issue stats period outside ``valid``."""
        choices = " or ".join(sorted(valid))
        return cls(f"Invalid period {period!r} (must be {choices})")

    @classmethod
    def invalid_threshold(cls, raw: str) -> ProbeConfigError:
        """Return an error for an ``above`` value that is not a positive integer."""
        return cls(f"Invalid issue threshold {raw!r} (must be a positive integer)")
