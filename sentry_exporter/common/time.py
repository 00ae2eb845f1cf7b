"""Common time utilities."""

from __future__ import annotations

import time


def unix_now() -> int:
    """Return the current Unix time truncated to whole seconds."""
    return int(time.time())


def lag_seconds(timestamp: int, *, now: int | None = None) -> int:
    """Return the seconds elapsed between ``timestamp`` and ``now``."""
    current = unix_now() if now is None else now
    return current - timestamp
