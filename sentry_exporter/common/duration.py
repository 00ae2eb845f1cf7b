"""Prometheus-style duration strings.

Durations appear in module configuration (``lag.timeout``) and in the
``timeout`` query parameter of probe requests. They use the same grammar as
Prometheus itself: an ordered sequence of ``<int><unit>`` terms with units
``y``, ``w``, ``d``, ``h``, ``m``, ``s`` and ``ms``, for example ``1m30s``.
The bare string ``0`` is also accepted.
"""

from __future__ import annotations

import datetime as dt
import re

_DURATION_PATTERN = re.compile(
    r"^(?:(?P<y>\d+)y)?(?:(?P<w>\d+)w)?(?:(?P<d>\d+)d)?(?:(?P<h>\d+)h)?"
    r"(?:(?P<m>\d+)m)?(?:(?P<s>\d+)s)?(?:(?P<ms>\d+)ms)?$"
)

_UNIT_SECONDS: dict[str, float] = {
    "y": 365 * 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
    "d": 24 * 60 * 60,
    "h": 60 * 60,
    "m": 60,
    "s": 1,
    "ms": 0.001,
}


class DurationError(ValueError):
    """Raised when a duration string does not follow the Prometheus grammar."""

    @classmethod
    def invalid(cls, text: str) -> DurationError:
        """Return an error for an unparsable duration string."""
        return cls(f"not a valid duration string: {text!r}")


def parse_duration(text: str) -> dt.timedelta:
    """Parse a Prometheus duration string into a :class:`datetime.timedelta`.

    Parameters
    ----------
    text : str
        Duration such as ``"10s"``, ``"500ms"`` or ``"1h30m"``.

    Returns
    -------
    datetime.timedelta
        The parsed duration.

    Raises
    ------
    DurationError
        If ``text`` is empty, does not match the duration grammar or is too
        large to represent.

    Examples
    --------
    >>> parse_duration("1m30s").total_seconds()
    90.0

    """
    stripped = text.strip()
    if stripped == "0":
        return dt.timedelta(0)

    match = _DURATION_PATTERN.match(stripped)
    if not stripped or match is None:
        raise DurationError.invalid(text)

    try:
        seconds = sum(
            int(amount) * _UNIT_SECONDS[unit]
            for unit, amount in match.groupdict().items()
            if amount is not None
        )
        duration = dt.timedelta(seconds=seconds)
    except OverflowError as exc:
        raise DurationError.invalid(text) from exc
    return duration
