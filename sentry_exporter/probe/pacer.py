"""Client-side pacing of per-project task launches."""

from __future__ import annotations

import asyncio
import time
import typing as typ

DEFAULT_LAUNCH_INTERVAL = 0.05


class LaunchPacer:
    """Grant one launch permit per ``interval`` seconds.

    The first permit is granted immediately; each later caller waits until
    its slot comes up. This spreads the opening requests of a large fan-out
    so the Sentry API does not see a burst.
    """

    def __init__(
        self,
        interval: float = DEFAULT_LAUNCH_INTERVAL,
        *,
        clock: typ.Callable[[], float] = time.monotonic,
        sleep: typ.Callable[[float], typ.Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Create a pacer granting permits ``interval`` seconds apart."""
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float | None = None

    async def acquire(self) -> None:
        """Wait for the next launch permit."""
        now = self._clock()
        if self._next_slot is None or now >= self._next_slot:
            self._next_slot = now + self._interval
            return

        delay = self._next_slot - now
        self._next_slot += self._interval
        await self._sleep(delay)
