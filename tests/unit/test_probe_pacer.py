"""Unit tests for the launch pacer."""

from __future__ import annotations

import pytest

from sentry_exporter.probe import LaunchPacer


class _FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


class TestLaunchPacer:
    """Tests for LaunchPacer.acquire."""

    @pytest.mark.asyncio
    async def test_first_permit_is_immediate(self) -> None:
        """The first caller never waits."""
        clock = _FakeClock()
        pacer = LaunchPacer(0.05, clock=clock, sleep=clock.sleep)

        await pacer.acquire()

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_back_to_back_permits_are_spaced(self) -> None:
        """Consecutive permits are granted one interval apart."""
        clock = _FakeClock()
        pacer = LaunchPacer(0.05, clock=clock, sleep=clock.sleep)

        for _ in range(4):
            await pacer.acquire()

        assert clock.sleeps == pytest.approx([0.05, 0.05, 0.05])
        assert clock.now == pytest.approx(100.15)

    @pytest.mark.asyncio
    async def test_idle_pacer_grants_immediately(self) -> None:
        """After a quiet period no wait is needed."""
        clock = _FakeClock()
        pacer = LaunchPacer(0.05, clock=clock, sleep=clock.sleep)
        await pacer.acquire()

        clock.now += 1.0
        await pacer.acquire()

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_zero_interval_never_waits(self) -> None:
        """A zero interval disables pacing."""
        clock = _FakeClock()
        pacer = LaunchPacer(0, clock=clock, sleep=clock.sleep)

        for _ in range(10):
            await pacer.acquire()

        assert clock.sleeps == []
