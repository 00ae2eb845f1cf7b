"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio

from sentry_exporter.probe import LaunchPacer, MetricsWriter
from sentry_exporter.sentry import SentryClient
from tests.helpers.sentry_fake import FakeSentry, http_probe

if typ.TYPE_CHECKING:
    from sentry_exporter.config import HTTPProbe


@pytest.fixture
def fake_sentry() -> FakeSentry:
    """Provide an empty fake Sentry installation."""
    return FakeSentry()


@pytest.fixture
def probe_config() -> HTTPProbe:
    """Provide module settings pointing at the fake installation."""
    return http_probe()


@pytest.fixture
def writer() -> MetricsWriter:
    """Provide an empty metrics writer."""
    return MetricsWriter()


@pytest.fixture
def no_wait_pacer() -> LaunchPacer:
    """Provide a pacer that never delays task launches."""
    return LaunchPacer(0)


@pytest_asyncio.fixture
async def sentry_client(
    fake_sentry: FakeSentry, probe_config: HTTPProbe
) -> typ.AsyncIterator[SentryClient]:
    """Yield a client wired to ``fake_sentry``."""
    client = SentryClient(probe_config, timeout=5.0, transport=fake_sentry.transport)
    try:
        yield client
    finally:
        await client.aclose()
