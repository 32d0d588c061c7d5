"""Pytest configuration and shared fixtures for service-client-core tests."""

import pytest

from service_client_core.testing import RecordingTransport, RecordingTransportFactory


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear configuration environment variables before each test.

    This prevents the developer's environment from leaking into default
    configuration resolution.
    """
    import os

    test_prefixes = ("SERVICE_CLIENT_", "TEST_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def shared_transport():
    """A caller-owned transport answering 200 to everything."""
    return RecordingTransport(name="shared")


@pytest.fixture
def transport_factory():
    """A factory recording every transport it builds."""
    return RecordingTransportFactory()


@pytest.fixture
def fake_sleep(monkeypatch):
    """Replace asyncio.sleep in the retry layer and record requested delays."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("service_client_core.transport.retry.asyncio.sleep", _sleep)
    return delays

