"""Test fixtures: deterministic clock, seeded backend and HTTP clients."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from prompt_mock.api.interceptor import RouteInterceptor
from prompt_mock.api.transport import mock_client
from prompt_mock.core.backend import MockBackend
from prompt_mock.core.models import Tenant


class FakeClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock) -> MockBackend:
    """Backend loaded with the default dataset."""
    return MockBackend(clock=clock)


@pytest.fixture
def empty_backend(clock) -> MockBackend:
    """Backend with a single bare tenant ``t1`` and nothing else."""
    backend = MockBackend(seed=False, clock=clock)
    backend.store.add_tenant(Tenant(id="t1", name="Tenant One", slug="t1", created_at=clock()))
    return backend


@pytest.fixture
def interceptor(backend) -> RouteInterceptor:
    return RouteInterceptor(backend)


@pytest.fixture
def http(interceptor):
    """httpx client whose requests are answered by the mock."""
    with mock_client(interceptor) as client:
        yield client


@pytest.fixture
def app(interceptor):
    """FastAPI app bound to the test interceptor."""
    from prompt_mock.api.interceptor import get_interceptor
    from prompt_mock.main import app as _app

    _app.dependency_overrides[get_interceptor] = lambda: interceptor
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client for the FastAPI server."""
    return TestClient(app)
