"""Fixtures for API tests: an app wired to a gateway over a fake cluster."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from scopegate.api.app import create_app
from scopegate.api.deps import set_gateway
from scopegate.config.settings import Settings
from scopegate.core.gateway import ScopeGateway


@pytest.fixture
def make_client(settings: Settings) -> Iterator[Callable[..., TestClient]]:
    """Build a test client whose gateway talks to the given fake cluster."""

    def _make(cluster) -> TestClient:
        app = create_app(settings)
        set_gateway(ScopeGateway(settings, registry=cluster.registry()))
        return TestClient(app)

    yield _make
    set_gateway(None)
