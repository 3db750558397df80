"""Shared pytest fixtures for payload_client tests."""

from __future__ import annotations

import pytest

from payload_client.auth import AuthManager, TokenCache
from payload_client.config import CredentialBundle

from tests.fixtures.mock_server import MockPayloadServer, create_mock_server_for_integration


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def api_key_bundle():
    """Bundle authenticating with a static API key."""
    return CredentialBundle(
        base_url="http://mock",
        auth_method="api_key",
        api_key="key-123",
        user_collection="users",
    )


@pytest.fixture
def login_bundle():
    """Bundle authenticating by email/password login."""
    return CredentialBundle(
        base_url="http://mock",
        auth_method="login",
        email="editor@example.com",
        password="secret",
        user_collection="users",
    )


@pytest.fixture
def bundle_factory():
    """Factory fixture for creating CredentialBundle instances."""
    def _factory(**kwargs) -> CredentialBundle:
        kwargs.setdefault("base_url", "http://mock")
        kwargs.setdefault("api_key", "key-123")
        return CredentialBundle(**kwargs)
    return _factory


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth_manager(clock):
    """AuthManager with its own cache and a controllable clock."""
    return AuthManager(cache=TokenCache(), clock=clock)


@pytest.fixture
def mock_server():
    return MockPayloadServer()


@pytest.fixture
def integration_server():
    return create_mock_server_for_integration()
