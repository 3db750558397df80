"""Tests for credential resolution and token caching."""

from __future__ import annotations

import httpx
import pytest

from payload_client.auth import TOKEN_TTL_SECONDS, CachedToken
from payload_client.errors import AuthenticationError


class TestApiKeyMode:
    """Test static API key credentials."""

    def test_returns_key_without_network(self, api_key_bundle, auth_manager, mock_server):
        with mock_server.patch_httpx():
            credential = auth_manager.resolve_credential(api_key_bundle)

        assert credential == "key-123"
        assert mock_server.call_log == []
        assert len(auth_manager.cache) == 0

    def test_header_uses_collection_api_key_scheme(self, api_key_bundle, auth_manager):
        headers = auth_manager.get_auth_headers(api_key_bundle)

        assert headers == {"Authorization": "users API-Key key-123"}


class TestLoginMode:
    """Test email/password login with cached session tokens."""

    def test_login_then_cache_hit(self, login_bundle, auth_manager, integration_server):
        with integration_server.patch_httpx():
            first = auth_manager.resolve_credential(login_bundle)
            second = auth_manager.resolve_credential(login_bundle)

        assert first == second == "session-token"
        logins = integration_server.get_calls("/login")
        assert len(logins) == 1
        method, url, _, body, _ = logins[0]
        assert (method, url) == ("POST", "http://mock/api/users/login")
        assert body == {"email": "editor@example.com", "password": "secret"}

    def test_bearer_header(self, login_bundle, auth_manager, integration_server):
        with integration_server.patch_httpx():
            headers = auth_manager.get_auth_headers(login_bundle)

        assert headers == {"Authorization": "Bearer session-token"}

    def test_fresh_cached_token_skips_network(self, login_bundle, auth_manager, clock, mock_server):
        auth_manager.cache.set(
            login_bundle.cache_key,
            CachedToken(token="cached", expires_at=clock() + 10),
        )

        with mock_server.patch_httpx():
            credential = auth_manager.resolve_credential(login_bundle)

        assert credential == "cached"
        assert mock_server.call_log == []

    def test_expired_token_triggers_exactly_one_login(
        self, login_bundle, auth_manager, clock, integration_server
    ):
        auth_manager.cache.set(
            login_bundle.cache_key,
            CachedToken(token="stale", expires_at=clock() - 1),
        )

        with integration_server.patch_httpx():
            credential = auth_manager.resolve_credential(login_bundle)

        assert credential == "session-token"
        assert len(integration_server.get_calls("/login")) == 1

    def test_token_expires_after_ttl(self, login_bundle, auth_manager, clock, integration_server):
        with integration_server.patch_httpx():
            auth_manager.resolve_credential(login_bundle)
            clock.advance(TOKEN_TTL_SECONDS - 1)
            auth_manager.resolve_credential(login_bundle)
            clock.advance(2)
            auth_manager.resolve_credential(login_bundle)

        assert len(integration_server.get_calls("/login")) == 2

    def test_cache_keyed_by_identity(self, bundle_factory, auth_manager, integration_server):
        integration_server.add_user("users", "other@example.com", "pw")
        first = bundle_factory(auth_method="login", email="editor@example.com", password="secret")
        second = bundle_factory(auth_method="login", email="other@example.com", password="pw")

        with integration_server.patch_httpx():
            auth_manager.resolve_credential(first)
            auth_manager.resolve_credential(second)

        assert len(auth_manager.cache) == 2
        assert len(integration_server.get_calls("/login")) == 2

    def test_refreshed_token_replaces_entry(self, login_bundle, auth_manager, clock, integration_server):
        with integration_server.patch_httpx():
            auth_manager.resolve_credential(login_bundle)
            clock.advance(TOKEN_TTL_SECONDS + 1)
            integration_server.login_token = "second-token"
            credential = auth_manager.resolve_credential(login_bundle)

        assert credential == "second-token"
        assert len(auth_manager.cache) == 1


class TestLoginFailures:
    """Test AuthenticationError cases."""

    def test_wrong_password(self, bundle_factory, auth_manager, integration_server):
        bundle = bundle_factory(auth_method="login", email="editor@example.com", password="wrong")

        with integration_server.patch_httpx():
            with pytest.raises(AuthenticationError, match="401"):
                auth_manager.resolve_credential(bundle)

        assert len(auth_manager.cache) == 0

    def test_response_without_token(self, login_bundle, auth_manager, mock_server):
        mock_server.add_custom_handler(
            r"/api/users/login", lambda request: httpx.Response(200, json={"user": {}})
        )

        with mock_server.patch_httpx():
            with pytest.raises(AuthenticationError, match="No token"):
                auth_manager.resolve_credential(login_bundle)

    def test_unreachable_server(self, login_bundle, auth_manager, mock_server):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_server.add_custom_handler(r"/api/users/login", refuse)

        with mock_server.patch_httpx():
            with pytest.raises(AuthenticationError, match="connection refused"):
                auth_manager.resolve_credential(login_bundle)
