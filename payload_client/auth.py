"""Authentication helpers for the Payload client."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING

import httpx

from .config import AuthMethod
from .errors import AuthenticationError

if TYPE_CHECKING:
    from .config import CredentialBundle

logger = logging.getLogger(__name__)

# Login sessions are reused for one hour
TOKEN_TTL_SECONDS = 60 * 60


@dataclass
class CachedToken:
    """A session token obtained by logging in."""
    token: str = field(repr=False)
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now


@dataclass
class TokenCache:
    """
    Session tokens keyed by origin, identity and user collection.

    Entries are replaced, never merged, and only expire on read. There is no
    lock: two callers missing at the same time both log in and the last
    write wins.
    """
    _entries: dict[str, CachedToken] = field(default_factory=dict, repr=False)

    def get(self, key: str, now: float) -> CachedToken | None:
        entry = self._entries.get(key)
        if entry is not None and entry.is_valid(now):
            return entry
        return None

    def set(self, key: str, entry: CachedToken) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class AuthManager:
    """Resolves the credential to send with each request."""

    cache: TokenCache = field(default_factory=TokenCache)
    ttl: float = TOKEN_TTL_SECONDS
    clock: Callable[[], float] = field(default=time.time, repr=False)

    def resolve_credential(self, bundle: CredentialBundle) -> str:
        """
        Get a usable credential for the bundle.

        API-key bundles return the key as-is. Login bundles return a cached
        session token while it is fresh and log in again otherwise.

        Raises:
            AuthenticationError: If login fails or returns no token
        """
        if bundle.auth_method == AuthMethod.API_KEY:
            return bundle.api_key  # type: ignore[return-value]

        key = bundle.cache_key
        cached = self.cache.get(key, self.clock())
        if cached is not None:
            logger.debug(f"Using cached token for {bundle.email} on {bundle.base_url}")
            return cached.token

        token = self._login(bundle)
        self.cache.set(key, CachedToken(token=token, expires_at=self.clock() + self.ttl))
        return token

    def get_auth_headers(self, bundle: CredentialBundle) -> dict[str, str]:
        """Get the Authorization header for the bundle."""
        credential = self.resolve_credential(bundle)
        return {"Authorization": bundle.authorization_header(credential)}

    def _login(self, bundle: CredentialBundle) -> str:
        url = f"{bundle.api_url}/{bundle.user_collection}/login"
        try:
            with httpx.Client(**bundle.client_options()) as client:
                response = client.post(
                    url,
                    json={"email": bundle.email, "password": bundle.password},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthenticationError(
                f"Authentication failed: {e.response.status_code} {e.response.text}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(
                "Authentication failed: No token received from login response"
            )

        logger.info(f"Logged in to {bundle.base_url} as {bundle.email} ({bundle.user_collection})")
        return token


# Default instance, shared by every client in the process
_auth_manager = AuthManager()


def get_auth_manager() -> AuthManager:
    return _auth_manager


def get_auth_headers(bundle: CredentialBundle) -> dict[str, str]:
    """Get authentication headers for the given bundle."""
    return _auth_manager.get_auth_headers(bundle)
