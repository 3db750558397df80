"""Credential bundle and configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file search paths (in order of precedence, last wins)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".payload" / "client.yaml",  # User-level defaults
    Path(".payload.yaml"),  # Project-level overrides
]


class AuthMethod:
    API_KEY = "api_key"
    LOGIN = "login"


AUTH_METHODS = frozenset({AuthMethod.API_KEY, AuthMethod.LOGIN})


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_timeout() -> float | None:
    value = os.environ.get("PAYLOAD_TIMEOUT")
    return float(value) if value else None


@dataclass
class CredentialBundle:
    """
    Connection and credential settings for one Payload CMS instance.

    Exactly one authentication mode is active per bundle:

    - ``api_key``: every request carries ``<user_collection> API-Key <api_key>``
    - ``login``: the client logs in as ``email``/``password`` against
      ``<user_collection>/login`` and sends the returned token as a bearer token

    Precedence (lowest to highest):
    1. Defaults
    2. Environment variables (PAYLOAD_*)
    3. ~/.payload/client.yaml
    4. .payload.yaml (project root)
    5. Constructor arguments
    """
    # Origin of the Payload instance, e.g. https://cms.example.com
    base_url: str = field(
        default_factory=lambda: os.environ.get("PAYLOAD_BASE_URL", "http://localhost:3000")
    )
    api_prefix: str = field(
        default_factory=lambda: os.environ.get("PAYLOAD_API_PREFIX", "/api")
    )
    # Reflection endpoint, relative to base_url
    discovery_endpoint: str = field(
        default_factory=lambda: os.environ.get("PAYLOAD_DISCOVERY_ENDPOINT", "/api/permissions")
    )

    auth_method: str = field(
        default_factory=lambda: os.environ.get("PAYLOAD_AUTH_METHOD", AuthMethod.API_KEY)
    )
    # Collection whose documents are the authenticating users
    user_collection: str = field(
        default_factory=lambda: os.environ.get("PAYLOAD_USER_COLLECTION", "users")
    )
    api_key: str | None = field(
        default_factory=lambda: os.environ.get("PAYLOAD_API_KEY"), repr=False
    )
    email: str | None = field(
        default_factory=lambda: os.environ.get("PAYLOAD_EMAIL")
    )
    password: str | None = field(
        default_factory=lambda: os.environ.get("PAYLOAD_PASSWORD"), repr=False
    )

    # Request timeout (seconds); None leaves httpx's default in place
    timeout: float | None = field(default_factory=_env_timeout)

    # Probe well-known slugs when the reflection endpoint fails (legacy servers)
    discovery_fallback: bool = field(
        default_factory=lambda: _env_bool("PAYLOAD_DISCOVERY_FALLBACK")
    )

    def __post_init__(self) -> None:
        if self.auth_method not in AUTH_METHODS:
            raise ValueError(
                f"Unknown auth_method {self.auth_method!r}, expected one of {sorted(AUTH_METHODS)}"
            )
        if self.auth_method == AuthMethod.API_KEY and not self.api_key:
            raise ValueError("auth_method 'api_key' requires api_key")
        if self.auth_method == AuthMethod.LOGIN and not (self.email and self.password):
            raise ValueError("auth_method 'login' requires email and password")

        self.base_url = self.base_url.rstrip("/")
        if self.api_prefix and not self.api_prefix.startswith("/"):
            self.api_prefix = f"/{self.api_prefix}"
        self.api_prefix = self.api_prefix.rstrip("/")
        if not self.discovery_endpoint.startswith("/"):
            self.discovery_endpoint = f"/{self.discovery_endpoint}"

    @property
    def api_url(self) -> str:
        """Base URL for REST calls: origin plus API prefix."""
        return f"{self.base_url}{self.api_prefix}"

    @property
    def discovery_url(self) -> str:
        return f"{self.base_url}{self.discovery_endpoint}"

    @property
    def cache_key(self) -> str:
        """Identity of the login session this bundle produces."""
        return f"{self.base_url}:{self.email}:{self.user_collection}"

    def authorization_header(self, credential: str) -> str:
        """Format the Authorization header value for a resolved credential."""
        if self.auth_method == AuthMethod.API_KEY:
            return f"{self.user_collection} API-Key {credential}"
        return f"Bearer {credential}"

    def client_options(self) -> dict[str, Any]:
        """Keyword arguments for httpx.Client."""
        if self.timeout is None:
            return {}
        return {"timeout": self.timeout}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CredentialBundle:
        """Create a bundle from a dictionary, falling back to environment values."""
        timeout = data.get("timeout", os.environ.get("PAYLOAD_TIMEOUT"))
        fallback = data.get("discovery_fallback")
        if fallback is None:
            fallback = _env_bool("PAYLOAD_DISCOVERY_FALLBACK")
        elif isinstance(fallback, str):
            fallback = fallback.lower() == "true"
        return cls(
            base_url=data.get("base_url", os.environ.get("PAYLOAD_BASE_URL", "http://localhost:3000")),
            api_prefix=data.get("api_prefix", os.environ.get("PAYLOAD_API_PREFIX", "/api")),
            discovery_endpoint=data.get("discovery_endpoint", os.environ.get("PAYLOAD_DISCOVERY_ENDPOINT", "/api/permissions")),
            auth_method=data.get("auth_method", os.environ.get("PAYLOAD_AUTH_METHOD", AuthMethod.API_KEY)),
            user_collection=data.get("user_collection", os.environ.get("PAYLOAD_USER_COLLECTION", "users")),
            api_key=data.get("api_key", os.environ.get("PAYLOAD_API_KEY")),
            email=data.get("email", os.environ.get("PAYLOAD_EMAIL")),
            password=data.get("password", os.environ.get("PAYLOAD_PASSWORD")),
            timeout=float(timeout) if timeout not in (None, "") else None,
            discovery_fallback=bool(fallback),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> CredentialBundle:
        """Load a bundle from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, config_file: str | Path | None = None) -> CredentialBundle:
        """
        Load a bundle with auto-discovery.

        Search order (last wins):
        1. ~/.payload/client.yaml
        2. .payload.yaml
        3. Explicit config_file argument
        """
        merged: dict[str, Any] = {}

        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
                merged.update(data)

        if config_file:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
            merged.update(data)

        return cls.from_dict(merged)
