"""Schema discovery through the server's reflection endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from .auth import AuthManager, get_auth_manager
from .errors import DiscoveryError
from .schema import CollectionPermission, GlobalPermission, SchemaGraph

if TYPE_CHECKING:
    from .config import CredentialBundle

logger = logging.getLogger(__name__)

# Slugs probed when discovery_fallback is enabled
COMMON_COLLECTIONS = ("users", "posts", "pages", "media", "categories", "tags")
COMMON_GLOBALS = ("settings", "config", "navigation", "footer", "header")


def discover_schema(
    bundle: CredentialBundle,
    auth: AuthManager | None = None,
) -> SchemaGraph:
    """
    Fetch the collection/global permission graph.

    The graph is fetched fresh on every call. When the reflection endpoint
    fails and ``bundle.discovery_fallback`` is set, well-known slugs are
    probed instead.

    Raises:
        DiscoveryError: Endpoint unreachable, non-2xx, or body of the wrong shape
        AuthenticationError: Credentials could not be resolved
    """
    auth = auth or get_auth_manager()
    headers = auth.get_auth_headers(bundle)
    endpoint = bundle.discovery_url

    try:
        graph = _fetch_schema(bundle, headers)
    except DiscoveryError as e:
        if not bundle.discovery_fallback:
            raise
        logger.warning(f"{e} Falling back to probing common collection and global names.")
        return _probe_schema(bundle, headers)

    logger.debug(
        f"Discovered {len(graph.collections)} collections and "
        f"{len(graph.globals)} globals from {endpoint}"
    )
    return graph


def _fetch_schema(bundle: CredentialBundle, headers: dict[str, str]) -> SchemaGraph:
    endpoint = bundle.discovery_url
    try:
        with httpx.Client(**bundle.client_options()) as client:
            response = client.get(endpoint, headers=headers)
    except httpx.HTTPError as e:
        raise DiscoveryError(endpoint, e) from e

    if not response.is_success:
        raise DiscoveryError(endpoint, f"HTTP {response.status_code} {response.text}".rstrip())

    try:
        return SchemaGraph.from_dict(response.json())
    except ValueError as e:
        raise DiscoveryError(endpoint, f"malformed response body: {e}") from e


def _probe_schema(bundle: CredentialBundle, headers: dict[str, str]) -> SchemaGraph:
    graph = SchemaGraph()
    with httpx.Client(**bundle.client_options()) as client:
        for slug in COMMON_COLLECTIONS:
            if _exists(client, f"{bundle.api_url}/{slug}", headers, {"limit": 1}):
                graph.collections[slug] = CollectionPermission(slug=slug, read=True)
        for slug in COMMON_GLOBALS:
            if _exists(client, f"{bundle.api_url}/globals/{slug}", headers):
                graph.globals[slug] = GlobalPermission(
                    slug=slug, read=True, label=slug.capitalize()
                )

    if not graph.collections:
        raise DiscoveryError(
            bundle.discovery_url,
            "endpoint failed and none of the common collections "
            f"({', '.join(COMMON_COLLECTIONS)}) answered",
        )
    return graph


def _exists(
    client: httpx.Client,
    url: str,
    headers: dict[str, str],
    params: dict[str, int] | None = None,
) -> bool:
    try:
        response = client.get(url, headers=headers, params=params)
    except httpx.HTTPError as e:
        logger.debug(f"Probe {url} failed: {e}")
        return False
    return response.is_success
