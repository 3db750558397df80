"""Main client class and convenience functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import httpx

from .auth import AuthManager, get_auth_manager
from .config import CredentialBundle
from .discovery import discover_schema
from .errors import RequestError
from .request import HttpRequest, build_request
from .schema import SchemaGraph

logger = logging.getLogger(__name__)


@dataclass
class ItemResult:
    """Outcome of one input item, linked back to it by index."""
    index: int
    json: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict[str, Any]:
        body = self.json if self.ok else {"error": self.error}
        return {"json": body, "paired_item": {"item": self.index}}


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


@dataclass
class PayloadClient:
    """
    Client for a Payload CMS REST API.

    Usage:
        client = PayloadClient(bundle=CredentialBundle(
            base_url="https://cms.example.com",
            api_key="...",
        ))
        posts = client.find("posts", limit=5, where={"title": {"equals": "x"}})

        # Or run a batch of host work items
        results = client.execute([
            {"resource": "collection", "operation": "count", "collection": "posts"},
        ], continue_on_fail=True)
    """
    bundle: CredentialBundle = field(default_factory=CredentialBundle)

    # Shared process-wide unless a dedicated manager is supplied
    auth: AuthManager = field(default_factory=get_auth_manager)

    def discover_schema(self) -> SchemaGraph:
        """Fetch the collection/global permission graph (uncached)."""
        return discover_schema(self.bundle, self.auth)

    def build(
        self,
        resource: str,
        operation: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> HttpRequest:
        """Build the request for one item without sending it."""
        return build_request(self.bundle, resource, operation, parameters)

    def send(self, request: HttpRequest) -> Any:
        """
        Attach credentials to a built request and dispatch it.

        Returns:
            Decoded response body

        Raises:
            RequestError: Transport failure or non-2xx response
            AuthenticationError: Credentials could not be resolved
        """
        headers = self.auth.get_auth_headers(self.bundle)
        logger.debug(f"{request} params={request.params}")
        try:
            with httpx.Client(**self.bundle.client_options()) as client:
                response = client.request(
                    request.method,
                    request.url,
                    headers=headers,
                    params=request.params if request.params else None,
                    json=request.json,
                )
        except httpx.HTTPError as e:
            raise RequestError(f"{request} failed: {e}") from e

        if not response.is_success:
            try:
                body = _decode(response)
            except ValueError:
                body = response.text
            raise RequestError(
                response.text or f"HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        try:
            return _decode(response)
        except ValueError as e:
            raise RequestError(
                f"{request}: invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def execute(
        self,
        items: Iterable[Mapping[str, Any]],
        continue_on_fail: bool = False,
    ) -> list[ItemResult]:
        """
        Run a batch of work items strictly in order, one request at a time.

        Each item is a mapping with ``resource``, ``operation`` and the
        parameters that operation needs (see ``build_request``).

        Args:
            items: Work items
            continue_on_fail: Record request failures as error results and
                keep going instead of raising

        Returns:
            One ItemResult per processed item

        Raises:
            RequestError: A request failed and continue_on_fail is False
            AuthenticationError: Always raised, never recorded per item
        """
        results: list[ItemResult] = []
        for index, item in enumerate(items):
            try:
                request = self.build(
                    item.get("resource", "collection"),
                    item.get("operation", ""),
                    item,
                )
                results.append(ItemResult(index=index, json=self.send(request)))
            except RequestError as e:
                if not continue_on_fail:
                    raise
                logger.debug(f"Item {index} failed: {e}")
                results.append(ItemResult(index=index, error=str(e)))
        return results

    def _run(self, resource: str, operation: str, **parameters: Any) -> Any:
        return self.send(self.build(resource, operation, parameters))

    # Collections

    def find(self, collection: str, **options: Any) -> Any:
        """
        Find documents.

        Args:
            collection: Collection slug
            **options: depth, limit, page, sort, where, select, locale
        """
        return self._run("collection", "find", collection=collection, additional_options=options)

    def find_by_id(self, collection: str, document_id: str, **options: Any) -> Any:
        return self._run(
            "collection", "findById",
            collection=collection, document_id=document_id, additional_options=options,
        )

    def create(self, collection: str, data: Any, **options: Any) -> Any:
        return self._run("collection", "create", collection=collection, data=data, additional_options=options)

    def update(self, collection: str, data: Any, **options: Any) -> Any:
        """Update every document matching ``where``."""
        return self._run("collection", "update", collection=collection, data=data, additional_options=options)

    def update_by_id(self, collection: str, document_id: str, data: Any, **options: Any) -> Any:
        return self._run(
            "collection", "updateById",
            collection=collection, document_id=document_id, data=data, additional_options=options,
        )

    def delete(self, collection: str, **options: Any) -> Any:
        """Delete every document matching ``where``. Without a filter this deletes all documents."""
        return self._run("collection", "delete", collection=collection, additional_options=options)

    def delete_by_id(self, collection: str, document_id: str, **options: Any) -> Any:
        return self._run(
            "collection", "deleteById",
            collection=collection, document_id=document_id, additional_options=options,
        )

    def count(self, collection: str, **options: Any) -> Any:
        return self._run("collection", "count", collection=collection, additional_options=options)

    # Globals

    def get_global(self, slug: str, **options: Any) -> Any:
        return self._run("global", "get", additional_options=options, **{"global": slug})

    def update_global(self, slug: str, data: Any, **options: Any) -> Any:
        return self._run("global", "update", data=data, additional_options=options, **{"global": slug})


# Module-level default client
_default_client: PayloadClient | None = None


def _get_client() -> PayloadClient:
    """Get or create the default client."""
    global _default_client
    if _default_client is None:
        _default_client = PayloadClient()
    return _default_client


def execute(items: Iterable[Mapping[str, Any]], continue_on_fail: bool = False) -> list[ItemResult]:
    """
    Run work items with the default client.

    Usage:
        from payload_client import execute
        results = execute([{"resource": "global", "operation": "get", "global": "settings"}])
    """
    return _get_client().execute(items, continue_on_fail=continue_on_fail)


def find(collection: str, **options: Any) -> Any:
    """
    Find documents with the default client.

    Usage:
        from payload_client import find
        docs = find("posts", limit=5, sort="-createdAt")
    """
    return _get_client().find(collection, **options)


def schema() -> SchemaGraph:
    """Discover the schema with the default client."""
    return _get_client().discover_schema()
