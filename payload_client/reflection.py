"""Option lists built from the discovered schema.

SchemaReflector provides a high-level facade over the PayloadClient for
populating dynamic option lists: collections, globals, auth collections
and the addressable fields of each.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .errors import NotFoundError
from .fields import flatten_fields, flatten_permissions

if TYPE_CHECKING:
    from .client import PayloadClient
    from .schema import ResourcePermission

# Offered when no discovered collection is auth-enabled
DEFAULT_AUTH_COLLECTIONS = (
    {"name": "Users", "value": "users"},
    {"name": "Admins", "value": "admins"},
    {"name": "Members", "value": "members"},
)


def _option(resource: ResourcePermission) -> dict[str, Any]:
    return {"name": resource.label or resource.slug, "value": resource.slug}


class SchemaReflector:
    """
    High-level facade for schema-driven option lists.

    Every call re-runs discovery; nothing is cached between calls.

    Usage:
        from payload_client.reflection import SchemaReflector

        reflector = SchemaReflector()

        reflector.collections()        # [{"name": "posts", "value": "posts"}, ...]
        reflector.globals()
        reflector.auth_collections()
        reflector.collection_fields("posts")
    """

    def __init__(self, client: "PayloadClient | None" = None):
        """
        Create a SchemaReflector.

        Args:
            client: Optional PayloadClient instance. If not provided,
                    a default client is lazily created on first use.
        """
        self._client = client

    @property
    def client(self) -> "PayloadClient":
        """Get the underlying client (lazy-initialized)."""
        if self._client is None:
            from .client import _get_client
            self._client = _get_client()
        return self._client

    def collections(self) -> list[dict[str, Any]]:
        """Option list of every discovered collection, in server order."""
        graph = self.client.discover_schema()
        return [_option(c) for c in graph.collections.values()]

    def globals(self) -> list[dict[str, Any]]:
        """Option list of every discovered global, in server order."""
        graph = self.client.discover_schema()
        return [_option(g) for g in graph.globals.values()]

    def auth_collections(self) -> list[dict[str, Any]]:
        """
        Option list of collections that can authenticate.

        Collections flagged as auth-enabled, plus ``users`` when present.
        Falls back to the usual users/admins/members slugs when none qualify.
        """
        graph = self.client.discover_schema()
        found = [
            _option(c) for c in graph.collections.values()
            if c.auth or c.slug == "users"
        ]
        if found:
            return found
        return [dict(option) for option in DEFAULT_AUTH_COLLECTIONS]

    def collection_fields(self, slug: str) -> list[dict[str, Any]]:
        """Addressable field options for a collection."""
        graph = self.client.discover_schema()
        if slug not in graph.collections:
            raise NotFoundError(f"Collection not found in schema: {slug}")
        return self._fields(graph.collections[slug])

    def global_fields(self, slug: str) -> list[dict[str, Any]]:
        """Addressable field options for a global."""
        graph = self.client.discover_schema()
        if slug not in graph.globals:
            raise NotFoundError(f"Global not found in schema: {slug}")
        return self._fields(graph.globals[slug])

    def _fields(self, resource: ResourcePermission) -> list[dict[str, Any]]:
        if resource.field_definitions:
            options = flatten_fields(resource.field_definitions)
        else:
            options = flatten_permissions(resource.fields)
        return [o.as_dict() for o in options]
