"""Schema and permission graph discovered from a Payload server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Closed set of field type tags a Payload schema can carry
FIELD_TYPES = frozenset({
    "array",
    "blocks",
    "checkbox",
    "code",
    "collapsible",
    "date",
    "email",
    "group",
    "join",
    "json",
    "number",
    "point",
    "radio",
    "relationship",
    "richText",
    "row",
    "select",
    "tabs",
    "text",
    "textarea",
    "ui",
    "upload",
})


def _flag(value: Any) -> bool | None:
    """Read a capability as reported by the server: a bool or {"permission": bool}."""
    if value is None:
        return None
    if isinstance(value, dict):
        permission = value.get("permission")
        return None if permission is None else bool(permission)
    return bool(value)


@dataclass
class PayloadField:
    """A field definition from a collection or global config."""
    name: str
    type: str
    fields: list["PayloadField"] = field(default_factory=list)
    # For select / radio: bare strings or {"label": ..., "value": ...}
    options: list[Any] = field(default_factory=list)
    required: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayloadField:
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            fields=[cls.from_dict(f) for f in data.get("fields") or []],
            options=list(data.get("options") or []),
            required=bool(data.get("required", False)),
        )


@dataclass
class FieldPermission:
    """
    Permission node for a single field.

    A node is either terminal (``all_permitted`` with no children) or carries
    nested field permissions and, for blocks fields, one nested tree per
    block slug.
    """
    name: str
    all_permitted: bool = False
    create: bool | None = None
    read: bool | None = None
    update: bool | None = None
    fields: FieldPermissionTree | None = None
    blocks: dict[str, FieldPermissionTree] = field(default_factory=dict)

    @property
    def readable(self) -> bool:
        return self.all_permitted or self.read is not False

    @property
    def is_leaf(self) -> bool:
        if self.blocks:
            return False
        return self.fields is None or self.fields.all_permitted or not self.fields.fields

    @classmethod
    def from_value(cls, name: str, value: Any) -> FieldPermission:
        if not isinstance(value, dict):
            # A bare false denies the field outright
            return cls(name=name, all_permitted=bool(value), read=bool(value))

        fields = value.get("fields")
        blocks = value.get("blocks")
        if blocks is not None and not isinstance(blocks, dict):
            raise ValueError(f"Field {name!r}: blocks must be a mapping")
        return cls(
            name=name,
            create=_flag(value.get("create")),
            read=_flag(value.get("read")),
            update=_flag(value.get("update")),
            fields=FieldPermissionTree.from_value(fields) if fields is not None else None,
            blocks={
                slug: FieldPermissionTree.from_value(
                    block.get("fields", True) if isinstance(block, dict) else block
                )
                for slug, block in (blocks or {}).items()
            },
        )


@dataclass
class FieldPermissionTree:
    """Either "all fields permitted" or a mapping of field name to permission node."""
    all_permitted: bool = False
    fields: dict[str, FieldPermission] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> FieldPermissionTree:
        if value is True:
            return cls(all_permitted=True)
        if not value:
            return cls()
        if not isinstance(value, dict):
            raise ValueError(f"Field permissions must be true or a mapping, got {type(value).__name__}")
        return cls(fields={
            name: FieldPermission.from_value(name, node) for name, node in value.items()
        })


@dataclass
class ResourcePermission:
    """Permissions shared by collections and globals."""
    slug: str
    read: bool | None = None
    update: bool | None = None
    read_versions: bool | None = None
    fields: FieldPermissionTree = field(default_factory=FieldPermissionTree)
    # Populated when the server describes fields as definitions rather than permissions
    field_definitions: list[PayloadField] = field(default_factory=list)
    label: str | None = None

    @staticmethod
    def _common(slug: str, data: dict[str, Any]) -> dict[str, Any]:
        fields = data.get("fields")
        if isinstance(fields, list):
            tree = FieldPermissionTree()
            definitions = [PayloadField.from_dict(f) for f in fields]
        else:
            tree = FieldPermissionTree.from_value(fields)
            definitions = []
        versions = data.get("readVersions", data.get("read_versions"))
        label = data.get("label")
        labels = data.get("labels")
        if isinstance(labels, dict) and labels.get("plural"):
            label = labels["plural"]
        return {
            "slug": slug,
            "read": _flag(data.get("read")),
            "update": _flag(data.get("update")),
            "read_versions": _flag(versions),
            "fields": tree,
            "field_definitions": definitions,
            "label": label if isinstance(label, str) else None,
        }


@dataclass
class CollectionPermission(ResourcePermission):
    create: bool | None = None
    delete: bool | None = None
    auth: bool = False

    @classmethod
    def from_dict(cls, slug: str, data: dict[str, Any]) -> CollectionPermission:
        if not isinstance(data, dict):
            raise ValueError(f"Collection {slug!r}: permissions must be a mapping")
        return cls(
            **cls._common(slug, data),
            create=_flag(data.get("create")),
            delete=_flag(data.get("delete")),
            # The server only reports an unlock capability for auth-enabled collections
            auth=bool(data.get("auth")) or "unlock" in data,
        )


@dataclass
class GlobalPermission(ResourcePermission):

    @classmethod
    def from_dict(cls, slug: str, data: dict[str, Any]) -> GlobalPermission:
        if not isinstance(data, dict):
            raise ValueError(f"Global {slug!r}: permissions must be a mapping")
        return cls(**cls._common(slug, data))


@dataclass
class SchemaGraph:
    """Collections and globals visible to the current credentials."""
    collections: dict[str, CollectionPermission] = field(default_factory=dict)
    globals: dict[str, GlobalPermission] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> SchemaGraph:
        """
        Parse a reflection response.

        Raises:
            ValueError: If the body is not ``{collections: {...}, globals: {...}}``
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        collections = data.get("collections")
        globals_ = data.get("globals")
        if not isinstance(collections, dict) or not isinstance(globals_, dict):
            raise ValueError("expected 'collections' and 'globals' mappings")
        return cls(
            collections={
                slug: CollectionPermission.from_dict(slug, perm)
                for slug, perm in collections.items()
            },
            globals={
                slug: GlobalPermission.from_dict(slug, perm)
                for slug, perm in globals_.items()
            },
        )
