"""Flatten nested field definitions and permission trees into option lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .schema import FieldPermissionTree, PayloadField

CHOICE_TYPES = frozenset({"select", "radio"})
COMPOSITE_TYPES = frozenset({"array", "group", "row", "tabs", "blocks"})


@dataclass(frozen=True)
class FieldOption:
    """One selectable entry: a display name and the value sent back to the server."""
    name: str
    value: Any

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


def _option_label(option: Any) -> str:
    if isinstance(option, dict):
        label = option.get("label")
        return label if label is not None else str(option.get("value"))
    return str(option)


def _option_value(option: Any) -> Any:
    if isinstance(option, dict):
        return option.get("value")
    return option


def flatten_field(field: PayloadField, parent_name: str = "") -> list[FieldOption]:
    """
    Flatten a field definition into options, depth first, in declaration order.

    - select/radio: one option per declared choice, valued with the choice's value
    - checkbox: ``True`` and ``False``
    - point: the ``lat`` and ``lng`` components
    - array/group/row/tabs/blocks: the options of every sub-field, prefixed with
      this field's name; the composite itself yields nothing
    - anything else, including unknown type tags: a single option named by the
      dotted path and valued with the bare field name
    """
    prefix = f"{parent_name}." if parent_name else ""
    path = f"{prefix}{field.name}"

    if field.type in CHOICE_TYPES:
        return [
            FieldOption(name=f"{path}: {_option_label(opt)}", value=_option_value(opt))
            for opt in field.options
        ]

    if field.type == "checkbox":
        return [
            FieldOption(name=f"{path}: True", value=True),
            FieldOption(name=f"{path}: False", value=False),
        ]

    if field.type == "point":
        return [
            FieldOption(name=f"{path}.lat", value="lat"),
            FieldOption(name=f"{path}.lng", value="lng"),
        ]

    if field.type in COMPOSITE_TYPES:
        options: list[FieldOption] = []
        for sub_field in field.fields:
            options.extend(flatten_field(sub_field, path))
        return options

    # The query language addresses leaves by name within their parent
    return [FieldOption(name=path, value=field.name)]


def flatten_fields(fields: Iterable[PayloadField], parent_name: str = "") -> list[FieldOption]:
    """Flatten a list of sibling field definitions."""
    options: list[FieldOption] = []
    for field in fields:
        options.extend(flatten_field(field, parent_name))
    return options


def flatten_permissions(tree: FieldPermissionTree, parent_name: str = "") -> list[FieldOption]:
    """
    Flatten a field permission tree into one option per addressable leaf.

    Both name and value are the dotted path. Nested fields and block fields
    extend the path with the owning field's name; block slugs are not part of
    the path. A tree that grants all fields without naming them yields nothing.
    Fields denied for reading are skipped along with everything under them.
    """
    prefix = f"{parent_name}." if parent_name else ""
    options: list[FieldOption] = []

    for name, node in tree.fields.items():
        path = f"{prefix}{name}"
        if not node.readable:
            continue
        if node.is_leaf:
            options.append(FieldOption(name=path, value=path))
            continue
        if node.fields is not None:
            options.extend(flatten_permissions(node.fields, path))
        for block_tree in node.blocks.values():
            options.extend(flatten_permissions(block_tree, path))

    return options
