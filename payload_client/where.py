"""Where-clause handling for the Payload query language.

A where expression is a tree of nodes. Each node is exactly one of:

- ``{"and": [<node>, ...]}``
- ``{"or": [<node>, ...]}``
- one or more field paths mapped to operator-keyed leaves, e.g.
  ``{"title": {"equals": "x"}, "views": {"greater_than": 10}}``

Nodes that combine ``and``/``or`` with each other or with field leaves are
rejected instead of guessing which part should take precedence.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import InvalidParameterError

OPERATORS = frozenset({
    "equals",
    "contains",
    "not_equals",
    "in",
    "all",
    "not_in",
    "exists",
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
    "like",
    "not_like",
    "within",
    "intersects",
    "near",
})

LOGICAL_KEYS = ("and", "or")


def parse_where(value: str | dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Turn caller input into a validated where expression.

    Strings are parsed as JSON; mappings are used as given. Empty input
    (None, blank string, ``{}``) means no filter and returns None.

    Raises:
        InvalidParameterError: If the input is not valid JSON or not a valid expression
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidParameterError(f"Where clause is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise InvalidParameterError(
            f"Where clause must be a JSON object, got {type(value).__name__}"
        )
    if not value:
        return None
    validate_where(value)
    return value


def validate_where(node: Any, path: str = "where") -> None:
    """Check a where expression node recursively."""
    if not isinstance(node, dict):
        raise InvalidParameterError(f"{path}: expected an object, got {type(node).__name__}")

    logical = [key for key in LOGICAL_KEYS if key in node]
    if logical:
        if len(node) > 1:
            raise InvalidParameterError(
                f"{path}: '{logical[0]}' cannot be combined with other keys "
                f"({', '.join(sorted(k for k in node if k != logical[0]))}); "
                f"nest them inside the '{logical[0]}' list"
            )
        key = logical[0]
        children = node[key]
        if not isinstance(children, list):
            raise InvalidParameterError(f"{path}.{key}: expected a list")
        for i, child in enumerate(children):
            validate_where(child, f"{path}.{key}[{i}]")
        return

    for field_path, leaf in node.items():
        if not isinstance(leaf, dict) or not leaf:
            raise InvalidParameterError(
                f"{path}.{field_path}: expected an operator object such as {{\"equals\": ...}}"
            )
        unknown = [op for op in leaf if op not in OPERATORS]
        if unknown:
            raise InvalidParameterError(
                f"{path}.{field_path}: unknown operator(s) {', '.join(unknown)}"
            )


def serialize_where(where: dict[str, Any]) -> str:
    """Encode a where expression as the compact JSON string sent to the server."""
    return json.dumps(where, separators=(",", ":"), ensure_ascii=False)
