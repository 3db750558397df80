"""Map (resource, operation) pairs and item parameters to REST requests."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, TYPE_CHECKING

from .errors import InvalidParameterError
from .where import parse_where, serialize_where

if TYPE_CHECKING:
    from .config import CredentialBundle

logger = logging.getLogger(__name__)

COLLECTION_OPERATIONS = (
    "find", "findById", "create", "update", "updateById", "delete", "deleteById", "count",
)
GLOBAL_OPERATIONS = ("get", "update")
AUTH_OPERATIONS = (
    "login", "logout", "me", "refresh", "forgotPassword", "resetPassword", "verify", "unlock",
)

OPERATIONS: dict[str, tuple[str, ...]] = {
    "collection": COLLECTION_OPERATIONS,
    "global": GLOBAL_OPERATIONS,
    "auth": AUTH_OPERATIONS,
}

_MISSING = object()


@dataclass
class HttpRequest:
    """A fully specified request, ready for credentials and dispatch."""
    method: str
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    json: Any = None

    def __str__(self) -> str:
        return f"{self.method} {self.url}"


def _get(parameters: Mapping[str, Any], name: str) -> Any:
    value = parameters.get(name, _MISSING)
    if value is _MISSING or value is None or value == "":
        raise InvalidParameterError(f"Parameter '{name}' is required")
    return value


def _data(parameters: Mapping[str, Any]) -> Any:
    data = _get(parameters, "data")
    if isinstance(data, str):
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidParameterError(f"Parameter 'data' is not valid JSON: {e}") from e
    return data


def build_query(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Build query parameters from additional options.

    Only options that are set are included. ``where`` is always sent as a
    compact JSON string, whether it was given as text or as a mapping.
    """
    options = options or {}
    params: dict[str, Any] = {}

    for name in ("depth", "limit", "page"):
        if options.get(name) is not None:
            params[name] = options[name]
    if options.get("sort"):
        params["sort"] = options["sort"]

    where = parse_where(options.get("where"))
    if where is not None:
        params["where"] = serialize_where(where)

    select = options.get("select")
    if select:
        params["select"] = select if isinstance(select, str) else ",".join(select)
    if options.get("locale"):
        params["locale"] = options["locale"]

    return params


def _collection_request(
    base: str,
    operation: str,
    parameters: Mapping[str, Any],
    params: dict[str, Any],
) -> HttpRequest:
    collection = _get(parameters, "collection")
    url = f"{base}/{collection}"

    if operation == "find":
        return HttpRequest("GET", url, params)
    if operation == "findById":
        return HttpRequest("GET", f"{url}/{_get(parameters, 'document_id')}", params)
    if operation == "create":
        return HttpRequest("POST", url, params, _data(parameters))
    if operation == "update":
        return HttpRequest("PATCH", url, params, _data(parameters))
    if operation == "updateById":
        return HttpRequest("PATCH", f"{url}/{_get(parameters, 'document_id')}", params, _data(parameters))
    if operation == "deleteById":
        return HttpRequest("DELETE", f"{url}/{_get(parameters, 'document_id')}", params)
    if operation == "count":
        return HttpRequest("GET", f"{url}/count", params)

    # Bulk delete: the filter travels in the body, not the query string
    if params.pop("where", None) is None:
        logger.warning(f"Bulk delete on '{collection}' issued without a where clause")
        return HttpRequest("DELETE", url, params)
    where = parse_where((parameters.get("additional_options") or {}).get("where"))
    return HttpRequest("DELETE", url, params, {"where": where})


def _global_request(
    base: str,
    operation: str,
    parameters: Mapping[str, Any],
    params: dict[str, Any],
) -> HttpRequest:
    url = f"{base}/globals/{_get(parameters, 'global')}"
    if operation == "get":
        return HttpRequest("GET", url, params)
    return HttpRequest("POST", url, params, _data(parameters))


def _auth_request(
    base: str,
    operation: str,
    parameters: Mapping[str, Any],
    params: dict[str, Any],
) -> HttpRequest:
    url = f"{base}/{_get(parameters, 'auth_collection')}"

    if operation == "login":
        return HttpRequest("POST", f"{url}/login", params, {
            "email": _get(parameters, "email"),
            "password": _get(parameters, "password"),
        })
    if operation == "logout":
        return HttpRequest("POST", f"{url}/logout", params)
    if operation == "me":
        return HttpRequest("GET", f"{url}/me", params)
    if operation == "refresh":
        return HttpRequest("POST", f"{url}/refresh-token", params)
    if operation == "forgotPassword":
        return HttpRequest("POST", f"{url}/forgot-password", params, {
            "email": _get(parameters, "email"),
        })
    if operation == "resetPassword":
        return HttpRequest("POST", f"{url}/reset-password", params, {
            "token": _get(parameters, "token"),
            "password": _get(parameters, "new_password"),
        })
    if operation == "verify":
        return HttpRequest("POST", f"{url}/verify/{_get(parameters, 'token')}", params)
    return HttpRequest("POST", f"{url}/unlock", params, {
        "email": _get(parameters, "email"),
    })


_BUILDERS = {
    "collection": _collection_request,
    "global": _global_request,
    "auth": _auth_request,
}


def build_request(
    bundle: CredentialBundle,
    resource: str,
    operation: str,
    parameters: Mapping[str, Any] | None = None,
) -> HttpRequest:
    """
    Build the request for one item.

    Args:
        bundle: Target instance (supplies origin and API prefix)
        resource: "collection", "global" or "auth"
        operation: One of the operations valid for the resource
        parameters: Item parameters (collection, global, document_id, data,
            additional_options, auth_collection, email, password, token,
            new_password)

    Returns:
        HttpRequest without credentials attached

    Raises:
        InvalidParameterError: Unknown resource/operation or unusable parameters
    """
    parameters = parameters or {}
    if resource not in OPERATIONS:
        raise InvalidParameterError(f"Unknown resource '{resource}'")
    if operation not in OPERATIONS[resource]:
        raise InvalidParameterError(
            f"Unknown operation '{operation}' for resource '{resource}'"
        )

    params = build_query(parameters.get("additional_options"))
    return _BUILDERS[resource](bundle.api_url, operation, parameters, params)
