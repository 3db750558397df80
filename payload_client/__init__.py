"""Dynamic client for the Payload CMS REST API."""

from .auth import AuthManager, CachedToken, TokenCache, get_auth_headers
from .client import ItemResult, PayloadClient, execute, find, schema
from .config import AuthMethod, CredentialBundle
from .discovery import discover_schema
from .errors import (
    AuthenticationError,
    DiscoveryError,
    InvalidParameterError,
    NotFoundError,
    PayloadError,
    RequestError,
)
from .fields import FieldOption, flatten_field, flatten_fields, flatten_permissions
from .reflection import SchemaReflector
from .request import HttpRequest, build_request
from .schema import (
    CollectionPermission,
    FieldPermission,
    FieldPermissionTree,
    GlobalPermission,
    PayloadField,
    SchemaGraph,
)
from .where import OPERATORS, parse_where, serialize_where

__all__ = [
    "AuthManager",
    "AuthMethod",
    "AuthenticationError",
    "CachedToken",
    "CollectionPermission",
    "CredentialBundle",
    "DiscoveryError",
    "FieldOption",
    "FieldPermission",
    "FieldPermissionTree",
    "GlobalPermission",
    "HttpRequest",
    "InvalidParameterError",
    "ItemResult",
    "NotFoundError",
    "OPERATORS",
    "PayloadClient",
    "PayloadError",
    "PayloadField",
    "RequestError",
    "SchemaGraph",
    "SchemaReflector",
    "TokenCache",
    "build_request",
    "discover_schema",
    "execute",
    "find",
    "flatten_field",
    "flatten_fields",
    "flatten_permissions",
    "get_auth_headers",
    "parse_where",
    "schema",
    "serialize_where",
]
