"""Load an OpenAPI document and read its top-level sections.

JSON files go through json; anything else through PyYAML, which also
accepts JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

from .errors import UnresolvableReferenceError, UnsupportedDocumentError, UnsupportedReferenceError

# RFC 6901 escapes inside $ref pointers
_ESCAPED_SLASH = "~1"
_ESCAPED_TILDE = "~0"


def load_document(path: Path) -> dict[str, Any]:
    """Load an OpenAPI document from disk."""
    with open(path, encoding="utf-8") as f:
        try:
            if Path(path).suffix.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise UnsupportedDocumentError(f"Could not parse {path}: {e}") from e
    if not isinstance(document, dict):
        raise UnsupportedDocumentError(f"{path} does not contain an OpenAPI object")
    return document


def get_version(document: dict[str, Any]) -> int:
    """Return the major OpenAPI version: 2 for `swagger`, 3 for `openapi`."""
    if "swagger" in document:
        if not str(document["swagger"]).startswith("2"):
            raise UnsupportedDocumentError(
                f"Unsupported Swagger version: {document['swagger']!r}"
            )
        return 2
    if "openapi" in document:
        if not str(document["openapi"]).startswith("3"):
            raise UnsupportedDocumentError(
                f"Unsupported OpenAPI version: {document['openapi']!r}"
            )
        return 3
    raise UnsupportedDocumentError(
        "Document has neither a 'swagger' nor an 'openapi' field"
    )


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return document.get("paths") or {}


def get_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Extract schema definitions: `definitions` (2.x) or `components.schemas` (3.x)."""
    if "swagger" in document:
        return document.get("definitions") or {}
    return (document.get("components") or {}).get("schemas") or {}


def get_component_parameters(document: dict[str, Any]) -> dict[str, Any]:
    """Extract reusable 3.x parameters."""
    return (document.get("components") or {}).get("parameters") or {}


def get_server(document: dict[str, Any]) -> str:
    """Build the base URL from `servers` (3.x) or `host`/`basePath` (2.x)."""
    if "swagger" in document:
        schemes = document.get("schemes") or ["http"]
        host = document.get("host", "")
        base_path = document.get("basePath", "")
        url = f"{schemes[0]}://{host}{base_path}" if host else base_path
        return url.rstrip("/")

    servers = document.get("servers") or []
    if not servers:
        return ""
    server = servers[0]
    url = server.get("url", "")
    for name, variable in (server.get("variables") or {}).items():
        url = url.replace(f"{{{name}}}", str(variable.get("default", "")))
    return url.rstrip("/")


def resolve_ref(document: dict[str, Any], ref: str) -> Any:
    """Resolve a local $ref pointer in the document."""
    if not ref.startswith("#"):
        raise UnsupportedReferenceError(ref)
    node: Any = document
    for part in ref.lstrip("#/").split("/"):
        if not part:
            continue
        key = unquote(part.replace(_ESCAPED_SLASH, "/").replace(_ESCAPED_TILDE, "~"))
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            raise UnresolvableReferenceError(ref)
    return node


def get_ref(document: dict[str, Any], item: dict[str, Any]) -> dict[str, Any]:
    """Return the object `item` points at, or `item` itself when it is no reference."""
    if isinstance(item, dict) and "$ref" in item:
        return resolve_ref(document, item["$ref"])
    return item
