"""Assemble the canonical Client from a parsed OpenAPI document.

Groups operations into services by tag, resolves every top-level model,
and runs the one document-wide mutable pass: enum name registration.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import Config
from .loader import get_paths, get_server, get_version
from .model_parser import get_models
from .models import Client, EnumModel, Operation, Service
from .naming import enum_name
from .operation_parser import get_operation, get_operation_parameters

logger = logging.getLogger(__name__)

# Path item keys that are HTTP operations; everything else is metadata
_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_SERVICE = "Default"


def _deduplicate_operation_names(operations: list[Operation]) -> None:
    """Ensure all operation names in a service are unique by appending the method if needed."""
    seen: dict[str, int] = {}
    for operation in operations:
        name = operation.name
        if name in seen:
            seen[name] += 1
            operation.name = f"{name}{operation.method.capitalize()}"
        else:
            seen[name] = 1

    final_seen: dict[str, int] = {}
    for operation in operations:
        name = operation.name
        if name in final_seen:
            final_seen[name] += 1
            operation.name = f"{name}{final_seen[name]}"
        else:
            final_seen[name] = 1


def get_services(document: dict[str, Any], config: Config) -> list[Service]:
    """Group every operation into services, in document order."""
    services: dict[str, Service] = {}

    for url, path_item in get_paths(document).items():
        path_params = get_operation_parameters(document, path_item.get("parameters") or [])

        for method, op in path_item.items():
            if method not in _METHODS:
                continue

            tags = list(dict.fromkeys(op.get("tags") or [])) or [DEFAULT_SERVICE]
            for tag in tags:
                operation = get_operation(document, url, method, tag, op, path_params, config)
                service = services.setdefault(operation.service, Service(name=operation.service))
                service.operations.append(operation)
                service.imports.extend(operation.imports)
                service.refs.extend(operation.refs)

    for service in services.values():
        _deduplicate_operation_names(service.operations)

    return list(services.values())


def _assign_enum_names(client: Client) -> None:
    """Register enum names in declaration order; collisions stay unexported."""
    for model in client.models:
        candidates = [model] if isinstance(model, EnumModel) else []
        candidates.extend(model.enums)
        for enum in candidates:
            enum.enum_name = enum_name(client.enum_names, enum.name)
            if enum.enum_name is None:
                logger.debug("Enum %r collides with an exported enum; not exported", enum.name)


def parse_document(document: dict[str, Any], config: Config) -> Client:
    """Build the full Client for one document."""
    version = get_version(document)
    client = Client(
        models=get_models(document),
        services=get_services(document, config),
        server=config.base or get_server(document),
        version=str((document.get("info") or {}).get("version", "")),
    )
    _assign_enum_names(client)

    logger.debug(
        "Parsed OpenAPI %d document: %d models, %d services",
        version, len(client.models), len(client.services),
    )
    return client
