"""Map raw schema type tokens to TypeScript type expressions.

Handles:
- Primitive names (string, integer, date-time, file, ...)
- Swagger 2 generics: array[T] and Name[Template]
- $ref paths into the supported component locations
- Type arrays from JSON Schema 2020-12 (type: [string, "null"])
"""

from __future__ import annotations

import re
from typing import Sequence, Union
from urllib.parse import unquote

from .errors import UnsupportedReferenceError
from .models import Type
from .naming import escape_reserved, sanitize_identifier

TYPE_MAPPINGS: dict[str, str] = {
    "any": "unknown",
    "array": "unknown[]",
    "boolean": "boolean",
    "byte": "number",
    "char": "string",
    "date": "string",
    "date-time": "string",
    "double": "number",
    "file": "binary",
    "float": "number",
    "int": "number",
    "integer": "number",
    "long": "number",
    "null": "null",
    "number": "number",
    "object": "unknown",
    "password": "string",
    "short": "number",
    "string": "string",
    "void": "void",
}

# Local pointer prefixes a reference may use; anything else under '#' is rejected.
_NAMESPACES = (
    "#/definitions/",
    "#/parameters/",
    "#/responses/",
    "#/securityDefinitions/",
    "#/components/schemas/",
    "#/components/responses/",
    "#/components/parameters/",
    "#/components/examples/",
    "#/components/requestBodies/",
    "#/components/headers/",
    "#/components/securitySchemes/",
    "#/components/links/",
    "#/components/callbacks/",
)

_GENERIC = re.compile(r"^(.*?)\[(.*)\]$")

RawType = Union[str, Sequence[str], None]


def get_mapped_type(type_name: str, format: str | None = None) -> str | None:
    """Return the TypeScript type for a primitive token, or None if unmapped."""
    if format == "binary":
        return "binary"
    return TYPE_MAPPINGS.get(type_name)


def strip_namespace(value: str) -> str:
    """Remove the component prefix from a reference, e.g. '#/definitions/Pet' -> 'Pet'."""
    value = value.strip()
    for prefix in _NAMESPACES:
        if value.startswith(prefix):
            return value[len(prefix):]
    if "#" in value:
        raise UnsupportedReferenceError(value)
    return value


def get_type(type_name: RawType, format: str | None = None) -> Type:
    """Resolve a raw type token (or a list of them) to a Type."""
    if isinstance(type_name, (list, tuple)):
        return _get_union_type(type_name, format)

    result = Type()
    if not type_name:
        return result

    mapped = get_mapped_type(type_name, format)
    if mapped:
        result.type = mapped
        result.base = mapped
        return result

    without_namespace = unquote(strip_namespace(type_name))

    match = _GENERIC.match(without_namespace)
    if match:
        head = get_type(sanitize_identifier(match.group(1)))
        argument = get_type(sanitize_identifier(match.group(2)))
        if head.type == "unknown[]":
            result.type = f"{argument.type}[]"
            result.base = argument.type
            head.imports = []
        else:
            result.type = f"{head.type}<{argument.type}>"
            result.base = head.type
            result.template = argument.type
        result.imports = head.imports + argument.imports
        if type_name.startswith("#"):
            result.refs.append(type_name)
        return result

    if without_namespace:
        encoded = escape_reserved(sanitize_identifier(without_namespace))
        result.type = encoded
        result.base = encoded
        result.imports.append(encoded)
        if type_name.startswith("#"):
            result.refs.append(type_name)
    return result


def _get_union_type(members: Sequence[str], format: str | None) -> Type:
    """Resolve `type: [A, B, ...]`; a 'null' member only marks the result nullable."""
    is_nullable = "null" in members
    resolved = [get_type(m, format) for m in members if m != "null"]

    if not resolved:
        return Type(type="null", base="null", is_nullable=is_nullable)
    if len(resolved) == 1:
        result = resolved[0]
        result.is_nullable = result.is_nullable or is_nullable
        return result

    joined = " | ".join(t.type for t in resolved)
    result = Type(type=joined, base=joined, is_nullable=is_nullable)
    for member in resolved:
        result.imports.extend(member.imports)
        result.refs.extend(member.refs)
    return result
