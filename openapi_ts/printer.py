"""Print abstract nodes as TypeScript text.

Registered as jinja2 filters by codegen; the templates handle layout of
declarations while these functions print the expressions inside them.
"""

from __future__ import annotations

import json
from typing import Any

from .naming import enum_value, escape_comment, escape_name
from .nodes import (
    ArrayType,
    FunctionParameter,
    Identifier,
    ImportName,
    ImportNode,
    IndexedAccessType,
    IntersectionType,
    Literal,
    LiteralType,
    ObjectLiteral,
    PropertySignature,
    RawType,
    TypeLiteral,
    TypeReference,
    UnionType,
)

INDENT = "    "


def _needs_parens(expr: Any) -> bool:
    return isinstance(expr, (UnionType, IntersectionType)) and len(expr.types) > 1


def print_type(expr: Any, level: int = 0) -> str:
    """Render a type expression; `level` is the indent depth of the enclosing line."""
    if isinstance(expr, TypeReference):
        if expr.args:
            return f"{expr.name}<{', '.join(print_type(a, level) for a in expr.args)}>"
        return expr.name
    if isinstance(expr, RawType):
        return expr.text
    if isinstance(expr, LiteralType):
        return enum_value(expr.value, union=True)
    if isinstance(expr, ArrayType):
        element = print_type(expr.element, level)
        if _needs_parens(expr.element):
            element = f"({element})"
        return f"{element}[]"
    if isinstance(expr, UnionType):
        return " | ".join(print_type(t, level) for t in expr.types)
    if isinstance(expr, IntersectionType):
        parts = []
        for t in expr.types:
            text = print_type(t, level)
            parts.append(f"({text})" if isinstance(t, UnionType) and len(t.types) > 1 else text)
        return " & ".join(parts)
    if isinstance(expr, IndexedAccessType):
        return f"{print_type(expr.object, level)}[{enum_value(expr.index)}]"
    if isinstance(expr, TypeLiteral):
        if not expr.members:
            return "{}"
        lines = ["{"]
        for member in expr.members:
            lines.append(print_member(member, level + 1))
        lines.append(f"{INDENT * level}}}")
        return "\n".join(lines)
    raise TypeError(f"Cannot print type expression {type(expr).__name__}")


def print_member(member: PropertySignature, level: int = 1) -> str:
    """One property signature line (with its doc comment) inside an object type."""
    pad = INDENT * level
    name = member.name if member.name.startswith("[") else escape_name(member.name)
    optional = "" if member.is_required else "?"
    readonly = "readonly " if member.is_read_only else ""
    line = f"{pad}{readonly}{name}{optional}: {print_type(member.type, level)};"
    return print_comment(member.comment, level) + line


def print_comment(lines: list[str] | None, level: int = 0) -> str:
    """A JSDoc block followed by a newline, or '' when there is nothing to say."""
    body = []
    for line in lines or []:
        if line:
            body.extend(escape_comment(str(line)).split("\n"))
    if not body:
        return ""
    pad = INDENT * level
    inner = "\n".join(f"{pad} * {text}".rstrip() for text in body)
    return f"{pad}/**\n{inner}\n{pad} */\n"


def print_value(value: Any, level: int = 0) -> str:
    """Render a JSON-like value as a TypeScript object/array literal."""
    pad = INDENT * (level + 1)
    if isinstance(value, dict):
        if not value:
            return "{}"
        entries = [f"{pad}{escape_name(str(k))}: {print_value(v, level + 1)}," for k, v in value.items()]
        return "{\n" + "\n".join(entries) + f"\n{INDENT * level}}}"
    if isinstance(value, list):
        if not value:
            return "[]"
        items = [f"{pad}{print_value(v, level + 1)}," for v in value]
        return "[\n" + "\n".join(items) + f"\n{INDENT * level}]"
    if isinstance(value, str):
        return enum_value(value)
    return json.dumps(value)


def print_expression(expr: Any, level: int = 0) -> str:
    """Render a value expression used in generated method bodies."""
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, Literal):
        return print_value(expr.value, level)
    if isinstance(expr, ObjectLiteral):
        if not expr.entries:
            return "{}"
        pad = INDENT * (level + 1)
        lines = ["{"]
        for key, value in expr.entries:
            if isinstance(value, Identifier) and value.name == key:
                lines.append(f"{pad}{key},")
            else:
                lines.append(f"{pad}{key}: {print_expression(value, level + 1)},")
        lines.append(f"{INDENT * level}}}")
        return "\n".join(lines)
    raise TypeError(f"Cannot print expression {type(expr).__name__}")


def print_parameter(parameter: FunctionParameter) -> str:
    prefix = ""
    if parameter.access_level:
        prefix += f"{parameter.access_level} "
    if parameter.is_read_only:
        prefix += "readonly "
    optional = "" if parameter.is_required or parameter.default is not None else "?"
    text = f"{prefix}{parameter.name}{optional}"
    if parameter.type is not None:
        text += f": {print_type(parameter.type)}"
    if parameter.default is not None:
        default = parameter.default
        text += " = " + (print_expression(default) if isinstance(default, ObjectLiteral) else print_value(default))
    return text


def print_import_name(item: ImportName) -> str:
    text = f"type {item.name}" if item.is_type_only else item.name
    if item.alias:
        text += f" as {item.alias}"
    return text


def print_import(node: ImportNode) -> str:
    """`import { A, type B, request as __request } from './x';`"""
    names = ", ".join(print_import_name(item) for item in node.names)
    return f"import {{ {names} }} from '{node.module}';"
