"""Turn arbitrary schema strings into safe TypeScript names.

Everything here is a pure string transform except enum_name, which records
the names it hands out in a registry passed in by the caller:

  sanitize_identifier("some_special-schema") -> "some_special_schema"
  enum_key("fooBar")                         -> "FOO_BAR"
  enum_key(404)                              -> "'_404'"
  camel_case("get-api-users-by-id")          -> "getApiUsersById"
  escape_reserved("delete")                  -> "delete_"
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Protocol

_PLACEHOLDER = "empty_string"

RESERVED_WORDS = frozenset({
    "arguments", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
    "extends", "false", "finally", "for", "function", "if", "implements",
    "import", "in", "instanceof", "interface", "let", "new", "null",
    "package", "private", "protected", "public", "return", "static", "super",
    "switch", "this", "throw", "true", "try", "typeof", "var", "void",
    "while", "with", "yield",
})

_ZERO_WIDTH = ("\u200c", "\u200d")

_SEPARATORS = re.compile(r"[_.\-\s]+")
_SIMPLE_NAME = re.compile(r"^[a-zA-Z_$][\w$]*$", re.ASCII)


class NameRegistry(Protocol):
    def __contains__(self, name: object) -> bool: ...

    def add(self, name: str) -> None: ...


def _is_identifier_start(ch: str) -> bool:
    return ch in "$_" or ch.isidentifier()


def _is_identifier_part(ch: str) -> bool:
    return ch == "$" or ch in _ZERO_WIDTH or f"a{ch}".isidentifier()


def _replace_illegal(value: str, replacement: str) -> str:
    return "".join(ch if _is_identifier_part(ch) else replacement for ch in value)


def _split_case_transitions(value: str) -> str:
    """Insert '_' wherever a lowercase letter is followed by an uppercase one."""
    out = []
    for i, ch in enumerate(value):
        if i and ch.isupper() and value[i - 1].islower():
            out.append("_")
        out.append(ch)
    return "".join(out)


def sanitize_identifier(raw: str) -> str:
    """Make `raw` usable as a TypeScript identifier."""
    name = _replace_illegal(raw.strip(), "_")
    if name and not _is_identifier_start(name[0]):
        name = f"_{name}"
    name = re.sub(r"_{2,}", "_", name)
    return name or _PLACEHOLDER


def sanitize_namespace_identifier(name: str) -> str:
    """Strip leading junk and turn separators into '-' so camel_case can join them."""
    i = 0
    while i < len(name) and not (name[i] != "_" and name[i].isidentifier()):
        i += 1
    name = _replace_illegal(name[i:], "-")
    return name.replace("$", "-")


def sanitize_operation_parameter_name(name: str) -> str:
    """Replace invalid characters, e.g. 'filter.someProperty' -> 'filter-someProperty'."""
    return sanitize_namespace_identifier(name.replace("[]", "Array"))


def sanitize_service_name(name: str) -> str:
    return sanitize_namespace_identifier(name)


def camel_case(value: str, pascal: bool = False) -> str:
    """Join words split on separators and case changes into camelCase."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value.strip())
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1)
    words = [w.lower() for w in _SEPARATORS.split(s2) if w]
    if not words:
        return ""
    head = words[0].capitalize() if pascal else words[0]
    return head + "".join(w.capitalize() for w in words[1:])


def escape_reserved(name: str) -> str:
    """Suffix TypeScript reserved words so they can be used as identifiers."""
    if name in RESERVED_WORDS:
        return f"{name}_"
    return name


def escape_name(value: str) -> str:
    """Quote property keys that are neither plain identifiers nor integers."""
    if _SIMPLE_NAME.match(value) or value.isdigit():
        return value
    return quote_string(value)


def unescape_name(value: str) -> str:
    if len(value) > 1 and value.startswith("'") and value.endswith("'"):
        return value[1:-1]
    return value


def escape_comment(value: str) -> str:
    return value.replace("*/", "*").replace("/*", "*").replace("\r\n", "\n")


def escape_description(value: str) -> str:
    """Make a description safe inside a template literal."""
    return value.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def enum_key(value: Any = None, custom_name: str | None = None) -> str:
    """Build an uppercase enum member key for `value`."""
    if custom_name:
        return custom_name
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"'_{value}'"

    key = ""
    if isinstance(value, bool):
        value = str(value).lower()
    if isinstance(value, str):
        key = _replace_illegal(value, "_")
        if key and not _is_identifier_start(key[0]):
            key = f"_{key}"
        key = _split_case_transitions(key)
    key = key.strip()
    if not key:
        key = _PLACEHOLDER
    return key.upper()


def enum_name(registry: NameRegistry, name: str | None) -> str | None:
    """Return an exportable enum name, or None if `registry` already holds it.

    Enum names cannot contain hyphens, and may arrive already quoted.
    """
    if not name:
        return None
    escaped = re.sub(
        r"[-_]([a-z])",
        lambda m: m.group(1).upper(),
        unescape_name(name),
        flags=re.IGNORECASE,
    )
    result = escaped[:1].upper() + escaped[1:]
    if result in registry:
        return None
    registry.add(result)
    return result


_STRING_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def quote_string(value: str, quote: str = "'") -> str:
    """Wrap `value` in `quote` as a single-line string literal."""
    escapes = {**_STRING_ESCAPES, quote: f"\\{quote}"}
    return quote + "".join(escapes.get(c, c) for c in value) + quote


def enum_value(value: Any, union: bool = False) -> str:
    """Render an enum value as a TypeScript literal."""
    if isinstance(value, str):
        if "'" in value and union:
            return quote_string(value, '"')
        return quote_string(value)
    if isinstance(value, bool):
        return str(value).lower()
    if value is None:
        return "null"
    return str(value)


def enum_union_type(values: Iterable[Any]) -> str:
    """Join enum values into a deduplicated literal union, e.g. "'a' | 'b'"."""
    literals = [enum_value(v, union=True) for v in values]
    return " | ".join(dict.fromkeys(literals))
