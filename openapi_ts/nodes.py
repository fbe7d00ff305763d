"""Abstract TypeScript syntax nodes produced by the emitter.

Nothing here knows how to print itself; codegen renders nodes through the
jinja2 templates and the printer filters. Each declaration node carries a
`kind` the templates dispatch on.
"""

from __future__ import annotations

import dataclasses
from typing import Any, ClassVar, Iterable, Union


# --- type expressions -------------------------------------------------------

@dataclasses.dataclass
class TypeReference:
    """A named type, optionally with type arguments: `Link<string>`."""

    name: str
    args: list[TypeExpr] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ArrayType:
    element: TypeExpr


@dataclasses.dataclass
class UnionType:
    types: list[TypeExpr]


@dataclasses.dataclass
class IntersectionType:
    types: list[TypeExpr]


@dataclasses.dataclass
class LiteralType:
    value: Any


@dataclasses.dataclass
class IndexedAccessType:
    """`Object['key']`"""

    object: TypeExpr
    index: str


@dataclasses.dataclass
class PropertySignature:
    name: str
    type: TypeExpr
    is_required: bool = True
    is_read_only: bool = False
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class TypeLiteral:
    members: list[PropertySignature]


@dataclasses.dataclass
class RawType:
    """Type text passed through verbatim."""

    text: str


TypeExpr = Union[
    TypeReference, ArrayType, UnionType, IntersectionType, LiteralType,
    IndexedAccessType, TypeLiteral, RawType,
]


# --- value expressions ------------------------------------------------------

@dataclasses.dataclass
class Identifier:
    name: str


@dataclasses.dataclass
class Literal:
    value: Any


@dataclasses.dataclass
class ObjectLiteral:
    """`{ key: value }`; an entry whose value is the same-named Identifier prints shorthand."""

    entries: list[tuple[str, Expression]] = dataclasses.field(default_factory=list)


Expression = Union[Identifier, Literal, ObjectLiteral]


# --- declarations -----------------------------------------------------------

@dataclasses.dataclass
class TypeAliasNode:
    kind: ClassVar[str] = "alias"

    name: str
    type: TypeExpr
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class InterfaceNode:
    kind: ClassVar[str] = "interface"

    name: str
    members: list[PropertySignature]
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class EnumMember:
    key: str
    value: Any
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class EnumNode:
    kind: ClassVar[str] = "enum"

    name: str
    members: list[EnumMember]
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ConstObjectNode:
    """Frozen object map: `export const Name = { KEY: 'value' } as const;`"""

    kind: ClassVar[str] = "const_object"

    name: str
    members: list[EnumMember]
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ConstNode:
    """`export const $Name = <json value> as const;`"""

    kind: ClassVar[str] = "const"

    name: str
    value: Any


@dataclasses.dataclass
class FunctionParameter:
    name: str
    type: TypeExpr | None = None
    is_required: bool = True
    default: Any = None
    access_level: str | None = None
    is_read_only: bool = False


@dataclasses.dataclass
class ReturnCall:
    """`return callee(args...);`"""

    callee: str
    args: list[Expression]


@dataclasses.dataclass
class MethodNode:
    name: str
    parameters: list[FunctionParameter]
    return_type: TypeExpr
    statements: list[ReturnCall]
    comment: list[str] = dataclasses.field(default_factory=list)
    is_static: bool = False
    access_level: str = "public"


@dataclasses.dataclass
class ConstructorNode:
    parameters: list[FunctionParameter]


@dataclasses.dataclass
class DecoratorNode:
    name: str
    args: list[Expression] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ClassNode:
    kind: ClassVar[str] = "class"

    name: str
    members: list[MethodNode]
    constructor: ConstructorNode | None = None
    decorator: DecoratorNode | None = None
    comment: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ImportName:
    name: str
    alias: str | None = None
    is_type_only: bool = False


@dataclasses.dataclass
class ImportNode:
    module: str
    names: list[ImportName]


@dataclasses.dataclass
class ExportAllNode:
    kind: ClassVar[str] = "export_all"

    module: str


@dataclasses.dataclass
class ExportNamedNode:
    kind: ClassVar[str] = "export_named"

    module: str
    names: list[ImportName]


Node = Union[
    TypeAliasNode, InterfaceNode, EnumNode, ConstObjectNode, ConstNode,
    ClassNode, ExportAllNode, ExportNamedNode,
]


class OutputFile:
    """Ordered declarations for one generated file plus its import manifest."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.nodes: list[Node] = []
        self._imports: dict[str, list[ImportName]] = {}

    def __repr__(self) -> str:
        return f"OutputFile({self.name!r}, nodes={len(self.nodes)})"

    def add(self, node: Node) -> None:
        self.nodes.append(node)

    def add_named_import(
        self, names: str | ImportName | Iterable[str | ImportName], module: str,
    ) -> None:
        """Record imports from `module`; a name already imported from it is ignored."""
        if isinstance(names, (str, ImportName)):
            names = [names]
        existing = self._imports.setdefault(module, [])
        for name in names:
            if isinstance(name, str):
                name = ImportName(name)
            if all(i.name != name.name for i in existing):
                existing.append(name)

    @property
    def imports(self) -> list[ImportNode]:
        return [ImportNode(module, names) for module, names in self._imports.items() if names]

    def is_empty(self) -> bool:
        return not self.nodes

    def get_name(self, with_extension: bool = True) -> str:
        if with_extension:
            return self.name
        return self.name.rsplit(".ts", 1)[0]
