"""Canonical intermediate model produced by the parsers.

Model is a tagged variant: one dataclass per export kind. Consumers dispatch
on the class and must reject variants they do not know.
"""

from __future__ import annotations

import dataclasses
from typing import Any, ClassVar, Union

ResponseCode = Union[int, str]


@dataclasses.dataclass
class Type:
    """A resolved type expression and the named symbols it references."""

    type: str = "unknown"
    base: str = "unknown"
    template: str | None = None
    imports: list[str] = dataclasses.field(default_factory=list)
    is_nullable: bool = False
    refs: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class EnumValue:
    value: Any
    custom_name: str | None = None
    description: str | None = None
    custom_description: str | None = None


@dataclasses.dataclass
class Model:
    """Fields shared by every model variant."""

    export: ClassVar[str] = ""

    name: str = ""
    type: str = "unknown"
    base: str = "unknown"
    template: str | None = None
    imports: list[str] = dataclasses.field(default_factory=list)
    refs: list[str] = dataclasses.field(default_factory=list)
    is_definition: bool = False
    is_required: bool = False
    is_read_only: bool = False
    is_nullable: bool = False
    description: str | None = None
    deprecated: bool = False
    default: Any = None
    format: str | None = None
    properties: list[Model] = dataclasses.field(default_factory=list)
    enum: list[EnumValue] = dataclasses.field(default_factory=list)
    enums: list[Model] = dataclasses.field(default_factory=list)
    link: Model | None = None
    # Assigned by the client builder; None means the enum is not exported on its own.
    enum_name: str | None = None

    def copy(self, **changes: Any) -> Model:
        """Deep copy, so the result never shares children with self."""
        clone = dataclasses.replace(self)
        for field in ("imports", "refs"):
            setattr(clone, field, list(getattr(self, field)))
        clone.enum = [dataclasses.replace(e) for e in self.enum]
        clone.properties = [p.copy() for p in self.properties]
        clone.enums = [e.copy() for e in self.enums]
        clone.link = self.link.copy() if self.link is not None else None
        for key, value in changes.items():
            setattr(clone, key, value)
        return clone


@dataclasses.dataclass
class InterfaceModel(Model):
    export: ClassVar[str] = "interface"


@dataclasses.dataclass
class EnumModel(Model):
    export: ClassVar[str] = "enum"

    type: str = "string"
    base: str = "string"


@dataclasses.dataclass
class CompositionModel(Model):
    """allOf / anyOf / oneOf; `kind` holds which one."""

    kind: str = "all-of"

    @property
    def export(self) -> str:  # type: ignore[override]
        return self.kind


@dataclasses.dataclass
class ReferenceModel(Model):
    """Name handle for a referenced definition; never holds its body."""

    export: ClassVar[str] = "reference"


@dataclasses.dataclass
class ArrayModel(Model):
    export: ClassVar[str] = "array"


@dataclasses.dataclass
class DictionaryModel(Model):
    export: ClassVar[str] = "dictionary"


@dataclasses.dataclass
class GenericModel(Model):
    export: ClassVar[str] = "generic"


@dataclasses.dataclass
class ConstModel(Model):
    export: ClassVar[str] = "const"

    value: Any = None


COMPOSITION_KINDS = ("all-of", "any-of", "one-of")


@dataclasses.dataclass
class OperationParameter:
    name: str
    prop: str
    location: str
    schema: Model = dataclasses.field(default_factory=GenericModel)
    description: str | None = None
    is_required: bool = False
    is_nullable: bool = False
    deprecated: bool = False
    default: Any = None
    media_type: str | None = None

    @property
    def imports(self) -> list[str]:
        return self.schema.imports

    @property
    def refs(self) -> list[str]:
        return self.schema.refs


@dataclasses.dataclass
class OperationResponse:
    code: ResponseCode
    schema: Model = dataclasses.field(default_factory=GenericModel)
    description: str | None = None
    location: str = "response"
    name: str = ""

    @property
    def type(self) -> str:
        return self.schema.type

    @property
    def base(self) -> str:
        return self.schema.base

    @property
    def template(self) -> str | None:
        return self.schema.template

    @property
    def imports(self) -> list[str]:
        return self.schema.imports

    @property
    def is_nullable(self) -> bool:
        return self.schema.is_nullable


@dataclasses.dataclass
class Operation:
    name: str
    service: str
    method: str
    path: str
    id: str | None = None
    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    parameters: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_path: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_query: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_header: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_cookie: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_form: list[OperationParameter] = dataclasses.field(default_factory=list)
    parameters_body: OperationParameter | None = None
    results: list[OperationResponse] = dataclasses.field(default_factory=list)
    errors: list[OperationResponse] = dataclasses.field(default_factory=list)
    response_header: str | None = None
    imports: list[str] = dataclasses.field(default_factory=list)
    refs: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Service:
    name: str
    operations: list[Operation] = dataclasses.field(default_factory=list)
    imports: list[str] = dataclasses.field(default_factory=list)
    refs: list[str] = dataclasses.field(default_factory=list)


class EnumNameRegistry:
    """Enum names already exported in one client build."""

    def __init__(self) -> None:
        self._names: list[str] = []

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str) -> None:
        self._names.append(name)


@dataclasses.dataclass
class Client:
    models: list[Model] = dataclasses.field(default_factory=list)
    services: list[Service] = dataclasses.field(default_factory=list)
    enum_names: EnumNameRegistry = dataclasses.field(default_factory=EnumNameRegistry)
    server: str = ""
    version: str = ""
