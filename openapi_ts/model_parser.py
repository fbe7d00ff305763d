"""Resolve OpenAPI schema objects into canonical Model variants.

Handles:
- $ref handles (recorded by name, never inlined, so cycles are harmless)
- enum extraction, including x-enum-varnames / x-enum-descriptions
- allOf/anyOf/oneOf composition, null branches and nested enums
- object properties with required/readOnly/nullable flags
- additionalProperties dictionaries and index members
- array items, const literals and primitive aliases
"""

from __future__ import annotations

import logging
from typing import Any

from .loader import get_component_parameters, get_ref, get_schemas
from .models import (
    ArrayModel,
    CompositionModel,
    ConstModel,
    DictionaryModel,
    EnumModel,
    EnumValue,
    GenericModel,
    InterfaceModel,
    Model,
    ReferenceModel,
)
from .naming import camel_case, enum_value
from .type_parser import get_type

logger = logging.getLogger(__name__)

_COMPOSITIONS = (("allOf", "all-of"), ("anyOf", "any-of"), ("oneOf", "one-of"))

INDEX_SIGNATURE = "[key: string]"


def is_nullable(definition: dict[str, Any]) -> bool:
    """True for `nullable`, `x-nullable` (2.x) or a type list containing 'null'."""
    if definition.get("nullable") is True or definition.get("x-nullable") is True:
        return True
    schema_type = definition.get("type")
    return isinstance(schema_type, list) and "null" in schema_type


def _is_null_schema(definition: dict[str, Any]) -> bool:
    return "$ref" not in definition and definition.get("type") in ("null", ["null"])


def _is_empty(model: Model, definition: dict[str, Any]) -> bool:
    """True for branches like `{}` or a bare `{type: object}` that add no type information."""
    if isinstance(model, GenericModel):
        return model.type == "unknown"
    if isinstance(model, DictionaryModel):
        return not definition.get("additionalProperties")
    return False


def get_enums(definition: dict[str, Any]) -> list[EnumValue]:
    """Extract enum values with their custom names and descriptions."""
    values = definition.get("enum")
    if not isinstance(values, list):
        return []

    names = definition.get("x-enum-varnames") or definition.get("x-enumNames") or []
    descriptions = definition.get("x-enum-descriptions") or []

    unique: list[Any] = []
    for value in values:
        if value not in unique:
            unique.append(value)

    enums = []
    for index, value in enumerate(unique):
        if not isinstance(value, (str, int, float, bool)):
            continue
        enums.append(EnumValue(
            value=value,
            custom_name=names[index] if index < len(names) else None,
            custom_description=descriptions[index] if index < len(descriptions) else None,
        ))
    return enums


def _reference(ref: str, **fields: Any) -> ReferenceModel:
    ref_type = get_type(ref)
    return ReferenceModel(
        type=ref_type.type,
        base=ref_type.base,
        template=ref_type.template,
        imports=list(ref_type.imports),
        refs=list(ref_type.refs),
        **fields,
    )


def get_model(
    document: dict[str, Any],
    definition: dict[str, Any],
    is_definition: bool = False,
    name: str = "",
    parent_definition: dict[str, Any] | None = None,
    default: Any = None,
) -> Model:
    """Resolve one schema object into a Model."""
    common: dict[str, Any] = {
        "name": name,
        "is_definition": is_definition,
        "description": definition.get("description") or None,
        "deprecated": definition.get("deprecated") is True,
        "is_read_only": definition.get("readOnly") is True,
        "is_nullable": is_nullable(definition),
        "format": definition.get("format"),
        "default": definition.get("default", default),
    }

    if "$ref" in definition:
        return _reference(definition["$ref"], **common)

    if "enum" in definition and definition.get("type") != "boolean":
        values = get_enums(definition)
        if values:
            if None in definition["enum"]:
                common["is_nullable"] = True
            return EnumModel(enum=values, **common)

    if definition.get("type") == "array" and definition.get("items"):
        return _get_array_model(document, definition, common)

    for keyword, kind in _COMPOSITIONS:
        if definition.get(keyword):
            return _get_composition_model(document, definition, definition[keyword], kind, common)

    if (
        definition.get("type") == "object"
        or "properties" in definition
        or "additionalProperties" in definition
    ):
        if definition.get("properties"):
            return _get_interface_model(document, definition, common)
        return _get_dictionary_model(document, definition, common)

    if "const" in definition:
        literal = enum_value(definition["const"])
        return ConstModel(value=definition["const"], type=literal, base=literal, **common)

    if "type" in definition:
        definition_type = get_type(definition["type"], definition.get("format"))
        common["is_nullable"] = common["is_nullable"] or definition_type.is_nullable
        return GenericModel(
            type=definition_type.type,
            base=definition_type.base,
            template=definition_type.template,
            imports=list(definition_type.imports),
            refs=list(definition_type.refs),
            **common,
        )

    return GenericModel(**common)


def _get_array_model(
    document: dict[str, Any], definition: dict[str, Any], common: dict[str, Any],
) -> ArrayModel:
    items = definition["items"]
    if "$ref" in items:
        item_type = get_type(items["$ref"])
        return ArrayModel(
            type=item_type.type,
            base=item_type.base,
            template=item_type.template,
            imports=list(item_type.imports),
            refs=list(item_type.refs),
            **common,
        )

    link = get_model(document, items, parent_definition=definition)
    return ArrayModel(
        type=link.type,
        base=link.base,
        template=link.template,
        imports=list(link.imports),
        refs=list(link.refs),
        link=link,
        **common,
    )


def _get_composition_model(
    document: dict[str, Any],
    definition: dict[str, Any],
    branches: list[dict[str, Any]],
    kind: str,
    common: dict[str, Any],
) -> CompositionModel:
    model = CompositionModel(kind=kind, **common)

    inline_enums = 0
    for branch in branches:
        if _is_null_schema(branch):
            model.is_nullable = True
            continue
        child = get_model(document, branch, parent_definition=definition)
        if _is_empty(child, branch):
            continue
        model.imports.extend(child.imports)
        model.refs.extend(child.refs)
        model.enums.extend(e.copy() for e in child.enums)
        if isinstance(child, EnumModel) and model.name:
            # MixedEnum, MixedEnum2, ...
            inline_enums += 1
            suffix = "" if inline_enums == 1 else str(inline_enums)
            model.enums.append(child.copy(name=f"{model.name}Enum{suffix}"))
        model.properties.append(child)

    if definition.get("properties"):
        shared = InterfaceModel(name="properties", is_required=True)
        _add_properties(shared, get_model_properties(document, definition), model.name)
        model.imports.extend(shared.imports)
        model.refs.extend(shared.refs)
        model.enums.extend(e.copy() for e in shared.enums)
        if kind == "all-of":
            model.properties.append(shared)
        else:
            # each alternative must also carry the shared properties
            model.properties = [
                CompositionModel(
                    kind="all-of",
                    is_required=True,
                    properties=[alternative, shared.copy()],
                    imports=alternative.imports + shared.imports,
                    refs=alternative.refs + shared.refs,
                )
                for alternative in model.properties
            ]
    return model


def _add_properties(model: Model, properties: list[Model], parent_name: str) -> None:
    """Attach property models to `model`, lifting nested enums to its `enums`."""
    for prop in properties:
        model.refs.extend(prop.refs)
        model.imports.extend(prop.imports)
        model.enums.extend(e.copy() for e in prop.enums)
        if isinstance(prop, EnumModel) and parent_name:
            nested_name = f"{parent_name}{camel_case(prop.name, pascal=True)}"
            model.enums.append(prop.copy(name=nested_name))
        model.properties.append(prop)


def _get_interface_model(
    document: dict[str, Any], definition: dict[str, Any], common: dict[str, Any],
) -> InterfaceModel:
    model = InterfaceModel(**common)
    _add_properties(model, get_model_properties(document, definition), model.name)

    additional = definition.get("additionalProperties")
    if additional:
        index = _get_dictionary_model(document, definition, {}).link
        index.name = INDEX_SIGNATURE
        model.imports.extend(index.imports)
        model.refs.extend(index.refs)
        model.properties.append(index)
    return model


def _get_dictionary_model(
    document: dict[str, Any], definition: dict[str, Any], common: dict[str, Any],
) -> DictionaryModel:
    additional = definition.get("additionalProperties")
    if isinstance(additional, dict) and "$ref" in additional:
        link: Model = _reference(additional["$ref"])
    elif isinstance(additional, dict) and additional:
        link = get_model(document, additional, parent_definition=definition)
    else:
        link = GenericModel()
    return DictionaryModel(
        type=link.type,
        base=link.base,
        template=link.template,
        imports=list(link.imports),
        refs=list(link.refs),
        link=link,
        **common,
    )


def get_model_properties(
    document: dict[str, Any], definition: dict[str, Any],
) -> list[Model]:
    """Resolve every property of an object schema, in declaration order."""
    required = set(definition.get("required") or [])
    models: list[Model] = []

    for prop_name, prop in (definition.get("properties") or {}).items():
        if "$ref" in prop:
            model: Model = _reference(prop["$ref"])
        else:
            model = get_model(document, prop, name=prop_name, parent_definition=definition)
        model.name = prop_name
        model.is_required = prop_name in required
        model.is_read_only = prop.get("readOnly") is True
        model.is_nullable = model.is_nullable or is_nullable(prop)
        model.description = prop.get("description") or None
        model.deprecated = prop.get("deprecated") is True
        models.append(model)

    return models


def get_models(document: dict[str, Any]) -> list[Model]:
    """Resolve every top-level schema in declaration order."""
    models: list[Model] = []

    for name, definition in get_schemas(document).items():
        # get_type escapes reserved words, as it does for every $ref to this schema
        definition_type = get_type(name)
        models.append(get_model(document, definition, is_definition=True, name=definition_type.base))

    for name, parameter in get_component_parameters(document).items():
        parameter = get_ref(document, parameter)
        schema = parameter.get("schema")
        if not schema:
            continue
        definition_type = get_type(f"Parameter{camel_case(name, pascal=True)}")
        model = get_model(document, schema, is_definition=True, name=definition_type.base)
        model.description = parameter.get("description") or model.description
        models.append(model)

    logger.debug("Resolved %d models", len(models))
    return models
