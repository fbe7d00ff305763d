"""Compile a Client into per-file node trees.

Handles:
- Model variants -> type expressions (to_type)
- types file: aliases, interfaces, enums in the configured style, nested
  enums, per-operation Data/Response aliases or the fastify OperationsT map
- services file: one class per service with request-building methods
- schemas file: raw schema objects exported `as const`
- index file: re-exports of the core runtime and generated files
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .config import Config
from .loader import get_schemas
from .model_parser import INDEX_SIGNATURE
from .models import (
    ArrayModel,
    Client,
    CompositionModel,
    ConstModel,
    DictionaryModel,
    EnumModel,
    GenericModel,
    InterfaceModel,
    Model,
    Operation,
    OperationParameter,
    ReferenceModel,
    Service,
)
from .naming import (
    camel_case,
    enum_key,
    escape_comment,
    escape_name,
    sanitize_identifier,
)
from .nodes import (
    ArrayType,
    ClassNode,
    ConstNode,
    ConstObjectNode,
    ConstructorNode,
    DecoratorNode,
    EnumMember,
    EnumNode,
    ExportAllNode,
    ExportNamedNode,
    FunctionParameter,
    Identifier,
    ImportName,
    IndexedAccessType,
    InterfaceNode,
    IntersectionType,
    Literal,
    LiteralType,
    MethodNode,
    Node,
    ObjectLiteral,
    OutputFile,
    PropertySignature,
    RawType,
    ReturnCall,
    TypeAliasNode,
    TypeExpr,
    TypeLiteral,
    TypeReference,
    UnionType,
)

logger = logging.getLogger(__name__)

OnNode = Callable[[Node], None]
OnImport = Callable[[str], None]

OPERATIONS_TYPE_NAME = "OperationsT"
CONTROLLERS_TYPE_NAME = "Controllers"

_NULL = TypeReference("null")
_UNKNOWN = TypeReference("unknown")


# --- type expressions -------------------------------------------------------

def _unique(types: list[TypeExpr]) -> list[TypeExpr]:
    result: list[TypeExpr] = []
    for t in types:
        if t not in result:
            result.append(t)
    return result


def _nullable(expr: TypeExpr, is_nullable: bool) -> TypeExpr:
    """Add `null` to a type once."""
    if not is_nullable:
        return expr
    if isinstance(expr, UnionType):
        if _NULL in expr.types:
            return expr
        return UnionType(expr.types + [_NULL])
    if expr == _NULL:
        return expr
    return UnionType([expr, _NULL])


def _union(types: list[TypeExpr]) -> TypeExpr:
    types = _unique(types)
    if not types:
        return _UNKNOWN
    if len(types) == 1:
        return types[0]
    return UnionType(types)


def _named_type(model: Model) -> TypeExpr:
    if model.base == "binary":
        return UnionType([TypeReference("Blob"), TypeReference("File")])
    if model.template:
        return TypeReference(model.base, [TypeReference(model.template)])
    return TypeReference(model.type)


def _comment(model: Model) -> list[str]:
    return [
        escape_comment(model.description) if model.description else "",
        "@deprecated" if model.deprecated else "",
    ]


def _property_signature(prop: Model) -> PropertySignature:
    if prop.name == INDEX_SIGNATURE:
        return PropertySignature(
            name=INDEX_SIGNATURE,
            type=UnionType([to_type(prop), TypeReference("undefined")]),
        )
    return PropertySignature(
        name=prop.name,
        type=to_type(prop),
        is_required=prop.is_required,
        is_read_only=prop.is_read_only,
        comment=_comment(prop),
    )


def _interface_type(model: InterfaceModel) -> TypeExpr:
    if not model.properties:
        return _nullable(_UNKNOWN, model.is_nullable)
    members = [_property_signature(p) for p in model.properties]
    return _nullable(TypeLiteral(members), model.is_nullable)


def _enum_type(model: EnumModel) -> TypeExpr:
    return _nullable(_union([LiteralType(e.value) for e in model.enum]), model.is_nullable)


def _composition_type(model: CompositionModel) -> TypeExpr:
    types = _unique([to_type(p) for p in model.properties])
    if not types:
        return _nullable(_UNKNOWN, model.is_nullable)
    if len(types) == 1:
        expr = types[0]
    elif model.kind == "all-of":
        expr = IntersectionType(types)
    else:
        expr = UnionType(types)
    return _nullable(expr, model.is_nullable)


def _array_type(model: ArrayModel) -> TypeExpr:
    element = to_type(model.link) if model.link is not None else _named_type(model)
    return _nullable(ArrayType(element), model.is_nullable)


def _dictionary_type(model: DictionaryModel) -> TypeExpr:
    value = to_type(model.link) if model.link is not None else _named_type(model)
    return _nullable(TypeReference("Record", [TypeReference("string"), value]), model.is_nullable)


def _named_model_type(model: Model) -> TypeExpr:
    return _nullable(_named_type(model), model.is_nullable)


def _const_type(model: ConstModel) -> TypeExpr:
    return _nullable(LiteralType(model.value), model.is_nullable)


_TYPE_BUILDERS: dict[type, Callable[[Any], TypeExpr]] = {
    InterfaceModel: _interface_type,
    EnumModel: _enum_type,
    CompositionModel: _composition_type,
    ArrayModel: _array_type,
    DictionaryModel: _dictionary_type,
    ReferenceModel: _named_model_type,
    GenericModel: _named_model_type,
    ConstModel: _const_type,
}


def to_type(model: Model) -> TypeExpr:
    """Build the type expression for a model; unknown variants are an error."""
    builder = _TYPE_BUILDERS.get(type(model))
    if builder is None:
        raise TypeError(f"No type expression for model variant {type(model).__name__}")
    return builder(model)


# --- types file -------------------------------------------------------------

def _process_enum(model: EnumModel, on_node: OnNode, config: Config) -> None:
    name = model.enum_name
    if name is None:
        return

    members = [
        EnumMember(
            key=enum_key(e.value, e.custom_name),
            value=e.value,
            comment=[escape_comment(e.custom_description or e.description or "")],
        )
        for e in model.enum
    ]
    comment = _comment(model)

    # references use the sanitized model name; enum_name only names the runtime object
    if config.enums == "typescript":
        on_node(EnumNode(name=name, members=members, comment=comment))
        if model.name != name:
            on_node(TypeAliasNode(name=model.name, type=TypeReference(name)))
        return

    on_node(TypeAliasNode(name=model.name, type=to_type(model), comment=comment))
    if config.enums == "javascript":
        on_node(ConstObjectNode(name=name, members=members, comment=comment))


def _process_nested_enums(model: Model, on_node: OnNode, config: Config) -> None:
    for enum in model.enums:
        _process_enum(enum, on_node, config)


def _process_interface(model: InterfaceModel, on_node: OnNode, config: Config) -> None:
    if model.properties and not model.is_nullable:
        members = [_property_signature(p) for p in model.properties]
        on_node(InterfaceNode(name=model.name, members=members, comment=_comment(model)))
    else:
        _process_alias(model, on_node, config)
    _process_nested_enums(model, on_node, config)


def _process_composition(model: CompositionModel, on_node: OnNode, config: Config) -> None:
    _process_alias(model, on_node, config)
    _process_nested_enums(model, on_node, config)


def _process_alias(model: Model, on_node: OnNode, config: Config) -> None:
    on_node(TypeAliasNode(name=model.name, type=to_type(model), comment=_comment(model)))


_MODEL_PROCESSORS: dict[type, Callable[[Any, OnNode, Config], None]] = {
    InterfaceModel: _process_interface,
    CompositionModel: _process_composition,
    EnumModel: _process_enum,
}


def _process_model(model: Model, on_node: OnNode, config: Config) -> None:
    processor = _MODEL_PROCESSORS.get(type(model), _process_alias)
    processor(model, on_node, config)


def operation_data_type_name(operation: Operation) -> str:
    """`<Service><Operation>Data`"""
    return (
        f"{camel_case(operation.service, pascal=True)}"
        f"{camel_case(operation.name, pascal=True)}Data"
    )


def operation_response_type_name(operation: Operation) -> str:
    """`<Service><Operation>Response`"""
    return (
        f"{camel_case(operation.service, pascal=True)}"
        f"{camel_case(operation.name, pascal=True)}Response"
    )


def _parameter_signature(parameter: OperationParameter) -> PropertySignature:
    return PropertySignature(
        name=parameter.name,
        type=_nullable(to_type(parameter.schema), parameter.is_nullable),
        is_required=parameter.is_required,
        comment=[escape_comment(parameter.description) if parameter.description else ""],
    )


def _process_service_types(services: list[Service], on_node: OnNode) -> None:
    for service in services:
        for operation in service.operations:
            if operation.parameters:
                members = [_parameter_signature(p) for p in operation.parameters]
                on_node(TypeAliasNode(
                    name=operation_data_type_name(operation), type=TypeLiteral(members),
                ))
            if operation.results:
                on_node(TypeAliasNode(
                    name=operation_response_type_name(operation),
                    type=_union([to_type(r.schema) for r in operation.results]),
                ))


def _by_name(parameters: list[OperationParameter]) -> list[OperationParameter]:
    return sorted(parameters, key=lambda p: p.name)


def _process_operations_map(services: list[Service], on_node: OnNode) -> None:
    """The fastify route map: operation name -> Params/Querystring/Header/Body/Reply."""
    operations: list[PropertySignature] = []

    for service in services:
        for operation in service.operations:
            if not (operation.parameters or operation.results or operation.errors):
                continue

            sections: list[PropertySignature] = []
            if operation.parameters:
                for key, parameters in (
                    ("Params", _by_name(operation.parameters_path)),
                    ("Querystring", _by_name(operation.parameters_query)),
                    ("Header", _by_name(operation.parameters_header)),
                    ("Body", [operation.parameters_body] if operation.parameters_body else []),
                ):
                    if parameters:
                        members = [_parameter_signature(p) for p in parameters]
                        sections.append(PropertySignature(key, TypeLiteral(members)))

            replies: dict[str, PropertySignature] = {}
            for response in operation.results + operation.errors:
                code = str(response.code)
                replies[code] = PropertySignature(
                    name=code,
                    type=to_type(response.schema),
                    comment=[escape_comment(response.description or "")],
                )
            if replies:
                sections.append(PropertySignature("Reply", TypeLiteral(list(replies.values()))))

            operations.append(PropertySignature(operation.name, TypeLiteral(sections)))

    on_node(TypeAliasNode(name=OPERATIONS_TYPE_NAME, type=TypeLiteral(operations)))
    on_node(TypeAliasNode(
        name=CONTROLLERS_TYPE_NAME,
        type=RawType(
            f"{{ [OperationId in keyof {OPERATIONS_TYPE_NAME}]: RouteHandler<"
            f"{{ [Param in keyof {OPERATIONS_TYPE_NAME}[OperationId]]: "
            f"{OPERATIONS_TYPE_NAME}[OperationId][Param] extends {{ requestBody: infer Body; }} "
            f"? Body : {OPERATIONS_TYPE_NAME}[OperationId][Param]; }}> }}"
        ),
    ))


def process_types(client: Client, files: dict[str, OutputFile], config: Config) -> None:
    file = files.get("types")
    if file is None:
        return

    if config.client == "fastify":
        file.add_named_import(ImportName("RouteHandler", is_type_only=True), "fastify")

    for model in client.models:
        _process_model(model, file.add, config)

    if client.services:
        if config.client == "fastify":
            _process_operations_map(client.services, file.add)
        else:
            _process_service_types(client.services, file.add)


# --- services file ----------------------------------------------------------

def _operation_parameters(
    operation: Operation, on_import: OnImport, config: Config,
) -> list[FunctionParameter]:
    if not operation.parameters:
        return []

    data_type = operation_data_type_name(operation)
    on_import(data_type)

    if config.use_options:
        is_optional = all(not p.is_required for p in operation.parameters)
        return [FunctionParameter(
            name="data",
            type=TypeReference(data_type),
            default=ObjectLiteral() if is_optional else None,
        )]

    return [
        FunctionParameter(
            name=p.name,
            type=IndexedAccessType(TypeReference(data_type), p.name),
            is_required=p.is_required or p.default is not None,
            default=p.default,
        )
        for p in operation.parameters
    ]


def _operation_return_type(
    operation: Operation, on_import: OnImport, config: Config,
) -> TypeExpr:
    return_type: TypeExpr = TypeReference("void")
    if operation.results:
        response_type = operation_response_type_name(operation)
        on_import(response_type)
        return_type = TypeReference(response_type)
    if config.use_options and config.response == "response":
        return_type = TypeReference("ApiResult", [return_type])
    wrapper = "Observable" if config.client == "angular" else "CancelablePromise"
    return TypeReference(wrapper, [return_type])


def _operation_comment(operation: Operation, config: Config) -> list[str]:
    def describe(parameter: OperationParameter) -> str:
        return escape_comment(parameter.description) if parameter.description else ""

    params: list[str] = []
    if operation.parameters:
        if config.use_options:
            params = ["@param data The data for the request."]
            params.extend(f"@param data.{p.name} {describe(p)}" for p in operation.parameters)
        else:
            params = [f"@param {p.name} {describe(p)}" for p in operation.parameters]

    return [
        "@deprecated" if operation.deprecated else "",
        escape_comment(operation.summary) if operation.summary else "",
        escape_comment(operation.description) if operation.description else "",
        *params,
        *(
            f"@returns {r.type} {escape_comment(r.description) if r.description else ''}"
            for r in operation.results
        ),
        "@throws ApiError",
    ]


def _parameters_object(parameters: list[OperationParameter], config: Config) -> ObjectLiteral:
    entries = []
    for parameter in parameters:
        value = f"data.{parameter.name}" if config.use_options else parameter.name
        entries.append((escape_name(parameter.prop), Identifier(value)))
    return ObjectLiteral(entries)


def _request_options(operation: Operation, config: Config) -> ObjectLiteral:
    options = ObjectLiteral([
        ("method", Literal(operation.method)),
        ("url", Literal(operation.path)),
    ])
    for key, parameters in (
        ("path", operation.parameters_path),
        ("cookies", operation.parameters_cookie),
        ("headers", operation.parameters_header),
        ("query", operation.parameters_query),
        ("formData", operation.parameters_form),
    ):
        if parameters:
            options.entries.append((key, _parameters_object(parameters, config)))

    body = operation.parameters_body
    if body is not None:
        value = Identifier(f"data.{body.name}" if config.use_options else body.name)
        options.entries.append(("formData" if body.location == "formData" else "body", value))
        if body.media_type:
            options.entries.append(("mediaType", Literal(body.media_type)))

    if operation.response_header:
        options.entries.append(("responseHeader", Literal(operation.response_header)))

    if operation.errors:
        options.entries.append(("errors", ObjectLiteral([
            (str(e.code), Literal(e.description or ""))
            for e in operation.errors
        ])))
    return options


def _operation_statements(operation: Operation, config: Config) -> list[ReturnCall]:
    args: list[Any] = [Identifier("OpenAPI")]
    if config.client == "angular":
        args.append(Identifier("this.http"))
    args.append(_request_options(operation, config))
    return [ReturnCall("__request", args)]


def service_class_name(service: Service, config: Config) -> str:
    return config.service_name.replace("{{name}}", service.name)


def process_service(service: Service, on_import: OnImport, config: Config) -> ClassNode:
    """Build the class for one service."""
    is_angular = config.client == "angular"
    members = [
        MethodNode(
            name=operation.name,
            parameters=_operation_parameters(operation, on_import, config),
            return_type=_operation_return_type(operation, on_import, config),
            statements=_operation_statements(operation, config),
            comment=_operation_comment(operation, config),
            is_static=not is_angular,
        )
        for operation in service.operations
    ]

    constructor = None
    decorator = None
    if is_angular:
        constructor = ConstructorNode([FunctionParameter(
            name="http", type=TypeReference("HttpClient"),
            access_level="public", is_read_only=True,
        )])
        decorator = DecoratorNode("Injectable", [ObjectLiteral([("providedIn", Literal("root"))])])

    return ClassNode(
        name=service_class_name(service, config),
        members=members,
        constructor=constructor,
        decorator=decorator,
    )


def process_services(client: Client, files: dict[str, OutputFile], config: Config) -> None:
    file = files.get("services")
    if file is None:
        return

    imports: list[str] = []
    for service in client.services:
        file.add(process_service(service, imports.append, config))

    if config.client == "angular":
        file.add_named_import("Injectable", "@angular/core")
        file.add_named_import("HttpClient", "@angular/common/http")
        file.add_named_import(ImportName("Observable", is_type_only=True), "rxjs")
    else:
        file.add_named_import(
            ImportName("CancelablePromise", is_type_only=True), "./core/CancelablePromise",
        )

    if config.response == "response":
        file.add_named_import(ImportName("ApiResult", is_type_only=True), "./core/ApiResult")

    file.add_named_import("OpenAPI", "./core/OpenAPI")
    file.add_named_import(ImportName("request", alias="__request"), "./core/request")

    types = files.get("types")
    if types is not None and not types.is_empty():
        names = [ImportName(name, is_type_only=True) for name in dict.fromkeys(imports)]
        file.add_named_import(names, f"./{types.get_name(False)}")


# --- schemas and index ------------------------------------------------------

def process_schemas(document: dict[str, Any], files: dict[str, OutputFile]) -> None:
    file = files.get("schemas")
    if file is None:
        return
    for name, schema in get_schemas(document).items():
        file.add(ConstNode(name=f"${sanitize_identifier(name)}", value=schema))


def process_index(files: dict[str, OutputFile], config: Config) -> None:
    index = files.get("index")
    if index is None:
        return

    if config.export_core:
        index.add(ExportNamedNode("./core/ApiError", [ImportName("ApiError")]))
        if config.response == "response":
            index.add(ExportNamedNode("./core/ApiResult", [ImportName("ApiResult", is_type_only=True)]))
        if config.client != "angular":
            index.add(ExportNamedNode(
                "./core/CancelablePromise",
                [ImportName("CancelablePromise"), ImportName("CancelError")],
            ))
        index.add(ExportNamedNode(
            "./core/OpenAPI",
            [ImportName("OpenAPI"), ImportName("OpenAPIConfig", is_type_only=True)],
        ))

    for key, file in files.items():
        if key != "index" and not file.is_empty():
            index.add(ExportAllNode(f"./{file.get_name(False)}"))


def compile_client(
    document: dict[str, Any], client: Client, config: Config,
) -> dict[str, OutputFile]:
    """Build every output file for one client, keyed by role."""
    files: dict[str, OutputFile] = {}
    if config.export_schemas:
        files["schemas"] = OutputFile("schemas.gen.ts")
    if config.export_types:
        files["types"] = OutputFile("types.gen.ts")
    if config.exports_services:
        files["services"] = OutputFile("services.gen.ts")
    files["index"] = OutputFile("index.ts")

    process_schemas(document, files)
    process_types(client, files, config)
    process_services(client, files, config)
    process_index(files, config)

    for file in files.values():
        logger.debug("Compiled %s: %d nodes", file.name, len(file.nodes))
    return files
