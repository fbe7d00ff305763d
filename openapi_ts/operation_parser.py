"""Resolve path + method entries into canonical Operations.

Handles:
- Operation naming from operationId or from method + path
- Path, query, header, cookie and form parameters (2.x and 3.x shapes)
- Path-level parameters, overridden by operation-level ones
- 2.x `in: body` parameters and 3.x requestBody content
- Response code parsing, success/error classification and dedup
- Header-only responses
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any

from .config import Config
from .loader import get_ref
from .models import (
    ArrayModel,
    EnumModel,
    GenericModel,
    Model,
    Operation,
    OperationParameter,
    OperationResponse,
    ResponseCode,
)
from .model_parser import get_enums, get_model, is_nullable
from .naming import (
    camel_case,
    escape_reserved,
    sanitize_namespace_identifier,
    sanitize_operation_parameter_name,
    sanitize_service_name,
)
from .type_parser import get_type

# Preferred media types, in order; anything else is only used as a fallback.
BASIC_MEDIA_TYPES = (
    "application/json-patch+json",
    "application/json",
    "application/x-www-form-urlencoded",
    "text/json",
    "text/plain",
    "multipart/form-data",
    "multipart/mixed",
    "multipart/related",
    "multipart/batch",
)

_FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_LOCATIONS = ("path", "query", "header", "cookie", "formData")

_RESPONSE_CODE = re.compile(r"^\s*([+-]?\d+)")


def get_service_name(tag: str) -> str:
    """Convert a tag into a PascalCase service name."""
    return camel_case(sanitize_service_name(tag).strip(), pascal=True)


def get_operation_name(
    url: str, method: str, config: Config, operation_id: str | None = None,
) -> str:
    """Use the operationId when configured, else derive a name from the URL.

    GET /api/{api-version}/users/{id} -> getApiUsersById
    """
    if config.operation_id and operation_id:
        return camel_case(sanitize_namespace_identifier(operation_id).strip())

    without_placeholders = re.sub(r"[^/]*?\{api-version\}.*?/", "", url)
    without_placeholders = re.sub(r"\{(.*?)\}", r"by-\1", without_placeholders)
    without_placeholders = without_placeholders.replace("/", "-")
    return camel_case(f"{method}-{without_placeholders}")


def get_operation_parameter_name(value: str) -> str:
    """Clean a parameter name, e.g. 'filter.someProperty' -> 'filterSomeProperty'."""
    clean = sanitize_operation_parameter_name(value).strip()
    return escape_reserved(camel_case(clean))


def get_operation_response_code(value: str | int) -> ResponseCode | None:
    """Parse a response key into 'default', an int, or None if unusable."""
    if value == "default":
        return "default"
    match = _RESPONSE_CODE.match(str(value))
    if match:
        return abs(int(match.group(1)))
    return None


def get_operation_response_header(results: list[OperationResponse]) -> str | None:
    """Name of the first response delivered as a header, if any."""
    for result in results:
        if result.location == "header":
            return result.name
    return None


def get_operation_errors(responses: list[OperationResponse]) -> list[OperationResponse]:
    """Keep responses with a numeric code >= 300 and a description."""
    return [
        r for r in responses
        if isinstance(r.code, int) and r.code >= 300 and r.description
    ]


def _are_equal(a: Model, b: Model) -> bool:
    equal = a.type == b.type and a.base == b.base and a.template == b.template
    if equal and a.link is not None and b.link is not None:
        return _are_equal(a.link, b.link)
    return equal


def get_operation_results(responses: list[OperationResponse]) -> list[OperationResponse]:
    """Keep 'default' and 2xx responses, dropping later structural duplicates."""
    results: list[OperationResponse] = []
    for response in responses:
        code = response.code
        if not (code == "default" or (isinstance(code, int) and 200 <= code < 300)):
            continue
        if any(_are_equal(r.schema, response.schema) for r in results):
            continue
        results.append(response)
    return results


def get_content(
    document: dict[str, Any], content: dict[str, Any],
) -> tuple[str, dict[str, Any]] | None:
    """Pick the media type and schema to generate from a 3.x content map."""
    with_schema = [m for m in content if (content[m] or {}).get("schema")]
    for media_type in with_schema:
        if media_type.split(";")[0].strip() in BASIC_MEDIA_TYPES:
            return media_type, content[media_type]["schema"]
    if with_schema:
        return with_schema[0], content[with_schema[0]]["schema"]
    return None


def get_operation_parameter(
    document: dict[str, Any], parameter: dict[str, Any],
) -> OperationParameter:
    """Resolve one parameter object (already dereferenced)."""
    result = OperationParameter(
        name=get_operation_parameter_name(parameter.get("name", "")),
        prop=parameter.get("name", ""),
        location=parameter.get("in", "query"),
        description=parameter.get("description") or None,
        is_required=parameter.get("required") is True,
        is_nullable=is_nullable(parameter),
        deprecated=parameter.get("deprecated") is True,
    )

    schema = parameter.get("schema")
    if schema:
        if schema.get("$ref", "").startswith(("#/components/parameters/", "#/parameters/")):
            schema = get_ref(document, schema)
        result.schema = get_model(document, schema)
        result.default = schema.get("default")
    elif "enum" in parameter and get_enums(parameter):
        # 2.x: the parameter itself carries the schema keywords
        result.schema = EnumModel(enum=get_enums(parameter))
        result.default = parameter.get("default")
    elif parameter.get("type") == "array" and parameter.get("items"):
        items = parameter["items"]
        item_type = get_type(items.get("type"), items.get("format"))
        result.schema = ArrayModel(
            type=item_type.type,
            base=item_type.base,
            template=item_type.template,
            imports=list(item_type.imports),
        )
        result.default = parameter.get("default")
    elif parameter.get("type"):
        definition_type = get_type(parameter["type"], parameter.get("format"))
        result.schema = GenericModel(
            type=definition_type.type,
            base=definition_type.base,
            template=definition_type.template,
            imports=list(definition_type.imports),
            is_nullable=definition_type.is_nullable,
        )
        result.default = parameter.get("default")

    result.is_nullable = result.is_nullable or result.schema.is_nullable
    return result


def get_operation_parameters(
    document: dict[str, Any], parameters: list[dict[str, Any]],
) -> list[OperationParameter]:
    """Resolve a parameter list, skipping `api-version` and unknown locations."""
    resolved = []
    for parameter_or_ref in parameters:
        parameter = get_ref(document, parameter_or_ref)
        # api-version is configured once on the client, not passed per call
        if parameter.get("name") == "api-version":
            continue
        if parameter.get("in") not in _LOCATIONS + ("body",):
            continue
        resolved.append(get_operation_parameter(document, parameter))
    return resolved


def _merge_parameters(
    path_params: list[OperationParameter], op_params: list[OperationParameter],
) -> list[OperationParameter]:
    """Operation-level parameters replace path-level ones with the same name and location."""
    overridden = {(p.prop, p.location) for p in op_params}
    kept = [
        dataclasses.replace(p, schema=p.schema.copy())
        for p in path_params
        if (p.prop, p.location) not in overridden
    ]
    return kept + op_params


def get_operation_request_body(
    document: dict[str, Any], body: dict[str, Any],
) -> OperationParameter:
    """Resolve a 3.x requestBody into the body parameter."""
    name = body.get("x-body-name", "requestBody")
    result = OperationParameter(
        name=name,
        prop=name,
        location="body",
        description=body.get("description") or None,
        is_required=body.get("required") is True,
        is_nullable=body.get("nullable") is True,
    )

    content = get_content(document, body.get("content") or {})
    if content:
        media_type, schema = content
        result.media_type = media_type
        if media_type.split(";")[0].strip() in _FORM_MEDIA_TYPES:
            result.location = "formData"
            result.name = "formData"
            result.prop = "formData"
        result.schema = get_model(document, schema)
        result.is_nullable = result.is_nullable or result.schema.is_nullable
    return result


def get_operation_response(
    document: dict[str, Any], response: dict[str, Any], code: ResponseCode,
) -> OperationResponse:
    """Resolve one response object for the given status code."""
    empty = "void" if code == 204 else "unknown"
    result = OperationResponse(
        code=code,
        description=response.get("description") or None,
        schema=GenericModel(type=empty, base=empty),
    )

    schema = None
    if "content" in response:
        content = get_content(document, response.get("content") or {})
        if content:
            schema = content[1]
    elif response.get("schema"):
        schema = response["schema"]

    if schema:
        if schema.get("$ref", "").startswith(("#/components/responses/", "#/responses/")):
            schema = get_ref(document, schema)
        result.schema = get_model(document, schema)
        return result

    # fetch and XHR only expose headers as strings
    for header in response.get("headers") or {}:
        result.location = "header"
        result.name = header
        result.schema = GenericModel(type="string", base="string")
        return result

    return result


def _response_sort_key(response: OperationResponse) -> tuple[int, int]:
    if response.code == "default":
        return (1, 0)
    return (0, response.code)  # type: ignore[return-value]


def get_operation_responses(
    document: dict[str, Any], responses: dict[str, Any],
) -> list[OperationResponse]:
    """Resolve all responses, success codes before error codes, 'default' last."""
    resolved = []
    for code_key, response_or_ref in responses.items():
        code = get_operation_response_code(code_key)
        if code is None:
            continue
        response = get_ref(document, response_or_ref)
        resolved.append(get_operation_response(document, response, code))
    return sorted(resolved, key=_response_sort_key)


def _needs_value(parameter: OperationParameter) -> bool:
    return parameter.is_required and parameter.default is None


def _consumed_media_type(document: dict[str, Any], operation: dict[str, Any]) -> str | None:
    consumes = operation.get("consumes") or document.get("consumes") or []
    return consumes[0] if consumes else None


def get_operation(
    document: dict[str, Any],
    url: str,
    method: str,
    tag: str,
    operation: dict[str, Any],
    path_params: list[OperationParameter],
    config: Config,
) -> Operation:
    """Build the Operation for one path + method pair under one tag."""
    result = Operation(
        name=get_operation_name(url, method, config, operation.get("operationId")),
        service=get_service_name(tag),
        method=method.upper(),
        path=url,
        id=operation.get("operationId"),
        summary=operation.get("summary") or None,
        description=operation.get("description") or None,
        deprecated=operation.get("deprecated") is True,
    )

    parameters = _merge_parameters(
        path_params, get_operation_parameters(document, operation.get("parameters") or []),
    )
    for parameter in parameters:
        if parameter.location == "body":
            parameter.media_type = _consumed_media_type(document, operation)
        _add_parameter(result, parameter)

    if "requestBody" in operation:
        body_definition = get_ref(document, operation["requestBody"])
        _add_parameter(result, get_operation_request_body(document, body_definition), is_body=True)

    if operation.get("responses"):
        responses = get_operation_responses(document, operation["responses"])
        result.errors = get_operation_errors(responses)
        result.results = get_operation_results(responses)
        result.response_header = get_operation_response_header(result.results)
        for response in result.results:
            result.imports.extend(response.imports)
            result.refs.extend(response.schema.refs)

    # required parameters without a default come first; stable otherwise
    result.parameters.sort(key=lambda p: not _needs_value(p))
    return result


def _add_parameter(
    operation: Operation, parameter: OperationParameter, is_body: bool = False,
) -> None:
    """Append to the flat list and to exactly one location partition."""
    operation.parameters.append(parameter)
    operation.imports.extend(parameter.imports)
    operation.refs.extend(parameter.refs)
    if is_body or parameter.location == "body":
        operation.parameters_body = parameter
    elif parameter.location == "path":
        operation.parameters_path.append(parameter)
    elif parameter.location == "query":
        operation.parameters_query.append(parameter)
    elif parameter.location == "header":
        operation.parameters_header.append(parameter)
    elif parameter.location == "cookie":
        operation.parameters_cookie.append(parameter)
    else:
        operation.parameters_form.append(parameter)
