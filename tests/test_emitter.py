"""Tests for the emitter module."""

import dataclasses
from pathlib import Path

import pytest

from openapi_ts.client_builder import parse_document
from openapi_ts.config import Config
from openapi_ts.emitter import (
    CONTROLLERS_TYPE_NAME,
    OPERATIONS_TYPE_NAME,
    compile_client,
    operation_data_type_name,
    operation_response_type_name,
    to_type,
)
from openapi_ts.loader import load_document
from openapi_ts.models import (
    ArrayModel,
    CompositionModel,
    DictionaryModel,
    EnumModel,
    EnumValue,
    GenericModel,
    InterfaceModel,
    Model,
    Operation,
    ReferenceModel,
)
from openapi_ts.nodes import (
    ArrayType,
    ClassNode,
    ConstNode,
    ConstObjectNode,
    EnumNode,
    Identifier,
    ImportName,
    IndexedAccessType,
    InterfaceNode,
    IntersectionType,
    Literal,
    LiteralType,
    ObjectLiteral,
    OutputFile,
    TypeAliasNode,
    TypeLiteral,
    TypeReference,
    UnionType,
)
from openapi_ts.printer import print_type

_NULL = TypeReference("null")

_USERS_V3 = Path(__file__).parent / "fixtures" / "users-v3.yaml"

_ENUMS: dict = {
    "openapi": "3.0.0",
    "info": {"title": "Enums", "version": "1"},
    "paths": {},
    "components": {
        "schemas": {
            "Status": {
                "type": "string",
                "enum": ["on", "off"],
                "x-enum-descriptions": ["Running", "Stopped"],
            },
            "status": {"type": "string", "enum": ["other"]},
        },
    },
}


def _names(file):
    return [node.name for node in file.nodes]


class TestToType:
    """Test type expressions per model variant."""

    def test_reference(self):
        assert to_type(ReferenceModel(type="Pet", base="Pet")) == TypeReference("Pet")

    def test_nullable_reference(self):
        model = ReferenceModel(type="Pet", base="Pet", is_nullable=True)
        assert to_type(model) == UnionType([TypeReference("Pet"), _NULL])

    def test_template(self):
        model = ReferenceModel(type="Link<string>", base="Link", template="string")
        assert to_type(model) == TypeReference("Link", [TypeReference("string")])

    def test_binary(self):
        model = GenericModel(type="binary", base="binary")
        assert print_type(to_type(model)) == "Blob | File"

    def test_array(self):
        model = ArrayModel(link=GenericModel(type="string", base="string"))
        assert to_type(model) == ArrayType(TypeReference("string"))

    def test_array_of_reference(self):
        model = ArrayModel(type="Pet", base="Pet")
        assert print_type(to_type(model)) == "Pet[]"

    def test_dictionary(self):
        model = DictionaryModel(link=GenericModel(type="number", base="number"))
        assert print_type(to_type(model)) == "Record<string, number>"

    def test_enum(self):
        model = EnumModel(enum=[EnumValue("a"), EnumValue(1)])
        assert to_type(model) == UnionType([LiteralType("a"), LiteralType(1)])
        assert print_type(to_type(model)) == "'a' | 1"

    def test_any_of(self):
        model = CompositionModel(kind="any-of", is_nullable=True, properties=[
            ReferenceModel(type="Cat", base="Cat"),
            ReferenceModel(type="Dog", base="Dog"),
        ])
        assert print_type(to_type(model)) == "Cat | Dog | null"

    def test_all_of(self):
        model = CompositionModel(kind="all-of", properties=[
            ReferenceModel(type="Cat", base="Cat"),
            InterfaceModel(properties=[GenericModel(name="lives", type="number", base="number")]),
        ])
        result = to_type(model)
        assert isinstance(result, IntersectionType)
        assert result.types[0] == TypeReference("Cat")

    def test_composition_duplicates_collapse(self):
        model = CompositionModel(kind="one-of", properties=[
            ReferenceModel(type="Cat", base="Cat"),
            ReferenceModel(type="Cat", base="Cat"),
        ])
        assert to_type(model) == TypeReference("Cat")

    def test_interface(self):
        model = InterfaceModel(properties=[
            GenericModel(name="id", type="string", base="string", is_required=True),
            GenericModel(name="x-note", type="string", base="string"),
        ])
        result = to_type(model)
        assert isinstance(result, TypeLiteral)
        assert [(m.name, m.is_required) for m in result.members] == [("id", True), ("x-note", False)]
        assert print_type(result) == "{\n    id: string;\n    'x-note'?: string;\n}"

    def test_nullable_not_doubled(self):
        model = GenericModel(type="string", base="string", is_nullable=True)
        assert to_type(model) == UnionType([TypeReference("string"), _NULL])

    def test_unknown_variant_rejected(self):
        @dataclasses.dataclass
        class StrangeModel(Model):
            pass

        with pytest.raises(TypeError, match="StrangeModel"):
            to_type(StrangeModel())


class TestOperationTypeNames:
    """Test per-operation alias names."""

    def test_names(self):
        operation = Operation(name="getUser", service="Users", method="GET", path="/u")
        assert operation_data_type_name(operation) == "UsersGetUserData"
        assert operation_response_type_name(operation) == "UsersGetUserResponse"


class TestProcessTypes:
    """Test the types file for the users document."""

    @classmethod
    def setup_class(cls):
        cls.document = load_document(_USERS_V3)

    def _types(self, config=Config()):
        client = parse_document(self.document, config)
        return compile_client(self.document, client, config)["types"]

    def test_declaration_order(self):
        assert _names(self._types()) == [
            "Role", "User", "NewUser", "Team", "TeamKind", "Error", "ParameterUserId",
            "UsersCreateUserData", "UsersCreateUserResponse",
            "UsersGetUserData", "UsersGetUserResponse",
            "UsersPutUsersByUserIdAvatarData", "UsersPutUsersByUserIdAvatarResponse",
            "DefaultGetHealthResponse",
        ]

    def test_node_kinds(self):
        nodes = {n.name: n for n in self._types().nodes}
        assert isinstance(nodes["Role"], TypeAliasNode)
        assert isinstance(nodes["User"], InterfaceNode)
        assert isinstance(nodes["TeamKind"], TypeAliasNode)
        assert print_type(nodes["TeamKind"].type) == "'internal' | 'external'"

    def test_interface_members(self):
        user = next(n for n in self._types().nodes if n.name == "User")
        members = {m.name: m for m in user.members}
        assert members["id"].is_read_only is True
        assert members["email"].is_required is True
        assert print_type(members["manager"].type) == "User | Team | null"
        assert print_type(members["metadata"].type) == "Record<string, string>"

    def test_data_alias(self):
        data = next(n for n in self._types().nodes if n.name == "UsersGetUserData")
        assert [m.name for m in data.type.members] == ["userId", "xRequestId"]
        assert [m.is_required for m in data.type.members] == [True, False]

    def test_typescript_enums(self):
        nodes = {n.name: n for n in self._types(Config(enums="typescript")).nodes}
        role = nodes["Role"]
        assert isinstance(role, EnumNode)
        assert [(m.key, m.value) for m in role.members] == [
            ("ADMIN", "admin"), ("MEMBER", "member"), ("GUEST", "guest"),
        ]
        assert role.members[0].comment == ["Full access"]

    def test_javascript_enums(self):
        nodes = [n for n in self._types(Config(enums="javascript")).nodes if n.name == "Role"]
        assert [type(n) for n in nodes] == [TypeAliasNode, ConstObjectNode]

    def test_fetch_types_have_no_imports(self):
        assert self._types().imports == []


class TestEnumCollision:
    """A colliding enum is not emitted on its own."""

    def test_second_enum_skipped(self):
        client = parse_document(_ENUMS, Config())
        types = compile_client(_ENUMS, client, Config())["types"]
        assert _names(types) == ["Status"]


_SNAKE_ENUM: dict = {
    "swagger": "2.0",
    "paths": {},
    "definitions": {
        "pet_status": {"type": "string", "enum": ["a", "b"]},
        "Pet": {
            "type": "object",
            "properties": {"status": {"$ref": "#/definitions/pet_status"}},
        },
    },
}


class TestEnumDeclaredUnderReferencedName:
    """References to an enum use the sanitized schema name, so the alias must too."""

    def _types(self, enums):
        config = Config(enums=enums)
        client = parse_document(_SNAKE_ENUM, config)
        return compile_client(_SNAKE_ENUM, client, config)["types"]

    def _status_type(self, types):
        pet = next(n for n in types.nodes if n.name == "Pet")
        return pet.members[0].type

    def test_union(self):
        types = self._types("union")
        assert _names(types) == ["pet_status", "Pet"]
        assert self._status_type(types) == TypeReference("pet_status")

    def test_javascript(self):
        types = self._types("javascript")
        assert [(type(n), n.name) for n in types.nodes[:2]] == [
            (TypeAliasNode, "pet_status"),
            (ConstObjectNode, "PetStatus"),
        ]

    def test_typescript(self):
        types = self._types("typescript")
        enum, alias = types.nodes[:2]
        assert isinstance(enum, EnumNode)
        assert enum.name == "PetStatus"
        assert alias == TypeAliasNode("pet_status", TypeReference("PetStatus"))


class TestReservedDefinitionName:
    """A reserved-word definition is declared and referenced under one escaped name."""

    _DOCUMENT: dict = {
        "swagger": "2.0",
        "paths": {"/x": {"get": {"responses": {
            "200": {"description": "OK", "schema": {"$ref": "#/definitions/delete"}},
        }}}},
        "definitions": {
            "delete": {"type": "object", "properties": {"id": {"type": "string"}}},
        },
    }

    def test_declaration_and_reference_match(self):
        client = parse_document(self._DOCUMENT, Config())
        files = compile_client(self._DOCUMENT, client, Config())
        types = files["types"]
        assert isinstance(types.nodes[0], InterfaceNode)
        assert types.nodes[0].name == "delete_"
        response = next(n for n in types.nodes if n.name == "DefaultGetXResponse")
        assert response.type == TypeReference("delete_")
        (_, _, _, imported) = files["services"].imports
        assert [n.name for n in imported.names] == ["DefaultGetXResponse"]


class TestFastify:
    """Test the fastify route map."""

    @classmethod
    def setup_class(cls):
        document = load_document(_USERS_V3)
        config = Config(client="fastify")
        cls.files = compile_client(document, parse_document(document, config), config)
        cls.types = cls.files["types"]

    def test_no_services_file(self):
        assert "services" not in self.files

    def test_route_handler_import(self):
        (imported,) = self.types.imports
        assert imported.module == "fastify"
        assert imported.names == [ImportName("RouteHandler", is_type_only=True)]

    def test_operations_map(self):
        names = _names(self.types)
        assert names[-2:] == [OPERATIONS_TYPE_NAME, CONTROLLERS_TYPE_NAME]
        operations = self.types.nodes[-2].type
        by_name = {m.name: m for m in operations.members}
        assert list(by_name) == ["createUser", "getUser", "putUsersByUserIdAvatar", "getHealth"]

        get_user = {m.name: m for m in by_name["getUser"].type.members}
        assert list(get_user) == ["Params", "Header", "Reply"]
        assert [m.name for m in get_user["Reply"].type.members] == ["200", "404"]
        assert get_user["Reply"].type.members[1].comment == ["Resource not found"]

        create_user = {m.name: m for m in by_name["createUser"].type.members}
        assert [m.name for m in create_user["Body"].type.members] == ["requestBody"]

    def test_controllers_alias(self):
        controllers = self.types.nodes[-1]
        assert "RouteHandler<" in print_type(controllers.type)


class TestProcessServices:
    """Test service classes and their imports."""

    @classmethod
    def setup_class(cls):
        cls.document = load_document(_USERS_V3)

    def _files(self, config=Config()):
        return compile_client(self.document, parse_document(self.document, config), config)

    def _method(self, files, class_name, method_name):
        cls = next(n for n in files["services"].nodes if n.name == class_name)
        return next(m for m in cls.members if m.name == method_name)

    def test_classes(self):
        services = self._files()["services"]
        assert _names(services) == ["UsersService", "DefaultService"]
        users = services.nodes[0]
        assert isinstance(users, ClassNode)
        assert [m.name for m in users.members] == ["createUser", "getUser", "putUsersByUserIdAvatar"]
        assert all(m.is_static for m in users.members)

    def test_custom_service_name(self):
        services = self._files(Config(service_name="{{name}}Api"))["services"]
        assert _names(services) == ["UsersApi", "DefaultApi"]

    def test_imports(self):
        imports = {i.module: i.names for i in self._files()["services"].imports}
        assert list(imports) == [
            "./core/CancelablePromise", "./core/OpenAPI", "./core/request", "./types.gen",
        ]
        assert imports["./core/request"] == [ImportName("request", alias="__request")]
        assert [n.name for n in imports["./types.gen"]] == [
            "UsersCreateUserData", "UsersCreateUserResponse",
            "UsersGetUserData", "UsersGetUserResponse",
            "UsersPutUsersByUserIdAvatarData", "UsersPutUsersByUserIdAvatarResponse",
            "DefaultGetHealthResponse",
        ]

    def test_no_types_import_without_types_file(self):
        files = self._files(Config(export_types=False))
        modules = [i.module for i in files["services"].imports]
        assert "./types.gen" not in modules

    def test_options_parameter(self):
        method = self._method(self._files(), "UsersService", "getUser")
        (parameter,) = method.parameters
        assert parameter.name == "data"
        assert parameter.type == TypeReference("UsersGetUserData")
        assert parameter.default is None

    def test_positional_parameters(self):
        method = self._method(self._files(Config(use_options=False)), "UsersService", "getUser")
        assert [p.name for p in method.parameters] == ["userId", "xRequestId"]
        assert method.parameters[0].type == IndexedAccessType(TypeReference("UsersGetUserData"), "userId")
        assert method.parameters[1].is_required is False

    def test_return_type(self):
        method = self._method(self._files(), "UsersService", "getUser")
        assert print_type(method.return_type) == "CancelablePromise<UsersGetUserResponse>"

    def test_return_type_without_results(self):
        document = {
            "openapi": "3.0.0",
            "paths": {"/a": {"delete": {"responses": {"404": {"description": "No"}}}}},
        }
        files = compile_client(document, parse_document(document, Config()), Config())
        method = files["services"].nodes[0].members[0]
        assert print_type(method.return_type) == "CancelablePromise<void>"

    def test_api_result_wrapping(self):
        files = self._files(Config(response="response"))
        method = self._method(files, "UsersService", "getUser")
        assert print_type(method.return_type) == "CancelablePromise<ApiResult<UsersGetUserResponse>>"
        assert "./core/ApiResult" in [i.module for i in files["services"].imports]

    def test_request_options(self):
        method = self._method(self._files(), "UsersService", "getUser")
        (statement,) = method.statements
        assert statement.callee == "__request"
        assert statement.args[0] == Identifier("OpenAPI")
        options = dict(statement.args[1].entries)
        assert list(options) == ["method", "url", "path", "headers", "errors"]
        assert options["method"] == Literal("GET")
        assert options["url"] == Literal("/users/{userId}")
        assert options["path"] == ObjectLiteral([("userId", Identifier("data.userId"))])
        assert options["headers"] == ObjectLiteral([("'X-Request-Id'", Identifier("data.xRequestId"))])
        assert options["errors"] == ObjectLiteral([("404", Literal("Resource not found"))])

    def test_form_body_options(self):
        method = self._method(self._files(), "UsersService", "putUsersByUserIdAvatar")
        options = dict(method.statements[0].args[1].entries)
        assert options["formData"] == Identifier("data.formData")
        assert options["mediaType"] == Literal("multipart/form-data")

    def test_angular(self):
        files = self._files(Config(client="angular"))
        users = files["services"].nodes[0]
        assert users.decorator.name == "Injectable"
        assert users.constructor.parameters[0].name == "http"
        assert not any(m.is_static for m in users.members)
        method = users.members[1]
        assert print_type(method.return_type) == "Observable<UsersGetUserResponse>"
        assert method.statements[0].args[1] == Identifier("this.http")
        modules = [i.module for i in files["services"].imports]
        assert "./core/CancelablePromise" not in modules
        assert "rxjs" in modules


class TestSchemasAndIndex:
    """Test the optional schemas file and the index re-exports."""

    def test_schemas(self, users_document, users_client):
        files = compile_client(users_document, users_client, Config(export_schemas=True))
        schemas = files["schemas"]
        assert isinstance(schemas.nodes[0], ConstNode)
        assert _names(schemas)[:2] == ["$Role", "$User"]
        assert schemas.nodes[0].value["enum"] == ["admin", "member", "guest"]

    def test_index(self, users_document, users_client):
        index = compile_client(users_document, users_client, Config())["index"]
        modules = [n.module for n in index.nodes]
        assert modules == [
            "./core/ApiError", "./core/CancelablePromise", "./core/OpenAPI",
            "./types.gen", "./services.gen",
        ]

    def test_index_without_core(self, users_document, users_client):
        index = compile_client(users_document, users_client, Config(export_core=False))["index"]
        assert [n.module for n in index.nodes] == ["./types.gen", "./services.gen"]


class TestOutputFile:
    """Test the import manifest."""

    def test_named_imports_deduplicated(self):
        file = OutputFile("services.gen.ts")
        file.add_named_import(["A", "B"], "./types.gen")
        file.add_named_import([ImportName("A", is_type_only=True), "C"], "./types.gen")
        (imported,) = file.imports
        assert [n.name for n in imported.names] == ["A", "B", "C"]

    def test_get_name(self):
        file = OutputFile("types.gen.ts")
        assert file.get_name() == "types.gen.ts"
        assert file.get_name(False) == "types.gen"

    def test_is_empty(self):
        file = OutputFile("index.ts")
        assert file.is_empty()
        file.add(TypeAliasNode("A", TypeReference("string")))
        assert not file.is_empty()
