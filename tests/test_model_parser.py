"""Tests for the model_parser module."""

from openapi_ts.model_parser import (
    INDEX_SIGNATURE,
    get_enums,
    get_model,
    get_model_properties,
    get_models,
    is_nullable,
)
from openapi_ts.models import (
    ArrayModel,
    CompositionModel,
    ConstModel,
    DictionaryModel,
    EnumModel,
    GenericModel,
    InterfaceModel,
    ReferenceModel,
)


# Minimal 3.x document with components for $ref resolution
_SPEC: dict = {
    "openapi": "3.0.0",
    "info": {"title": "Test", "version": "1"},
    "paths": {},
    "components": {
        "schemas": {
            "Cat": {
                "type": "object",
                "properties": {"meow": {"type": "boolean"}},
            },
            "Dog": {
                "type": "object",
                "properties": {"bark": {"type": "boolean"}},
            },
            "Owner": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "id": {"type": "integer", "readOnly": True},
                    "name": {"type": "string"},
                    "nickname": {"type": "string", "nullable": True},
                    "pet": {
                        "anyOf": [
                            {"$ref": "#/components/schemas/Cat"},
                            {"$ref": "#/components/schemas/Dog"},
                            {"type": "null"},
                        ],
                    },
                    "mood": {"type": "string", "enum": ["happy", "grumpy"]},
                },
            },
            "Status": {
                "type": "string",
                "enum": ["active", "inactive", "active"],
                "x-enum-varnames": ["Active", "Inactive"],
                "x-enum-descriptions": ["In use", "Retired"],
            },
            "Extended": {
                "allOf": [
                    {"$ref": "#/components/schemas/Cat"},
                    {"type": "object", "properties": {"lives": {"type": "integer"}}},
                ],
            },
            "Tags": {"type": "array", "items": {"type": "string"}},
            "Labels": {"type": "object", "additionalProperties": {"type": "string"}},
            "delete": {"type": "string"},
        },
        "parameters": {
            "page-size": {
                "name": "pageSize",
                "in": "query",
                "description": "Items per page",
                "schema": {"type": "integer"},
            },
        },
    },
}


def _schema(name):
    return _SPEC["components"]["schemas"][name]


class TestIsNullable:
    """Test the three ways a schema can be nullable."""

    def test_nullable_keyword(self):
        assert is_nullable({"type": "string", "nullable": True})

    def test_x_nullable(self):
        assert is_nullable({"type": "string", "x-nullable": True})

    def test_type_list(self):
        assert is_nullable({"type": ["string", "null"]})

    def test_not_nullable(self):
        assert not is_nullable({"type": "string"})


class TestGetEnums:
    """Test enum value extraction."""

    def test_dedup_and_extensions(self):
        values = get_enums(_schema("Status"))
        assert [v.value for v in values] == ["active", "inactive"]
        assert [v.custom_name for v in values] == ["Active", "Inactive"]
        assert [v.custom_description for v in values] == ["In use", "Retired"]

    def test_skips_non_scalars(self):
        values = get_enums({"enum": ["a", {"b": 1}, 2]})
        assert [v.value for v in values] == ["a", 2]


class TestGetModel:
    """Test dispatch by schema shape."""

    def test_reference(self):
        model = get_model(_SPEC, {"$ref": "#/components/schemas/Cat"})
        assert isinstance(model, ReferenceModel)
        assert model.type == "Cat"
        assert model.properties == []

    def test_enum(self):
        model = get_model(_SPEC, _schema("Status"), is_definition=True, name="Status")
        assert isinstance(model, EnumModel)
        assert model.export == "enum"
        assert len(model.enum) == 2

    def test_enum_with_null_value(self):
        model = get_model(_SPEC, {"enum": ["a", None]})
        assert isinstance(model, EnumModel)
        assert model.is_nullable is True

    def test_boolean_enum_is_not_enum(self):
        model = get_model(_SPEC, {"type": "boolean", "enum": [True]})
        assert isinstance(model, GenericModel)
        assert model.type == "boolean"

    def test_interface(self):
        model = get_model(_SPEC, _schema("Cat"), is_definition=True, name="Cat")
        assert isinstance(model, InterfaceModel)
        assert model.export == "interface"
        assert [p.name for p in model.properties] == ["meow"]

    def test_array_of_primitive(self):
        model = get_model(_SPEC, _schema("Tags"))
        assert isinstance(model, ArrayModel)
        assert model.link is not None
        assert model.link.type == "string"

    def test_array_of_reference(self):
        model = get_model(_SPEC, {"type": "array", "items": {"$ref": "#/components/schemas/Dog"}})
        assert isinstance(model, ArrayModel)
        assert model.type == "Dog"
        assert model.imports == ["Dog"]

    def test_dictionary(self):
        model = get_model(_SPEC, _schema("Labels"))
        assert isinstance(model, DictionaryModel)
        assert model.link.type == "string"

    def test_index_member_next_to_properties(self):
        model = get_model(_SPEC, {
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "additionalProperties": {"type": "number"},
        })
        assert isinstance(model, InterfaceModel)
        assert [p.name for p in model.properties] == ["a", INDEX_SIGNATURE]

    def test_const(self):
        model = get_model(_SPEC, {"const": "fixed"})
        assert isinstance(model, ConstModel)
        assert model.type == "'fixed'"

    def test_primitive_alias(self):
        model = get_model(_SPEC, {"type": "string", "format": "date-time"})
        assert isinstance(model, GenericModel)
        assert model.type == "string"
        assert model.format == "date-time"


class TestProperties:
    """Test flags copied onto property models."""

    @classmethod
    def setup_class(cls):
        cls.props = {p.name: p for p in get_model_properties(_SPEC, _schema("Owner"))}

    def test_order_preserved(self):
        assert list(self.props) == ["id", "name", "nickname", "pet", "mood"]

    def test_required(self):
        assert self.props["name"].is_required is True
        assert self.props["id"].is_required is False

    def test_read_only(self):
        assert self.props["id"].is_read_only is True
        assert self.props["name"].is_read_only is False

    def test_nullable(self):
        assert self.props["nickname"].is_nullable is True
        assert self.props["name"].is_nullable is False


class TestComposition:
    """Test allOf/anyOf/oneOf resolution."""

    def test_any_of_with_null_branch(self):
        """Two $ref branches plus a null branch: two entries, nullable."""
        model = get_model_properties(_SPEC, _schema("Owner"))[3]
        assert isinstance(model, CompositionModel)
        assert model.export == "any-of"
        assert len(model.properties) == 2
        assert [p.type for p in model.properties] == ["Cat", "Dog"]
        assert model.is_nullable is True

    def test_all_of_merges_sibling_properties(self):
        model = get_model(_SPEC, _schema("Extended"), is_definition=True, name="Extended")
        assert model.export == "all-of"
        assert isinstance(model.properties[0], ReferenceModel)
        assert isinstance(model.properties[1], InterfaceModel)
        assert model.imports == ["Cat"]

    def test_shared_properties_wrap_each_alternative(self):
        model = get_model(_SPEC, {
            "oneOf": [
                {"$ref": "#/components/schemas/Cat"},
                {"$ref": "#/components/schemas/Dog"},
            ],
            "properties": {"name": {"type": "string"}},
        }, name="Named")
        assert model.export == "one-of"
        assert [p.export for p in model.properties] == ["all-of", "all-of"]
        first, second = model.properties
        assert first.properties[1] is not second.properties[1]

    def test_inline_enum_branch_lifted(self):
        model = get_model(_SPEC, {
            "anyOf": [{"type": "string", "enum": ["a", "b"]}, {"type": "integer"}],
        }, name="Mixed")
        assert [e.name for e in model.enums] == ["MixedEnum"]
        assert len(model.properties) == 2

    def test_each_inline_enum_branch_named(self):
        model = get_model(_SPEC, {
            "oneOf": [
                {"type": "string", "enum": ["x"]},
                {"type": "string", "enum": ["y"]},
                {"type": "string", "enum": ["z"]},
            ],
        }, name="Wrap")
        assert [e.name for e in model.enums] == ["WrapEnum", "WrapEnum2", "WrapEnum3"]

    def test_open_dictionary_branch_kept(self):
        model = get_model(_SPEC, {
            "anyOf": [
                {"type": "string"},
                {"type": "object", "additionalProperties": True},
                {},
            ],
        })
        assert len(model.properties) == 2
        assert isinstance(model.properties[1], DictionaryModel)

    def test_bare_object_branch_dropped(self):
        model = get_model(_SPEC, {"anyOf": [{"type": "string"}, {"type": "object"}]})
        assert [p.type for p in model.properties] == ["string"]

    def test_children_never_shared(self):
        model = get_model(_SPEC, _schema("Owner"), name="Owner")
        enum_prop = model.properties[4]
        assert model.enums[0] is not enum_prop


class TestNestedEnums:
    """Test extraction of inline property enums."""

    def test_property_enum_named_after_parent(self):
        model = get_model(_SPEC, _schema("Owner"), is_definition=True, name="Owner")
        assert [e.name for e in model.enums] == ["OwnerMood"]
        assert [v.value for v in model.enums[0].enum] == ["happy", "grumpy"]


class TestGetModels:
    """Test top-level model collection."""

    @classmethod
    def setup_class(cls):
        cls.models = get_models(_SPEC)
        cls.by_name = {m.name: m for m in cls.models}

    def test_declaration_order(self):
        names = [m.name for m in self.models]
        assert names[:3] == ["Cat", "Dog", "Owner"]

    def test_all_definitions(self):
        assert all(m.is_definition for m in self.models)

    def test_reserved_name_escaped(self):
        assert "delete_" in self.by_name

    def test_reference_to_reserved_name_escaped(self):
        model = get_model(_SPEC, {"$ref": "#/components/schemas/delete"})
        assert model.type == "delete_"
        assert model.imports == ["delete_"]

    def test_component_parameter_model(self):
        model = self.by_name["ParameterPageSize"]
        assert model.type == "number"
        assert model.description == "Items per page"
