from openapi_executor.fields import (
    parameters_to_fields,
    schema_to_fields,
    schema_to_form_fields,
    to_display_name,
)
from openapi_executor.models import FieldOption, ParsedParameter


class TestToDisplayName:
    def test_splits_camel_case(self):
        assert to_display_name("firstName") == "First Name"
        assert to_display_name("emailAddress") == "Email Address"
        assert to_display_name("markdownBody") == "Markdown Body"

    def test_capitalizes_single_word(self):
        assert to_display_name("name") == "Name"

    def test_leaves_other_characters_alone(self):
        assert to_display_name("user_id") == "User_id"
        assert to_display_name("") == ""


class TestSchemaToFields:
    def test_converts_string_property(self):
        schema = {"type": "object", "properties": {"name": {"type": "string", "description": "The name"}}}
        (field,) = schema_to_fields(schema, "createPet")
        assert field.display_name == "Name"
        assert field.name == "name"
        assert field.type == "string"
        assert field.default == ""
        assert field.required is False
        assert field.description == "The name"
        assert field.operation_id == "createPet"

    def test_marks_required_properties(self):
        schema = {"type": "object", "required": ["name"], "properties": {"name": {"type": "string"}}}
        assert schema_to_fields(schema, "createPet")[0].required is True

    def test_integer_and_number_map_to_number(self):
        schema = {
            "type": "object",
            "properties": {"age": {"type": "integer"}, "price": {"type": "number"}},
        }
        fields = schema_to_fields(schema, "op")
        assert [(f.type, f.default) for f in fields] == [("number", 0), ("number", 0)]

    def test_boolean_property(self):
        schema = {"type": "object", "properties": {"vaccinated": {"type": "boolean"}}}
        (field,) = schema_to_fields(schema, "op")
        assert field.type == "boolean"
        assert field.default is False

    def test_enum_becomes_options(self):
        schema = {
            "type": "object",
            "properties": {"status": {"type": "string", "enum": ["available", "pending", "sold"]}},
        }
        (field,) = schema_to_fields(schema, "updateStatus")
        assert field.type == "options"
        assert field.display_name == "Status"
        assert field.options == (
            FieldOption(name="Available", value="available"),
            FieldOption(name="Pending", value="pending"),
            FieldOption(name="Sold", value="sold"),
        )

    def test_enum_values_keep_their_type(self):
        schema = {"type": "object", "properties": {"level": {"type": "integer", "enum": [1, 2]}}}
        (field,) = schema_to_fields(schema, "op")
        assert field.type == "options"
        assert [option.value for option in field.options] == [1, 2]
        assert [option.name for option in field.options] == ["1", "2"]

    def test_schema_defaults_win(self):
        schema = {
            "type": "object",
            "properties": {
                "limit": {"type": "integer", "default": 10},
                "active": {"type": "boolean", "default": True},
            },
        }
        fields = {f.name: f for f in schema_to_fields(schema, "list")}
        assert fields["limit"].default == 10
        assert fields["active"].default is True

    def test_nested_structures_become_strings(self):
        schema = {
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "owner": {"type": "object", "properties": {"id": {"type": "integer"}}},
            },
        }
        assert [f.type for f in schema_to_fields(schema, "op")] == ["string", "string"]

    def test_keeps_declaration_order(self):
        schema = {
            "type": "object",
            "properties": {"firstName": {}, "lastName": {}, "emailAddress": {}},
        }
        assert [f.display_name for f in schema_to_fields(schema, "create")] == [
            "First Name",
            "Last Name",
            "Email Address",
        ]

    def test_type_list_uses_first_entry(self):
        schema = {"type": ["object", "null"], "properties": {"n": {"type": ["integer", "null"]}}}
        (field,) = schema_to_fields(schema, "op")
        assert field.type == "number"

    def test_returns_empty_for_missing_or_non_object_schema(self):
        assert schema_to_fields(None, "op") == []
        assert schema_to_fields({"type": "string"}, "op") == []
        assert schema_to_fields({"type": "array", "items": {"type": "object"}}, "op") == []
        assert schema_to_fields({"type": "object"}, "op") == []


class TestSchemaToFormFields:
    def test_marks_binary_multipart_properties(self):
        schema = {
            "type": "object",
            "properties": {
                "file": {"type": "string", "format": "binary"},
                "caption": {"type": "string"},
            },
        }
        fields = schema_to_form_fields(schema, "multipart/form-data", "upload")
        assert [f.display_name for f in fields] == ["File (Binary)", "Caption"]
        assert fields[0].type == "string"

    def test_form_urlencoded_is_unchanged(self):
        schema = {"type": "object", "properties": {"file": {"type": "string", "format": "binary"}}}
        (field,) = schema_to_form_fields(schema, "application/x-www-form-urlencoded", "op")
        assert field.display_name == "File"


class TestParametersToFields:
    def test_maps_parameters(self):
        params = [
            ParsedParameter(name="petId", location="path", required=True, schema={"type": "integer"}),
            ParsedParameter(
                name="status",
                location="query",
                schema={"type": "string", "enum": ["available", "sold"]},
                description="Filter by status",
            ),
        ]
        pet_id, status = parameters_to_fields(params)
        assert pet_id.display_name == "Pet Id"
        assert pet_id.type == "number"
        assert pet_id.required is True
        assert status.type == "options"
        assert status.description == "Filter by status"
        assert status.options == (
            FieldOption(name="available", value="available"),
            FieldOption(name="sold", value="sold"),
        )
