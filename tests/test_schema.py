"""
Schema Tests
------------
ParameterSchema construction, JSON-schema rendering and validation.
"""

import json

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from tools.schema import (
    ParameterSchema,
    ParameterType,
    array_param,
    bool_param,
    enum_param,
    integer_param,
    number_param,
    object_param,
    object_schema,
    simple_object_schema,
    string_param,
)


@pytest.fixture
def schema():
    return object_schema({
        "name": string_param("Name"),
        "age": integer_param("Age", minimum=0, maximum=150),
        "mode": enum_param("Mode", ["fast", "slow"]),
        "tags": array_param("Tags", string_param("Tag")),
        "address": object_param("Address", {
            "city": string_param("City"),
        }, required=["city"]),
        "verbose": bool_param("Verbose"),
        "ratio": number_param("Ratio"),
    }, required=["name"])


class TestJSONSchema:
    """to_json_schema rendering."""

    def test_object_always_has_properties_and_required(self):
        assert object_schema({}).to_json_schema() == {
            "type": "object", "properties": {}, "required": [],
        }

    def test_nested_rendering(self, schema):
        rendered = schema.to_json_schema()

        assert rendered["required"] == ["name"]
        assert rendered["properties"]["name"] == {"type": "string", "description": "Name"}
        assert rendered["properties"]["mode"]["enum"] == ["fast", "slow"]
        assert rendered["properties"]["age"]["minimum"] == 0
        assert rendered["properties"]["tags"]["items"] == {"type": "string", "description": "Tag"}
        assert rendered["properties"]["address"]["required"] == ["city"]

    def test_json_round_trip(self, schema):
        rendered = schema.to_json_schema()
        restored = ParameterSchema.from_json_schema(json.loads(json.dumps(rendered)))
        assert restored.to_json_schema() == rendered

    def test_additional_properties_alias(self):
        schema = object_schema({"a": string_param("A")}, additional_properties=False)
        rendered = schema.to_json_schema()
        assert rendered["additionalProperties"] is False

        restored = ParameterSchema.from_json_schema(rendered)
        assert restored.additional_properties is False


class TestShapeChecks:
    """Malformed schemas are rejected at construction."""

    def test_required_must_be_declared(self):
        with pytest.raises(ValidationError):
            object_schema({"a": string_param("A")}, required=["b"])

    def test_properties_only_on_objects(self):
        with pytest.raises(ValidationError):
            ParameterSchema(type=ParameterType.STRING, properties={"a": string_param("A")})

    def test_items_only_on_arrays(self):
        with pytest.raises(ValidationError):
            ParameterSchema(type=ParameterType.STRING, items=string_param("A"))

    def test_min_not_above_max(self):
        with pytest.raises(ValidationError):
            number_param("n", minimum=5, maximum=1)

    def test_schema_is_frozen(self):
        param = string_param("A")
        with pytest.raises(ValidationError):
            param.description = "B"


class TestValidation:
    """validate_args."""

    def test_valid(self, schema):
        assert schema.validate_args({
            "name": "Ada",
            "age": 36,
            "mode": "fast",
            "tags": ["x", "y"],
            "address": {"city": "London"},
            "verbose": True,
            "ratio": 0.5,
        }) == (True, None)

    def test_missing_required(self, schema):
        assert schema.validate_args({}) == (False, "Missing required parameter: name")

    def test_null_required_counts_as_missing(self, schema):
        valid, error = schema.validate_args({"name": None})
        assert not valid
        assert "name" in error

    def test_null_optional_is_ignored(self, schema):
        assert schema.validate_args({"name": "a", "age": None})[0] is True

    def test_wrong_type(self, schema):
        valid, error = schema.validate_args({"name": 1})
        assert not valid
        assert error == "Invalid type for name: expected string"

    def test_bool_is_not_a_number(self, schema):
        assert schema.validate_args({"name": "a", "ratio": True})[0] is False
        assert schema.validate_args({"name": "a", "age": False})[0] is False

    def test_integral_float_is_an_integer(self, schema):
        assert schema.validate_args({"name": "a", "age": 30.0})[0] is True
        assert schema.validate_args({"name": "a", "age": 30.5})[0] is False

    def test_enum(self, schema):
        valid, error = schema.validate_args({"name": "a", "mode": "medium"})
        assert not valid
        assert "must be one of" in error

    def test_bounds(self, schema):
        assert schema.validate_args({"name": "a", "age": -1}) == (False, "age must be >= 0")
        assert schema.validate_args({"name": "a", "age": 151}) == (False, "age must be <= 150")

    def test_array_items(self, schema):
        valid, error = schema.validate_args({"name": "a", "tags": ["ok", 3]})
        assert not valid
        assert "tags[1]" in error

    def test_nested_required(self, schema):
        valid, error = schema.validate_args({"name": "a", "address": {}})
        assert not valid
        assert error == "Missing required parameter: address.city"

    def test_unknown_allowed_by_default(self, schema):
        assert schema.validate_args({"name": "a", "extra": 1})[0] is True

    def test_unknown_rejected_when_closed(self):
        schema = object_schema({"a": string_param("A")}, additional_properties=False)
        assert schema.validate_args({"b": 1}) == (False, "Unknown parameter: b")

    def test_free_form_object(self):
        schema = object_schema({"meta": object_param("Anything")})
        assert schema.validate_args({"meta": {"x": [1, 2], "y": None}})[0] is True


class TestSimpleObjectSchema:
    """Flat 4-tuple constructor."""

    def test_groups(self):
        schema = simple_object_schema(
            "path", "string", "File path", True,
            "limit", "number", "Max bytes", False,
        )
        rendered = schema.to_json_schema()

        assert rendered["required"] == ["path"]
        assert rendered["properties"]["limit"] == {"type": "number", "description": "Max bytes"}

    def test_bad_arity(self):
        with pytest.raises(ValueError):
            simple_object_schema("path", "string", "File path")

    def test_bad_type(self):
        with pytest.raises(ValueError):
            simple_object_schema("path", "text", "File path", True)
