"""
Parameter Schemas
-----------------
Declarative, nested description of the arguments a tool accepts.

The schema is dual-purpose:
- documentation surfaced to the export adapters (OpenAI / Anthropic)
- the shape checked before dispatch when argument validation is enabled

Build schemas with the small constructors below:

    object_schema({
        "expression": string_param("Expression to evaluate"),
        "precision": integer_param("Decimal places", minimum=0, maximum=15),
    }, required=["expression"])
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParameterType(str, Enum):
    """Supported parameter types."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ParameterSchema(BaseModel):
    """JSON-schema-like description of one argument shape (recursive)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ParameterType
    description: Optional[str] = None
    properties: Optional[Dict[str, "ParameterSchema"]] = None
    required: Optional[List[str]] = None
    enum: Optional[List[str]] = None
    default: Optional[Any] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    items: Optional["ParameterSchema"] = None
    additional_properties: Optional[bool] = Field(default=None, alias="additionalProperties")

    @model_validator(mode="after")
    def _check_shape(self) -> "ParameterSchema":
        if self.type != ParameterType.OBJECT and (self.properties or self.required):
            raise ValueError(f"properties/required only apply to objects, not {self.type.value}")
        if self.required:
            known = set(self.properties or {})
            unknown = [name for name in self.required if name not in known]
            if unknown:
                raise ValueError(f"required names not declared in properties: {unknown}")
        if self.items is not None and self.type != ParameterType.ARRAY:
            raise ValueError("items only applies to arrays")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError("minimum must not exceed maximum")
        return self

    # Export

    def to_json_schema(self) -> Dict[str, Any]:
        """Convert to JSON Schema format."""
        schema: Dict[str, Any] = {"type": self.type.value}

        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.items is not None:
            schema["items"] = self.items.to_json_schema()

        if self.type == ParameterType.OBJECT:
            schema["properties"] = {
                name: prop.to_json_schema() for name, prop in (self.properties or {}).items()
            }
            schema["required"] = list(self.required or [])
            if self.additional_properties is not None:
                schema["additionalProperties"] = self.additional_properties

        return schema

    @classmethod
    def from_json_schema(cls, data: Dict[str, Any]) -> "ParameterSchema":
        """Parse a JSON Schema dict produced by to_json_schema()."""
        return cls.model_validate(data)

    # Validation

    def validate_args(self, args: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a value against this schema.
        Returns (is_valid, error_message).
        """
        error = self._check(args, "")
        return error is None, error

    def _check(self, value: Any, path: str) -> Optional[str]:
        label = path or "arguments"

        if not _matches_type(value, self.type):
            return f"Invalid type for {label}: expected {self.type.value}"

        if self.enum is not None and value not in self.enum:
            return f"Invalid value for {label}: must be one of {self.enum}"

        if self.type in (ParameterType.INTEGER, ParameterType.NUMBER):
            if self.minimum is not None and value < self.minimum:
                return f"{label} must be >= {_number(self.minimum)}"
            if self.maximum is not None and value > self.maximum:
                return f"{label} must be <= {_number(self.maximum)}"

        if self.type == ParameterType.ARRAY and self.items is not None:
            for i, item in enumerate(value):
                error = self.items._check(item, f"{path}[{i}]")
                if error:
                    return error

        if self.type == ParameterType.OBJECT:
            return self._check_object(value, path)

        return None

    def _check_object(self, value: Dict[str, Any], path: str) -> Optional[str]:
        properties = self.properties or {}

        for name in self.required or []:
            if value.get(name) is None:
                return f"Missing required parameter: {_join(path, name)}"

        for name, item in value.items():
            prop = properties.get(name)
            if prop is None:
                if self.additional_properties is False:
                    return f"Unknown parameter: {_join(path, name)}"
                continue
            if item is None:
                # Explicit null for an optional parameter means "not given"
                continue
            error = prop._check(item, _join(path, name))
            if error:
                return error

        return None


ParameterSchema.model_rebuild()


def _matches_type(value: Any, expected: ParameterType) -> bool:
    if expected == ParameterType.STRING:
        return isinstance(value, str)
    if expected == ParameterType.BOOLEAN:
        return isinstance(value, bool)
    if expected == ParameterType.INTEGER:
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if expected == ParameterType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == ParameterType.ARRAY:
        return isinstance(value, list)
    if expected == ParameterType.OBJECT:
        return isinstance(value, dict)
    return False


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# Constructors

def string_param(description: str, default: Optional[str] = None) -> ParameterSchema:
    return ParameterSchema(type=ParameterType.STRING, description=description, default=default)


def number_param(
    description: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    default: Optional[float] = None,
) -> ParameterSchema:
    return ParameterSchema(
        type=ParameterType.NUMBER,
        description=description,
        minimum=minimum,
        maximum=maximum,
        default=default,
    )


def integer_param(
    description: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    default: Optional[int] = None,
) -> ParameterSchema:
    return ParameterSchema(
        type=ParameterType.INTEGER,
        description=description,
        minimum=minimum,
        maximum=maximum,
        default=default,
    )


def bool_param(description: str, default: Optional[bool] = None) -> ParameterSchema:
    return ParameterSchema(type=ParameterType.BOOLEAN, description=description, default=default)


def enum_param(
    description: str, values: List[str], default: Optional[str] = None
) -> ParameterSchema:
    return ParameterSchema(
        type=ParameterType.STRING, description=description, enum=list(values), default=default
    )


def array_param(description: str, items: Optional[ParameterSchema] = None) -> ParameterSchema:
    return ParameterSchema(type=ParameterType.ARRAY, description=description, items=items)


def object_param(
    description: str,
    properties: Optional[Dict[str, ParameterSchema]] = None,
    required: Optional[List[str]] = None,
) -> ParameterSchema:
    """Nested object argument; free-form when no properties are given."""
    return ParameterSchema(
        type=ParameterType.OBJECT,
        description=description,
        properties=properties,
        required=required,
    )


def object_schema(
    properties: Dict[str, ParameterSchema],
    required: Optional[List[str]] = None,
    additional_properties: Optional[bool] = None,
) -> ParameterSchema:
    """Top-level schema for a tool's argument bag."""
    return ParameterSchema(
        type=ParameterType.OBJECT,
        properties=dict(properties),
        required=list(required or []),
        additional_properties=additional_properties,
    )


def simple_object_schema(*args: Any) -> ParameterSchema:
    """
    Object schema from flat (name, type, description, required) groups.

        simple_object_schema("path", "string", "File path", True,
                             "limit", "number", "Max bytes", False)
    """
    if len(args) % 4:
        raise ValueError("simple_object_schema expects groups of 4 arguments")

    properties: Dict[str, ParameterSchema] = {}
    required: List[str] = []

    for i in range(0, len(args), 4):
        name, param_type, description, is_required = args[i:i + 4]
        properties[str(name)] = ParameterSchema(
            type=ParameterType(param_type), description=str(description)
        )
        if is_required is True:
            required.append(str(name))

    return object_schema(properties, required)


EMPTY_SCHEMA = object_schema({})
