"""
Parameter schemas for typed tools.

A ToolSchema is the small JSON-Schema subset the reasoning service understands:
an object with typed properties, optional enums, array item schemas and a
required list. Schemas are checked once at registration time (`validate`) and
every invocation's arguments are checked against them (`validate_input`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from ai_resolver.errors import InvalidSchemaError, ValidationError

PROPERTY_TYPES = ("string", "number", "integer", "boolean", "array", "object")


@dataclass
class Property:
    type: str
    description: str = ""
    enum: Optional[List[Any]] = None
    items: Optional["Property"] = None
    default: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Property":
        items = data.get("items")
        return cls(
            type=data.get("type", ""),
            description=data.get("description", ""),
            enum=list(data["enum"]) if data.get("enum") is not None else None,
            items=cls.from_dict(items) if isinstance(items, dict) else None,
            default=data.get("default"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            out["enum"] = list(self.enum)
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.default is not None:
            out["default"] = self.default
        return out


@dataclass
class ToolSchema:
    properties: Dict[str, Property] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    type: str = "object"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolSchema":
        """Build a schema from its JSON form (as tools declare it)."""
        props = data.get("properties") or {}
        return cls(
            properties={name: Property.from_dict(p) for name, p in props.items()},
            required=list(data.get("required") or []),
            type=data.get("type", "object"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.type,
            "properties": {name: p.to_dict() for name, p in self.properties.items()},
        }
        if self.required:
            out["required"] = list(self.required)
        return out

    @property
    def strict(self) -> bool:
        """Strict mode is only allowed when every declared property is required."""
        return len(self.properties) == len(self.required)

    def validate(self) -> None:
        """
        Check that the schema itself is well formed.

        Raises:
            InvalidSchemaError: wrong root type, a required name with no
                property, an unknown property type or an array without items.
        """
        if self.type != "object":
            raise InvalidSchemaError(f"schema type must be 'object', got {self.type!r}")
        for name in self.required:
            if name not in self.properties:
                raise InvalidSchemaError(f"required property {name!r} is not defined")
        for name, prop in self.properties.items():
            _check_property(name, prop)

        try:
            Draft7Validator.check_schema(self.to_dict())
        except SchemaError as e:
            raise InvalidSchemaError(f"not a valid JSON schema: {e.message}") from e

    def validate_input(self, args: Dict[str, Any]) -> None:
        """
        Check invocation arguments against the schema.

        Unknown argument names are ignored and None is accepted for any
        property. The first failure is raised as a ValidationError.
        """
        for name in self.required:
            if name not in args:
                raise ValidationError(name, "required field missing")
        for name, value in args.items():
            prop = self.properties.get(name)
            if prop is None:
                continue
            validate_value(name, value, prop)


def _check_property(name: str, prop: Property) -> None:
    if prop.type not in PROPERTY_TYPES:
        raise InvalidSchemaError(f"property {name!r} has invalid type {prop.type!r}")
    if prop.type == "array":
        if prop.items is None:
            raise InvalidSchemaError(f"array property {name!r} must define items")
        _check_property(f"{name}[]", prop.items)


def _json_kind(value: Any) -> str:
    # bool is a subclass of int, so it has to be tested first.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _field_path(field_name: str, path) -> str:
    return field_name + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)


def _error_message(err) -> str:
    # Stable, user-facing texts for the common failures; jsonschema's own otherwise.
    if err.validator == "type":
        return f"expected {err.validator_value}, got {_json_kind(err.instance)}"
    if err.validator == "enum":
        return f"value must be one of {err.validator_value}"
    return err.message


def validate_value(field_name: str, value: Any, prop: Property) -> None:
    """Validate one value against its Property with a Draft 7 validator."""
    if value is None:
        return

    validator = Draft7Validator(prop.to_dict())
    errors = sorted(validator.iter_errors(value), key=lambda e: list(e.path))
    if errors:
        err = errors[0]
        raise ValidationError(_field_path(field_name, err.path), _error_message(err), err.instance)
