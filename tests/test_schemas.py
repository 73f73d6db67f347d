"""Tests for parameter schemas: definition checks and argument validation."""
import pytest

from ai_resolver.agent.validation.schemas import Property, ToolSchema, validate_value
from ai_resolver.errors import InvalidSchemaError, ValidationError


def _schema():
    return ToolSchema.from_dict(
        {
            "type": "object",
            "properties": {
                "mode": {"type": "string", "enum": ["fast", "slow"]},
                "count": {"type": "integer"},
                "ratio": {"type": "number"},
                "flag": {"type": "boolean"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "extra": {"type": "object"},
            },
            "required": ["mode"],
        }
    )


class TestSchemaDefinition:
    def test_valid_schema_passes(self):
        _schema().validate()

    def test_root_must_be_object(self):
        with pytest.raises(InvalidSchemaError):
            ToolSchema(type="array").validate()

    def test_required_name_must_be_declared(self):
        schema = ToolSchema(properties={"a": Property(type="string")}, required=["a", "b"])
        with pytest.raises(InvalidSchemaError, match="'b'"):
            schema.validate()

    def test_unknown_property_type(self):
        schema = ToolSchema(properties={"a": Property(type="date")})
        with pytest.raises(InvalidSchemaError, match="invalid type"):
            schema.validate()

    def test_array_requires_items(self):
        schema = ToolSchema(properties={"a": Property(type="array")})
        with pytest.raises(InvalidSchemaError, match="items"):
            schema.validate()

    def test_nested_item_type_checked(self):
        schema = ToolSchema(properties={"a": Property(type="array", items=Property(type="tuple"))})
        with pytest.raises(InvalidSchemaError):
            schema.validate()

    def test_strict_only_when_all_required(self):
        props = {"a": Property(type="string"), "b": Property(type="integer")}
        assert ToolSchema(properties=props, required=["a", "b"]).strict
        assert not ToolSchema(properties=props, required=["a"]).strict

    def test_to_dict_omits_empty_required(self):
        out = ToolSchema(properties={"a": Property(type="string", description="x")}).to_dict()
        assert out == {"type": "object", "properties": {"a": {"type": "string", "description": "x"}}}


class TestValidateInput:
    def test_missing_required(self):
        with pytest.raises(ValidationError) as exc:
            _schema().validate_input({})
        assert exc.value.field == "mode"
        assert "required field missing" in str(exc.value)

    def test_unknown_fields_ignored(self):
        _schema().validate_input({"mode": "fast", "whatever": object()})

    def test_none_accepted_for_any_property(self):
        _schema().validate_input({"mode": "fast", "count": None, "tags": None})

    def test_enum_enforced(self):
        with pytest.raises(ValidationError) as exc:
            _schema().validate_input({"mode": "medium"})
        assert exc.value.field == "mode"
        assert exc.value.value == "medium"

    def test_whole_float_is_integer(self):
        _schema().validate_input({"mode": "fast", "count": 3.0})

    def test_fractional_float_is_not_integer(self):
        with pytest.raises(ValidationError, match="expected integer, got float"):
            _schema().validate_input({"mode": "fast", "count": 3.5})

    def test_number_accepts_int_and_float(self):
        _schema().validate_input({"mode": "fast", "ratio": 1})
        _schema().validate_input({"mode": "fast", "ratio": 0.25})

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError):
            _schema().validate_input({"mode": "fast", "ratio": True})
        with pytest.raises(ValidationError):
            _schema().validate_input({"mode": "fast", "count": False})

    def test_boolean_type(self):
        with pytest.raises(ValidationError, match="expected boolean"):
            _schema().validate_input({"mode": "fast", "flag": "yes"})

    def test_array_items_report_index(self):
        with pytest.raises(ValidationError) as exc:
            _schema().validate_input({"mode": "fast", "tags": ["a", "b", 3]})
        assert exc.value.field == "tags[2]"

    def test_object_type(self):
        with pytest.raises(ValidationError, match="expected object"):
            _schema().validate_input({"mode": "fast", "extra": []})


def test_nested_arrays_validate_recursively():
    prop = Property(type="array", items=Property(type="array", items=Property(type="number")))
    validate_value("grid", [[1, 2], [3.5]], prop)
    with pytest.raises(ValidationError) as exc:
        validate_value("grid", [[1, 2], [3, "x"]], prop)
    assert exc.value.field == "grid[1][1]"


def test_item_enum_reports_failing_item():
    prop = Property(type="array", items=Property(type="string", enum=["yes", "no"]))
    with pytest.raises(ValidationError) as exc:
        validate_value("answers", ["yes", "maybe"], prop)
    assert exc.value.field == "answers[1]"
    assert exc.value.value == "maybe"
    assert "value must be one of ['yes', 'no']" in str(exc.value)


def test_first_failing_item_is_reported():
    prop = Property(type="array", items=Property(type="integer"))
    with pytest.raises(ValidationError) as exc:
        validate_value("ids", [1, "two", 3.5], prop)
    assert exc.value.field == "ids[1]"
    assert "expected integer, got string" in str(exc.value)
