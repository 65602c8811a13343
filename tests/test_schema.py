import pytest

from pycowork.errors import SchemaViolation
from pycowork.tools.schema import (
    ArrayParam,
    BooleanParam,
    EnumParam,
    NumberParam,
    ObjectParam,
    StringParam,
    validate,
)

SCHEMA = ObjectParam(
    properties={
        "name": StringParam(description="who"),
        "count": NumberParam(integer=True, minimum=1, default=3),
        "mode": EnumParam(values=("fast", "slow")),
        "flags": ArrayParam(items=BooleanParam(), max_items=2),
    },
    required=("name",),
)


def test_defaults_are_applied_and_unknown_keys_dropped():
    out = validate(SCHEMA, {"name": "a", "extra": 1})
    assert out == {"name": "a", "count": 3}


def test_null_optional_is_treated_as_absent():
    assert validate(SCHEMA, {"name": "a", "mode": None}) == {"name": "a", "count": 3}


def test_integral_float_is_accepted_as_integer():
    assert validate(SCHEMA, {"name": "a", "count": 5.0})["count"] == 5


def test_all_problems_are_reported_together():
    with pytest.raises(SchemaViolation) as exc:
        validate(SCHEMA, {"count": 0, "mode": "medium", "flags": [True, "x", False]}, tool="demo")
    errors = exc.value.errors
    assert "name: field is required" in errors
    assert "count: must be >= 1" in errors
    assert any(e.startswith("mode: expected one of") for e in errors)
    assert "flags: expected at most 2 item(s), got 3" in errors
    assert "flags[1]: expected boolean, got string" in errors
    assert str(exc.value).startswith("Invalid arguments for demo: ")


def test_bool_is_not_a_number():
    with pytest.raises(SchemaViolation):
        validate(SCHEMA, {"name": "a", "count": True})


def test_non_object_arguments_are_rejected():
    with pytest.raises(SchemaViolation) as exc:
        validate(SCHEMA, ["name"])
    assert exc.value.errors == ["arguments: expected object, got array"]


def test_validate_does_not_mutate_input():
    args = {"name": "a"}
    validate(SCHEMA, args)
    assert args == {"name": "a"}


def test_json_schema_rendering():
    schema = SCHEMA.to_json_schema()
    assert schema["type"] == "object"
    assert schema["required"] == ["name"]
    assert schema["properties"]["count"] == {"type": "integer", "minimum": 1, "default": 3}
    assert schema["properties"]["mode"]["enum"] == ["fast", "slow"]
    assert schema["properties"]["flags"]["maxItems"] == 2
