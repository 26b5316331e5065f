import pytest

from dynamic_mcp.errors import ConfigError
from dynamic_mcp.schema_validation import SchemaValidator
from dynamic_mcp.schema_validation import check_schema
from dynamic_mcp.schema_validation import validate

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Who to greet"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name"],
}


def test_valid_value_passes() -> None:
    assert validate({"name": "ada", "tags": ["x"]}, SCHEMA) is None


def test_missing_required_field_reports_field_path() -> None:
    failure = validate({}, SCHEMA)

    assert failure is not None
    assert failure.path == "$.name"
    assert failure.expected == "string"
    assert failure.actual == "missing"


def test_wrong_type_reports_expected_and_actual() -> None:
    failure = validate({"name": 3}, SCHEMA)

    assert failure is not None
    assert failure.path == "$.name"
    assert failure.expected == "string"
    assert failure.actual == "number"


def test_array_item_path() -> None:
    failure = validate({"name": "ada", "tags": ["a", 2]}, SCHEMA)

    assert failure is not None
    assert failure.path == "$.tags[1]"
    assert failure.actual == "number"


def test_top_level_type_mismatch() -> None:
    failure = validate([], SCHEMA)

    assert failure is not None
    assert failure.path == "$"
    assert failure.actual == "array"


def test_no_schema_accepts_everything() -> None:
    validator = SchemaValidator(None)

    assert validator.validate({"anything": [1, None]}) is None
    assert validate("text", None) is None


def test_invalid_schema_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        check_schema({"type": "not-a-type"})


def test_failure_codes_depend_on_stage() -> None:
    failure = validate({}, SCHEMA)
    assert failure is not None
    assert failure.code == -32602
    assert failure.to_data()["stage"] == "input"

    output_failure = failure.for_stage("output", raw="{}")

    assert output_failure.code == -32603
    assert output_failure.to_data()["raw"] == "{}"
    assert output_failure.path == "$.name"


def test_integers_and_floats_are_reported_as_number() -> None:
    assert validate(3, {"type": "number"}) is None

    failure = validate(1.5, {"type": "integer"})

    assert failure is not None
    assert failure.expected == "integer"
    assert failure.actual == "number"
