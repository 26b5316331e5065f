"""JSON schema validation for tool input and output values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError, best_match
from jsonschema.validators import validator_for

from dynamic_mcp.errors import ConfigError, SchemaValidationFailed


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def format_path(parts: Iterable[Any]) -> str:
    out = "$"
    for part in parts:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


def _describe_expected(expected: Any) -> str:
    if isinstance(expected, list):
        return " | ".join(str(item) for item in expected)
    return str(expected)


def _to_failure(error: ValidationError) -> SchemaValidationFailed:
    parts = list(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, Mapping):
        missing = [name for name in error.validator_value if name not in error.instance]
        field = missing[0] if missing else ""
        field_schema = error.schema.get("properties", {}).get(field, {}) if isinstance(error.schema, Mapping) else {}
        expected = _describe_expected(field_schema.get("type", "any")) if isinstance(field_schema, Mapping) else "any"
        return SchemaValidationFailed(
            format_path([*parts, field]),
            expected,
            "missing",
            f"missing required field {field!r}",
        )
    if error.validator == "type":
        expected = _describe_expected(error.validator_value)
    else:
        expected = f"{error.validator}: {error.validator_value!r}"
    return SchemaValidationFailed(
        format_path(parts),
        expected,
        json_type_name(error.instance),
        error.message,
    )


class SchemaValidator:
    """Validator bound to one schema; ``None`` accepts every value."""

    def __init__(self, schema: Mapping[str, Any] | None) -> None:
        self.schema = schema
        self._validator = None
        if schema is not None:
            validator_cls = validator_for(schema, default=Draft202012Validator)
            try:
                validator_cls.check_schema(schema)
            except SchemaError as exc:
                raise ConfigError(f"Invalid schema: {exc.message}") from exc
            self._validator = validator_cls(schema)

    def validate(self, value: Any) -> SchemaValidationFailed | None:
        if self._validator is None:
            return None
        error = best_match(self._validator.iter_errors(value))
        if error is None:
            return None
        return _to_failure(error)


def check_schema(schema: Mapping[str, Any] | None) -> None:
    SchemaValidator(schema)


def validate(value: Any, schema: Mapping[str, Any] | None) -> SchemaValidationFailed | None:
    return SchemaValidator(schema).validate(value)
