"""JSON Schema validation helpers."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

from aliasfs.core.errors import InvalidArgument


def validate_jsonschema(schema: dict[str, Any], data: dict[str, Any]) -> None:
    validator = Draft202012Validator(schema)
    errors = list(validator.iter_errors(data))
    if not errors:
        return
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.path)
        messages.append(f"{location}: {error.message}" if location else error.message)
    raise InvalidArgument("Invalid arguments: " + "; ".join(messages))
