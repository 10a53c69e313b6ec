from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import jsonschema

from turnledger.errors import ConfigurationError

from .base import AssertionFailure


def load_schema(schema: Mapping[str, Any] | str | Path) -> dict[str, Any]:
    if isinstance(schema, Mapping):
        return dict(schema)
    resolved = Path(schema)
    if not resolved.is_absolute():
        resolved = (Path.cwd() / resolved).resolve()
    try:
        loaded = json.loads(resolved.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Failed to load schema {schema}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Schema {schema} must be a JSON object")
    return loaded


def apply_json_schema(
    instance: Any,
    schema: Mapping[str, Any] | str | Path,
    *,
    subject: str = "Output",
) -> list[AssertionFailure]:
    validator = jsonschema.Draft202012Validator(load_schema(schema))
    errors = sorted(validator.iter_errors(instance), key=lambda err: list(err.path))
    if not errors:
        return []

    first = errors[0]
    path = "/".join(str(part) for part in first.path) or "<root>"
    details: dict[str, object] = {"path": path, "error": first.message}
    message = f"{subject} failed schema validation at {path}: {first.message}"
    if first.validator == "required" and isinstance(first.validator_value, list):
        missing = []
        if isinstance(first.instance, dict):
            missing = [field for field in first.validator_value if field not in first.instance]
        if missing:
            message = f"{subject} failed schema validation at {path}: missing required field(s): {', '.join(missing)}"
            details["missing"] = missing
    return [AssertionFailure(type="json_schema", message=message, details=details)]
