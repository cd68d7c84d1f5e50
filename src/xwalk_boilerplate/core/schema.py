from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import ScriptError
from ..exit_codes import ERR_VALIDATION


def load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def validate_payload(payload: Any, schema_path: Path, error_cls: type[ScriptError] | None = None) -> None:
    import jsonschema

    schema = load_json(schema_path)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        message = f"schema validation failed at {loc}: {exc.message}"
        if error_cls is not None:
            raise error_cls(message) from exc
        raise ScriptError(message, ERR_VALIDATION, kind="validation_error") from exc
