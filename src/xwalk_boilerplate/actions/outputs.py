from __future__ import annotations

import json
import uuid
from pathlib import Path

from ..core.context import RunContext
from ..core.env import getenv
from ..core.logging import log_event
from ..core.schema import validate_payload
from ..errors import ScriptError
from ..pipeline import ActionOutputs

TOOL = "xwalk-boilerplate"
SCHEMA_PATH = Path(__file__).resolve().parents[1] / "contracts" / "outputs.schema.json"


def format_output(name: str, value: str) -> str:
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in value:
        raise ScriptError(f"output value for {name} contains the generated delimiter", kind="output_error")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(ctx: RunContext, outputs: ActionOutputs, path: str | None = None) -> Path | None:
    target = path or getenv("GITHUB_OUTPUT")
    if not target:
        return None
    out = Path(target)
    with out.open("a", encoding="utf-8") as handle:
        for name, value in outputs.as_dict().items():
            handle.write(format_output(name, value))
    log_event(ctx, "debug", "actions", "outputs_written", path=str(out), keys=",".join(outputs.as_dict()))
    return out


def build_payload(ctx: RunContext, command: str, outputs: ActionOutputs) -> dict[str, object]:
    payload: dict[str, object] = {
        "schema_version": 1,
        "tool": TOOL,
        "status": "fail" if outputs.failed else "ok",
        "run_id": ctx.run_id,
        "command": command,
        "outputs": outputs.as_dict(),
    }
    if outputs.failed:
        payload["error"] = {"kind": outputs.error_kind or "internal", "code": outputs.error_code}
    validate_payload(payload, SCHEMA_PATH)
    return payload


def render_text(outputs: ActionOutputs) -> str:
    return "\n".join(f"{name}={value}" for name, value in outputs.as_dict().items())


def render_json(payload: dict[str, object]) -> str:
    return json.dumps(payload, sort_keys=True)
