"""CI key/value plumbing: action inputs from flags or `INPUT_*`, outputs to `$GITHUB_OUTPUT`."""

from .inputs import read_inputs
from .outputs import build_payload, render_json, render_text, write_outputs

__all__ = ["build_payload", "read_inputs", "render_json", "render_text", "write_outputs"]
