from __future__ import annotations

import argparse
import sys

from . import __version__
from .actions import build_payload, read_inputs, render_json, render_text, write_outputs
from .config import load_settings
from .core.context import RunContext
from .core.logging import log_event
from .errors import ScriptError
from .exit_codes import ERR_INTERNAL, OK
from .pipeline import ActionOutputs, run

COMMANDS = ("detect", "convert", "run", "paths")


def _add_input_args(p: argparse.ArgumentParser, repo: bool = False, convert_flag: bool = False) -> None:
    p.add_argument("--zip-contents-path", help="directory holding the content package zip or extracted tree")
    p.add_argument("--page-paths", help="comma-separated filter paths supplied by an upstream step")
    if repo:
        p.add_argument("--repo-name", help="repository name that replaces the boilerplate placeholder")
        p.add_argument("--output-dir", help="directory for the converted package (defaults to the input directory)")
    if convert_flag:
        p.add_argument("--convert", action="store_true", default=None, help="convert the package when it is boilerplate")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="xwalk-boilerplate")
    p.add_argument("--version", action="version", version=f"xwalk-boilerplate {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--run-id", help="run identifier used in log events")
    p.add_argument("--config", help="YAML config file merged over the bundled defaults")
    p.add_argument("--policy", choices=["strict", "permissive"], help="boilerplate classifier policy")
    p.add_argument("--work-dir", help="parent directory for scratch directories")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines on stderr")
    p.add_argument("--fail-on-error", action="store_true", help="exit non-zero when error_message is set")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events")
    vg.add_argument("--quiet", action="store_true", help="only emit warnings and errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    _add_input_args(sub.add_parser("detect", help="detect whether the content package is boilerplate"))
    _add_input_args(sub.add_parser("convert", help="detect and convert a boilerplate package"), repo=True)
    _add_input_args(
        sub.add_parser("run", help="detect, and convert when --convert or INPUT_CONVERT=true"),
        repo=True,
        convert_flag=True,
    )
    _add_input_args(sub.add_parser("paths", help="extract content package path and filter paths only"))
    sub.add_parser("version", help="print version")
    return p


def _emit(ctx: RunContext, command: str, outputs: ActionOutputs) -> None:
    if ctx.as_json:
        print(render_json(build_payload(ctx, command, outputs)))
    else:
        text = render_text(outputs)
        if text:
            print(text)


def _exit_code(ns: argparse.Namespace, outputs: ActionOutputs) -> int:
    if ns.fail_on_error and outputs.failed:
        return outputs.error_code or ERR_INTERNAL
    return OK


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    ctx = RunContext.from_args(
        ns.run_id,
        "json" if ns.json else "text",
        ns.log_json,
        ns.verbose,
        ns.quiet,
        ns.work_dir,
    )
    if ns.cmd == "version":
        if ctx.as_json:
            print(render_json({"schema_version": 1, "tool": "xwalk-boilerplate", "version": __version__}))
        else:
            print(f"xwalk-boilerplate {__version__}")
        return OK
    inputs = read_inputs(ns)
    try:
        settings = load_settings(ns.config, ns.policy)
        log_event(ctx, "debug", "cli", "settings", source=settings.source, policy=settings.classifier.name)
        outputs = run(ctx, inputs, settings)
    except ScriptError as exc:
        outputs = ActionOutputs(
            error_message=f"{inputs.operation} failed: {exc}",
            error_kind=exc.kind,
            error_code=exc.code,
        )
        log_event(ctx, "error", "cli", "failed", kind=exc.kind, code=exc.code, message=outputs.error_message)
    except Exception as exc:  # pragma: no cover
        outputs = ActionOutputs(
            error_message=f"{inputs.operation} failed: internal error: {exc}",
            error_kind="internal",
            error_code=ERR_INTERNAL,
        )
        log_event(ctx, "error", "cli", "internal_error", error=repr(exc))
    try:
        write_outputs(ctx, outputs)
    except (OSError, ScriptError) as exc:
        print(f"unable to write action outputs: {exc}", file=sys.stderr)
        return ERR_INTERNAL
    _emit(ctx, ns.cmd, outputs)
    return _exit_code(ns, outputs)


if __name__ == "__main__":
    raise SystemExit(main())
