from __future__ import annotations

import argparse

from ..core.env import action_input
from ..pipeline import ActionInputs, parse_page_paths

OPERATIONS = {
    "detect": "Boilerplate detection",
    "convert": "Boilerplate conversion",
    "run": "Xwalk operation",
    "paths": "Content path extraction",
}


def _pick(ns: argparse.Namespace, attr: str, name: str) -> str:
    value = getattr(ns, attr, None)
    if value is not None:
        return str(value).strip()
    return action_input(name)


def _convert_flag(ns: argparse.Namespace) -> bool:
    if ns.cmd == "convert":
        return True
    if ns.cmd != "run":
        return False
    if getattr(ns, "convert", None):
        return True
    return action_input("convert").lower() == "true"


def read_inputs(ns: argparse.Namespace) -> ActionInputs:
    return ActionInputs(
        zip_contents_path=_pick(ns, "zip_contents_path", "zip_contents_path"),
        page_paths=parse_page_paths(_pick(ns, "page_paths", "page_paths")),
        repo_name=_pick(ns, "repo_name", "repo_name"),
        convert=_convert_flag(ns),
        output_dir=_pick(ns, "output_dir", "output_dir"),
        extract_only=ns.cmd == "paths",
        operation=OPERATIONS[ns.cmd],
    )
