from __future__ import annotations

import re
from pathlib import Path

from .core.context import RunContext
from .core.logging import log_event
from .errors import RenameConflict, RepositoryNameInvalid, RepositoryNameMissing

PLACEHOLDER = "sta-xwalk-boilerplate"

_ATTR_VALUE = re.compile(r"""(?P<name>[\w:.-]+)(?P<eq>\s*=\s*)(?P<q>["'])(?P<value>.*?)(?P=q)""", re.DOTALL)


def validate_repo_name(repo_name: str | None) -> str:
    name = (repo_name or "").strip()
    if not name:
        raise RepositoryNameMissing("Repository name is required for conversion")
    if name in {".", ".."} or "/" in name or "\\" in name:
        raise RepositoryNameInvalid(f"Repository name is not a valid folder name: {name!r}")
    return name


def replace_placeholder(value: str, repo_name: str, placeholder: str = PLACEHOLDER) -> str:
    return value.replace(placeholder, repo_name)


def rewrite_manifest(
    xml_text: str,
    repo_name: str,
    placeholder: str = PLACEHOLDER,
    ctx: RunContext | None = None,
) -> str:
    def _swap(match: re.Match[str]) -> str:
        value = match.group("value")
        if placeholder not in value:
            return match.group(0)
        new_value = replace_placeholder(value, repo_name, placeholder)
        if ctx is not None:
            log_event(ctx, "info", "rewriter", "convert_path", attribute=match.group("name"), **{"from": value, "to": new_value})
        q = match.group("q")
        return f"{match.group('name')}{match.group('eq')}{q}{new_value}{q}"

    return _ATTR_VALUE.sub(_swap, xml_text)


def convert_page_paths(paths: list[str], repo_name: str, placeholder: str = PLACEHOLDER) -> list[str]:
    return [replace_placeholder(p, repo_name, placeholder) for p in paths]


def rename_tree(
    ctx: RunContext,
    jcr_root: Path,
    repo_name: str,
    placeholder: str = PLACEHOLDER,
) -> list[tuple[Path, Path]]:
    log_event(ctx, "info", "rewriter", "rename_tree", jcr_root=str(jcr_root), placeholder=placeholder, repo=repo_name)
    renamed: list[tuple[Path, Path]] = []
    for parent in (jcr_root / "content", jcr_root / "content" / "dam"):
        src = parent / placeholder
        if not src.is_dir():
            continue
        dest = parent / repo_name
        if dest == src:
            continue
        if dest.exists():
            raise RenameConflict(f"Cannot rename {src} -> {dest}: destination already exists")
        log_event(ctx, "info", "rewriter", "rename", **{"from": str(src), "to": str(dest)})
        try:
            src.rename(dest)
        except OSError as exc:
            raise RenameConflict(f"Cannot rename {src} -> {dest}: {exc}") from exc
        renamed.append((src, dest))
    return renamed
