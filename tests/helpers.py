from __future__ import annotations

import os
import struct
import subprocess
import sys
import zipfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

BOILERPLATE_PATHS = [
    "/content/sta-xwalk-boilerplate/tools",
    "/content/sta-xwalk-boilerplate/block-collection",
    "/content/dam/sta-xwalk-boilerplate/block-collection",
]

FILTER_STYLES = ("self_closing", "empty_body", "content", "attributes")


def filter_xml(paths: list[str], style: str = "empty_body") -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', '<workspaceFilter version="1.0">']
    for path in paths:
        if style == "self_closing":
            lines.append(f'    <filter root="{path}"/>')
        elif style == "empty_body":
            lines.append(f'    <filter root="{path}"></filter>')
        elif style == "content":
            lines.append(f'    <filter root="{path}">')
            lines.append(f'        <include pattern="{path}/.*"/>')
            lines.append("    </filter>")
        elif style == "attributes":
            lines.append(f'    <filter mode="merge" root="{path}"/>')
        else:
            raise ValueError(style)
    lines.append("</workspaceFilter>")
    return "\n".join(lines) + "\n"


def make_tree(root: Path, paths: list[str], style: str = "empty_body") -> Path:
    vault = root / "META-INF" / "vault"
    vault.mkdir(parents=True, exist_ok=True)
    (vault / "filter.xml").write_text(filter_xml(paths, style), encoding="utf-8")
    (vault / "properties.xml").write_text("<properties/>\n", encoding="utf-8")
    for path in paths:
        page = root / "jcr_root" / path.lstrip("/")
        page.mkdir(parents=True, exist_ok=True)
        (page / ".content.xml").write_text(f'<jcr:root title="{page.name}"/>\n', encoding="utf-8")
    return root


def make_zip(
    target_dir: Path,
    tree_root: Path,
    name: str = "content-package.zip",
    compression: int = zipfile.ZIP_DEFLATED,
    separator: str = "/",
) -> Path:
    target_dir.mkdir(parents=True, exist_ok=True)
    archive_path = target_dir / name
    with zipfile.ZipFile(archive_path, "w", compression=compression) as archive:
        for path in sorted(tree_root.rglob("*")):
            if path.is_file():
                archive.write(path, path.relative_to(tree_root).as_posix().replace("/", separator))
    return archive_path


def zip_names(archive_path: Path) -> list[str]:
    with zipfile.ZipFile(archive_path) as archive:
        return archive.namelist()


def zip_text(archive_path: Path, member: str) -> str:
    with zipfile.ZipFile(archive_path) as archive:
        return archive.read(member).decode("utf-8")


def snapshot(root: Path) -> list[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))


def run_cli(*args: str, cwd: Path | None = None, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    merged = {k: v for k, v in os.environ.items() if not k.startswith("INPUT_") and k != "GITHUB_OUTPUT"}
    merged["PYTHONPATH"] = str(ROOT / "src")
    merged.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "xwalk_boilerplate.cli", *args],
        cwd=cwd or ROOT,
        env=merged,
        text=True,
        capture_output=True,
        check=False,
    )


def patch_zip_headers(archive_path: Path, flag_bits: int | None = None, method: int | None = None) -> None:
    """Overwrite general-purpose flags or compression method in every local and central header."""
    data = bytearray(archive_path.read_bytes())
    for signature, flag_at, method_at in ((b"PK\x03\x04", 6, 8), (b"PK\x01\x02", 8, 10)):
        start = data.find(signature)
        while start != -1:
            if flag_bits is not None:
                struct.pack_into("<H", data, start + flag_at, flag_bits)
            if method is not None:
                struct.pack_into("<H", data, start + method_at, method)
            start = data.find(signature, start + len(signature))
    archive_path.write_bytes(bytes(data))
