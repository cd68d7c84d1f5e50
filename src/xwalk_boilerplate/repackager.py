from __future__ import annotations

import os
import zipfile
from pathlib import Path

from .core.context import RunContext
from .core.fs import copy_subtree, ensure_dir, scratch_dir
from .core.logging import log_event
from .errors import RepackageError
from .source import JCR_ROOT, META_INF

PACKAGE_SUBTREES: tuple[str, ...] = (JCR_ROOT, META_INF)
PARTIAL_SUFFIX = ".partial"

# errors zipfile raises while writing members (pre-1980 mtimes, zip64 limits)
ARCHIVE_WRITE_ERRORS: tuple[type[Exception], ...] = (OSError, ValueError, zipfile.LargeZipFile)


def _iter_members(root: Path) -> list[tuple[Path, str]]:
    members: list[tuple[Path, str]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        rel_dir = base.relative_to(root).as_posix()
        if rel_dir != "." and not filenames and not dirnames:
            members.append((base, f"{rel_dir}/"))
        for name in filenames:
            path = base / name
            members.append((path, path.relative_to(root).as_posix()))
    return sorted(members, key=lambda member: member[1])


def write_archive(source_dir: Path, output_path: Path, compression_level: int = 9) -> int:
    ensure_dir(output_path.parent)
    with zipfile.ZipFile(
        output_path,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=compression_level,
        strict_timestamps=False,
    ) as archive:
        for path, arcname in _iter_members(source_dir):
            if arcname.endswith("/"):
                archive.writestr(zipfile.ZipInfo(arcname), b"")
            else:
                archive.write(path, arcname)
    return output_path.stat().st_size


def repackage(ctx: RunContext, tree_root: Path, output_path: Path, compression_level: int = 9) -> Path:
    if not (tree_root / META_INF).is_dir():
        raise RepackageError(f"Expected {META_INF} not found in {tree_root}")
    subtrees = [name for name in PACKAGE_SUBTREES if (tree_root / name).is_dir()]
    log_event(ctx, "info", "repackager", "start", source=str(tree_root), output=str(output_path), subtrees=",".join(subtrees))
    with scratch_dir(ctx, "xwalk-package") as work:
        try:
            for name in subtrees:
                copy_subtree(tree_root / name, work / name)
        except OSError as exc:
            raise RepackageError(f"Failed to stage package contents from {tree_root}: {exc}") from exc
        # an existing archive at output_path is only replaced once the new one is complete
        partial = output_path.with_name(output_path.name + PARTIAL_SUFFIX)
        try:
            size = write_archive(work, partial, compression_level)
            os.replace(partial, output_path)
        except ARCHIVE_WRITE_ERRORS as exc:
            if partial.is_file():
                partial.unlink()
            raise RepackageError(f"Failed to create converted package {output_path}: {exc}") from exc
    log_event(ctx, "info", "repackager", "done", output=str(output_path), total_bytes=size)
    return output_path
