from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .context import RunContext
from .logging import log_event


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_tree(ctx: RunContext, path: Path) -> bool:
    """Remove a scratch tree; failures are reported as cleanup warnings, never raised."""
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
    except OSError as exc:
        log_event(ctx, "warning", "fs", "cleanup", kind="cleanup_warning", path=str(path), error=str(exc))
        return False
    return True


@contextmanager
def scratch_dir(ctx: RunContext, prefix: str) -> Iterator[Path]:
    parent = ensure_dir(ctx.work_dir) if ctx.work_dir else None
    path = Path(tempfile.mkdtemp(prefix=f"{prefix}-", dir=parent))
    log_event(ctx, "debug", "fs", "scratch_created", path=str(path))
    try:
        yield path
    finally:
        if remove_tree(ctx, path):
            log_event(ctx, "debug", "fs", "scratch_removed", path=str(path))


def copy_subtree(src: Path, dest: Path) -> Path:
    shutil.copytree(src, dest)
    return dest
