"""Locate the content package inside a CI working directory.

A working directory holds either a content-package zip or an already
extracted `jcr_root/` + `META-INF/` tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .errors import InputNotFound, ManifestNotFound

SourceKind = Literal["zip", "directory"]

JCR_ROOT = "jcr_root"
META_INF = "META-INF"
DEFAULT_MANIFEST_PATH = "META-INF/vault/filter.xml"
CONVERTED_PREFIX = "converted-"


@dataclass(frozen=True)
class PackageSource:
    kind: SourceKind
    root: Path
    archive: Path | None = None

    @property
    def content_package_path(self) -> str:
        return str(self.archive) if self.archive is not None else ""

    @property
    def jcr_root(self) -> Path:
        return self.root / JCR_ROOT

    @property
    def meta_inf(self) -> Path:
        return self.root / META_INF

    def has_tree(self) -> bool:
        return self.jcr_root.is_dir() and self.meta_inf.is_dir()


def member_path(name: str) -> str:
    """Archive member name as a relative forward-slash path (Windows-built zips use `\\`)."""
    return name.replace("\\", "/").removeprefix("./").lstrip("/")


def find_content_package(root: Path) -> Path | None:
    # archives written by a previous conversion are never picked up as input
    zips = sorted(
        p
        for p in root.iterdir()
        if p.is_file() and p.name.lower().endswith(".zip") and not p.name.startswith(CONVERTED_PREFIX)
    )
    return zips[0] if zips else None


def locate_source(zip_contents_path: str | Path | None, manifest_path: str = DEFAULT_MANIFEST_PATH) -> PackageSource:
    if not zip_contents_path or not str(zip_contents_path).strip():
        raise InputNotFound("Zip contents path not found: (empty)")
    root = Path(zip_contents_path)
    if not root.is_dir():
        raise InputNotFound(f"Zip contents path not found: {zip_contents_path}")
    archive = find_content_package(root)
    if archive is not None:
        return PackageSource(kind="zip", root=root, archive=archive)
    if (root / manifest_path).is_file():
        return PackageSource(kind="directory", root=root)
    raise ManifestNotFound("No .zip files found in the specified directory and no boilerplate content detected.")
