"""Vault filter manifest (`META-INF/vault/filter.xml`) reading and path extraction."""

from __future__ import annotations

import re
import zipfile
from pathlib import Path

from .core.context import RunContext
from .core.logging import log_event
from .errors import ManifestNotFound, ManifestUnreadable
from .source import DEFAULT_MANIFEST_PATH, PackageSource, member_path

# zipfile raises RuntimeError for encrypted members and NotImplementedError for unknown methods
ARCHIVE_READ_ERRORS: tuple[type[Exception], ...] = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    RuntimeError,
    NotImplementedError,
)

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_VALUE = r"""(?P<q>["'])(?P<root>.*?)(?P=q)"""

FILTER_PATTERNS: tuple[re.Pattern[str], ...] = (
    # <filter root="/path"/>
    re.compile(rf"<filter\s+root\s*=\s*{_VALUE}\s*/>"),
    # <filter root="/path"></filter>
    re.compile(rf"<filter\s+root\s*=\s*{_VALUE}\s*>\s*</filter>"),
    # <filter root="/path"><include pattern="..."/></filter>
    re.compile(rf"<filter\s+root\s*=\s*{_VALUE}[^>]*>.*?</filter>", re.DOTALL),
    # <filter mode="merge" root="/path">
    re.compile(rf"<filter\b[^>]*?\sroot\s*=\s*{_VALUE}[^>]*>"),
)


def parse_filter_paths(xml_text: str) -> list[str]:
    text = _COMMENT.sub(lambda m: " " * len(m.group(0)), xml_text)
    found: dict[str, int] = {}
    for pattern in FILTER_PATTERNS:
        for match in pattern.finditer(text):
            path = match.group("root").strip()
            if not path:
                continue
            start = match.start()
            if path not in found or start < found[path]:
                found[path] = start
    return sorted(found, key=found.__getitem__)


def _member_name(archive: zipfile.ZipFile, manifest_path: str) -> str | None:
    wanted = manifest_path.strip("/")
    for name in archive.namelist():
        if member_path(name) == wanted:
            return name
    return None


def _read_from_archive(archive_path: Path, manifest_path: str) -> bytes:
    try:
        with zipfile.ZipFile(archive_path) as archive:
            member = _member_name(archive, manifest_path)
            if member is None:
                raise ManifestNotFound(f"{manifest_path} not found in content package {archive_path.name}")
            return archive.read(member)
    except ARCHIVE_READ_ERRORS as exc:
        raise ManifestUnreadable(f"Error extracting {manifest_path} from {archive_path.name}: {exc}") from exc
    except OSError as exc:
        raise ManifestUnreadable(f"Error reading content package {archive_path}: {exc}") from exc


def _read_from_directory(root: Path, manifest_path: str) -> bytes:
    path = root / manifest_path
    if not path.is_file():
        raise ManifestNotFound(f"{manifest_path} not found in {root}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ManifestUnreadable(f"Error reading {manifest_path} from boilerplate content: {exc}") from exc


def read_manifest(source: PackageSource, manifest_path: str = DEFAULT_MANIFEST_PATH) -> str:
    if source.archive is not None:
        raw = _read_from_archive(source.archive, manifest_path)
    else:
        raw = _read_from_directory(source.root, manifest_path)
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ManifestUnreadable(f"{manifest_path} is not valid UTF-8: {exc}") from exc


def extract_paths(ctx: RunContext, source: PackageSource, manifest_path: str = DEFAULT_MANIFEST_PATH) -> list[str]:
    text = read_manifest(source, manifest_path)
    log_event(ctx, "debug", "manifest", "read", source=source.kind, content=text)
    paths = parse_filter_paths(text)
    log_event(ctx, "info", "manifest", "parsed", source=source.kind, count=len(paths), paths=",".join(paths))
    return paths
