"""Single orchestration entry point for detection and conversion.

LocateSource -> ExtractManifest -> Classify -> NotBoilerplate
                                            -> Rewrite -> RenameFolders -> Repackage -> Done
Any `ScriptError` moves the run to Failed and is reported via `error_message`.
"""

from __future__ import annotations

import json
import shutil
import zipfile
from dataclasses import dataclass, field, fields
from pathlib import Path

from .classifier import is_boilerplate
from .config.loader import Settings
from .core.context import RunContext
from .core.fs import copy_subtree, scratch_dir
from .core.logging import log_event
from .errors import ManifestNotFound, ManifestUnreadable, RepackageError, ScriptError
from .manifest import ARCHIVE_READ_ERRORS, extract_paths
from .repackager import repackage
from .rewriter import convert_page_paths, rename_tree, rewrite_manifest, validate_repo_name
from .source import JCR_ROOT, META_INF, PackageSource, locate_source, member_path


@dataclass(frozen=True)
class DetectionResult:
    source: PackageSource
    is_boilerplate: bool
    page_paths: list[str]

    @property
    def content_package_path(self) -> str:
        return self.source.content_package_path


@dataclass(frozen=True)
class ConversionResult:
    converted_package_path: Path
    converted_page_paths: list[str]
    renamed: list[tuple[Path, Path]]
    size_bytes: int


@dataclass(frozen=True)
class ActionInputs:
    zip_contents_path: str
    page_paths: list[str] = field(default_factory=list)
    repo_name: str = ""
    convert: bool = False
    output_dir: str = ""
    extract_only: bool = False
    operation: str = "Xwalk operation"


@dataclass
class ActionOutputs:
    is_boilerplate: str | None = None
    content_package_path: str | None = None
    page_paths: str | None = None
    converted_package_path: str | None = None
    converted_page_paths: str | None = None
    error_message: str | None = None
    error_kind: str | None = field(default=None, metadata={"internal": True})
    error_code: int = field(default=0, metadata={"internal": True})

    @property
    def failed(self) -> bool:
        return self.error_message is not None

    def as_dict(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if not f.metadata.get("internal") and getattr(self, f.name) is not None
        }


def parse_page_paths(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def detect(
    ctx: RunContext,
    zip_contents_path: str,
    settings: Settings,
    page_paths: list[str] | None = None,
) -> DetectionResult:
    source = locate_source(zip_contents_path, settings.manifest_path)
    log_event(ctx, "info", "pipeline", "source", kind=source.kind, path=str(source.archive or source.root))
    if page_paths:
        log_event(ctx, "info", "pipeline", "page_paths_supplied", count=len(page_paths))
        paths = list(page_paths)
    else:
        paths = extract_paths(ctx, source, settings.manifest_path)
    result = is_boilerplate(paths, settings.classifier)
    log_event(
        ctx,
        "info",
        "pipeline",
        "classified",
        policy=settings.classifier.name,
        is_boilerplate=result,
        count=len(paths),
    )
    return DetectionResult(source=source, is_boilerplate=result, page_paths=paths)


def _extract_archive(archive: zipfile.ZipFile, stage: Path) -> None:
    base = stage.resolve()
    for info in archive.infolist():
        name = member_path(info.filename)
        if not name:
            continue
        target = (stage / name).resolve()
        if not target.is_relative_to(base):
            raise ManifestUnreadable(f"Content package member escapes the package root: {info.filename}")
        if name.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        with archive.open(info) as src, target.open("wb") as dest:
            shutil.copyfileobj(src, dest)


def _stage_source(ctx: RunContext, source: PackageSource, stage: Path) -> None:
    if source.archive is not None:
        log_event(ctx, "info", "pipeline", "extract", archive=str(source.archive), target=str(stage))
        try:
            with zipfile.ZipFile(source.archive) as archive:
                _extract_archive(archive, stage)
        except ARCHIVE_READ_ERRORS as exc:
            raise ManifestUnreadable(f"Content package {source.archive.name} cannot be extracted: {exc}") from exc
        except OSError as exc:
            raise RepackageError(f"Failed to extract content package {source.archive}: {exc}") from exc
        return
    if not source.has_tree():
        raise RepackageError(f"Expected {JCR_ROOT} and {META_INF} directories not found in {source.root}")
    log_event(ctx, "info", "pipeline", "copy_tree", source=str(source.root), target=str(stage))
    try:
        for name in (JCR_ROOT, META_INF):
            copy_subtree(source.root / name, stage / name)
    except OSError as exc:
        raise RepackageError(f"Failed to copy extracted content from {source.root}: {exc}") from exc


def _rewrite_manifest_file(ctx: RunContext, manifest: Path, repo_name: str, settings: Settings) -> None:
    if not manifest.is_file():
        raise ManifestNotFound(f"{settings.manifest_path} not found in content package")
    try:
        original = manifest.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadable(f"Error reading {manifest}: {exc}") from exc
    log_event(ctx, "debug", "pipeline", "manifest_original", content=original)
    modified = rewrite_manifest(original, repo_name, settings.placeholder, ctx=ctx)
    log_event(ctx, "debug", "pipeline", "manifest_modified", content=modified)
    try:
        manifest.write_text(modified, encoding="utf-8")
    except OSError as exc:
        raise RepackageError(f"Failed to write {manifest}: {exc}") from exc
    log_event(ctx, "info", "pipeline", "manifest_updated", path=str(manifest))


def convert(
    ctx: RunContext,
    detection: DetectionResult,
    repo_name: str,
    settings: Settings,
    output_dir: str | Path | None = None,
) -> ConversionResult:
    repo = validate_repo_name(repo_name)
    source = detection.source
    target_dir = Path(output_dir) if output_dir else source.root
    output_path = (target_dir / settings.package.archive_name(repo)).resolve()
    log_event(ctx, "info", "pipeline", "convert", repo=repo, source=source.kind, output=str(output_path))
    with scratch_dir(ctx, "xwalk-stage") as stage:
        _stage_source(ctx, source, stage)
        _rewrite_manifest_file(ctx, stage / settings.manifest_path, repo, settings)
        jcr_root = stage / JCR_ROOT
        renamed: list[tuple[Path, Path]] = []
        if jcr_root.is_dir():
            renamed = rename_tree(ctx, jcr_root, repo, settings.placeholder)
        else:
            log_event(ctx, "warning", "pipeline", "jcr_root_missing", source=str(source.archive or source.root))
        repackage(ctx, stage, output_path, settings.package.compression_level)
    if not output_path.is_file():
        raise RepackageError("Failed to create converted package")
    return ConversionResult(
        converted_package_path=output_path,
        converted_page_paths=convert_page_paths(detection.page_paths, repo, settings.placeholder),
        renamed=[(src.relative_to(stage), dest.relative_to(stage)) for src, dest in renamed],
        size_bytes=output_path.stat().st_size,
    )


def run(ctx: RunContext, inputs: ActionInputs, settings: Settings) -> ActionOutputs:
    outputs = ActionOutputs()
    try:
        log_event(ctx, "info", "pipeline", "start", path=inputs.zip_contents_path, convert=inputs.convert)
        detection = detect(ctx, inputs.zip_contents_path, settings, inputs.page_paths)
        outputs.content_package_path = detection.content_package_path
        outputs.page_paths = ",".join(detection.page_paths)
        if inputs.extract_only:
            return outputs
        outputs.is_boilerplate = "true" if detection.is_boilerplate else "false"
        summary = ", ".join(detection.page_paths)
        if not detection.is_boilerplate:
            log_event(ctx, "info", "pipeline", "not_boilerplate", count=len(detection.page_paths), paths=summary)
            if inputs.convert:
                log_event(ctx, "info", "pipeline", "skip_conversion", reason="not boilerplate")
            return outputs
        log_event(ctx, "info", "pipeline", "boilerplate", count=len(detection.page_paths), paths=summary)
        if not inputs.convert:
            return outputs
        result = convert(ctx, detection, inputs.repo_name, settings, inputs.output_dir or None)
        outputs.converted_package_path = str(result.converted_package_path)
        outputs.converted_page_paths = json.dumps(result.converted_page_paths)
        log_event(
            ctx,
            "info",
            "pipeline",
            "converted",
            package=outputs.converted_package_path,
            paths=", ".join(result.converted_page_paths),
            total_bytes=result.size_bytes,
        )
        log_event(ctx, "info", "pipeline", "note", message="Assets will be skipped during upload for boilerplate packages")
    except ScriptError as exc:
        outputs.error_message = f"{inputs.operation} failed: {exc}"
        outputs.error_kind = exc.kind
        outputs.error_code = exc.code
        log_event(ctx, "error", "pipeline", "failed", kind=exc.kind, code=exc.code, message=outputs.error_message)
    return outputs
