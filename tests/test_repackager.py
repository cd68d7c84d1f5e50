from __future__ import annotations

import os
import shutil
import zipfile
from pathlib import Path

import pytest
from helpers import BOILERPLATE_PATHS, make_tree, zip_names

from xwalk_boilerplate.errors import RepackageError
from xwalk_boilerplate.repackager import repackage


def test_repackage_includes_only_package_subtrees(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    (root / "README.md").write_text("not part of the package\n", encoding="utf-8")
    out = repackage(ctx, root, tmp_path / "out" / "converted.zip")
    names = zip_names(out)
    assert "META-INF/vault/filter.xml" in names
    assert "jcr_root/content/sta-xwalk-boilerplate/tools/.content.xml" in names
    assert "README.md" not in names
    assert names == sorted(names)


def test_repackage_uses_maximum_deflate_compression(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    out = repackage(ctx, root, tmp_path / "converted.zip")
    with zipfile.ZipFile(out) as archive:
        assert {info.compress_type for info in archive.infolist() if not info.is_dir()} == {zipfile.ZIP_DEFLATED}
        assert archive.testzip() is None


def test_repackage_keeps_empty_directories(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    (root / "jcr_root/content/empty").mkdir()
    out = repackage(ctx, root, tmp_path / "converted.zip")
    assert "jcr_root/content/empty/" in zip_names(out)


def test_repackage_removes_scratch_directory(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    repackage(ctx, root, tmp_path / "converted.zip")
    assert ctx.work_dir is not None
    assert list(ctx.work_dir.iterdir()) == []


def test_repackage_requires_meta_inf(ctx, tmp_path: Path) -> None:
    (tmp_path / "tree/jcr_root").mkdir(parents=True)
    with pytest.raises(RepackageError, match="META-INF"):
        repackage(ctx, tmp_path / "tree", tmp_path / "converted.zip")


def test_repackage_reports_unwritable_output(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    blocked = tmp_path / "blocked.zip"
    blocked.mkdir()
    with pytest.raises(RepackageError, match="Failed to create converted package"):
        repackage(ctx, root, blocked)
    assert list(ctx.work_dir.iterdir()) == []


def test_repackage_downgrades_cleanup_failures_to_warnings(ctx, tmp_path: Path, monkeypatch, capsys) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)

    def _fail(path, *args, **kwargs):
        raise OSError("device busy")

    monkeypatch.setattr("xwalk_boilerplate.core.fs.shutil.rmtree", _fail)
    out = repackage(ctx, root, tmp_path / "converted.zip")
    monkeypatch.undo()
    assert out.is_file()
    err = capsys.readouterr().err
    assert "cleanup_warning" in err
    assert "level=warning" in err
    for leftover in ctx.work_dir.iterdir():
        shutil.rmtree(leftover)


def _set_epoch_mtimes(root: Path) -> None:
    for path in [root, *root.rglob("*")]:
        os.utime(path, (0, 0))


def test_repackage_clamps_timestamps_before_1980(ctx, tmp_path: Path) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    _set_epoch_mtimes(root)
    out = repackage(ctx, root, tmp_path / "converted.zip")
    with zipfile.ZipFile(out) as archive:
        stamps = {info.date_time for info in archive.infolist()}
    assert stamps == {(1980, 1, 1, 0, 0, 0)}


def test_repackage_write_failure_leaves_no_partial_archive(ctx, tmp_path: Path, monkeypatch) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)

    def _fail(self, *args, **kwargs):
        raise ValueError("ZIP does not support timestamps before 1980")

    monkeypatch.setattr(zipfile.ZipFile, "write", _fail)
    with pytest.raises(RepackageError, match="timestamps before 1980"):
        repackage(ctx, root, tmp_path / "out" / "converted.zip")
    assert list((tmp_path / "out").iterdir()) == []
    assert list(ctx.work_dir.iterdir()) == []


def test_repackage_failure_keeps_previous_archive(ctx, tmp_path: Path, monkeypatch) -> None:
    root = make_tree(tmp_path / "tree", BOILERPLATE_PATHS)
    out = tmp_path / "converted.zip"
    out.write_bytes(b"previous archive")

    def _fail_copy(src, dest):
        raise OSError("permission denied")

    monkeypatch.setattr("xwalk_boilerplate.repackager.copy_subtree", _fail_copy)
    with pytest.raises(RepackageError, match="Failed to stage package contents"):
        repackage(ctx, root, out)
    assert out.read_bytes() == b"previous archive"
    monkeypatch.undo()

    def _fail_write(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(zipfile.ZipFile, "write", _fail_write)
    with pytest.raises(RepackageError, match="disk full"):
        repackage(ctx, root, out)
    assert out.read_bytes() == b"previous archive"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["_work", "converted.zip", "tree"]
