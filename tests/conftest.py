from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import settings

from xwalk_boilerplate.config import Settings, load_settings
from xwalk_boilerplate.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration"}
_SCRUBBED_ENV = (
    "GITHUB_OUTPUT",
    "RUN_ID",
    "GITHUB_RUN_ID",
    "XWALK_BOILERPLATE_CONFIG",
    "XWALK_CLASSIFIER_POLICY",
    "XWALK_LOG_JSON",
    "XWALK_WORK_DIR",
    "INPUT_ZIP_CONTENTS_PATH",
    "INPUT_PAGE_PATHS",
    "INPUT_REPO_NAME",
    "INPUT_CONVERT",
    "INPUT_OUTPUT_DIR",
)

settings.register_profile("xwalk", deadline=None, database=None)
settings.load_profile("xwalk")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def clean_action_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SCRUBBED_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    work = tmp_path / "_work"
    work.mkdir()
    return RunContext.from_args("pytest-run", quiet=True, work_dir=str(work))


@pytest.fixture
def xwalk_settings() -> Settings:
    return load_settings()
