from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .clock import utc_stamp
from .env import getenv, getenv_bool

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    output_format: OutputFormat
    log_json: bool
    verbose: bool
    quiet: bool
    work_dir: Path | None

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    @classmethod
    def from_args(
        cls,
        run_id: str | None = None,
        output_format: OutputFormat = "text",
        log_json: bool = False,
        verbose: bool = False,
        quiet: bool = False,
        work_dir: str | None = None,
    ) -> "RunContext":
        default_run = f"xwalk-{utc_stamp()}"
        resolved_run_id = run_id or getenv("RUN_ID") or getenv("GITHUB_RUN_ID") or default_run
        resolved_work_dir = work_dir or getenv("XWALK_WORK_DIR")
        return cls(
            run_id=resolved_run_id,
            output_format=output_format,
            log_json=log_json or getenv_bool("XWALK_LOG_JSON"),
            verbose=verbose,
            quiet=quiet,
            work_dir=Path(resolved_work_dir).resolve() if resolved_work_dir else None,
        )
