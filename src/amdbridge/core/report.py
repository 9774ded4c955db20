from __future__ import annotations

"""
Build pass report.

Counts what a pass did to the output tree, how long each stage took and which
files failed. Serialized with ``to_json()`` for ``--report``.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional


@dataclass
class BuildReport:
    started_at: float = field(default_factory=time.perf_counter)
    finished_at: float | None = None
    duration_s: float | None = None

    files_total: int = 0
    files_rewritten: int = 0
    files_unchanged: int = 0
    files_excluded: int = 0
    files_failed: int = 0
    files_removed: int = 0

    modules: List[str] = field(default_factory=list)
    pages_written: List[str] = field(default_factory=list)

    time_by_stage: Dict[str, float] = field(
        default_factory=lambda: {
            "transform": 0.0,
            "union": 0.0,
            "synthesize": 0.0,
            "html": 0.0,
        }
    )

    errors: List[str] = field(default_factory=list)

    def add_time(self, stage: str, seconds: float) -> None:
        self.time_by_stage[stage] = self.time_by_stage.get(stage, 0.0) + seconds

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def set_modules(self, modules: Iterable[str]) -> None:
        self.modules = list(modules)

    def finish(self) -> None:
        self.finished_at = time.perf_counter()
        self.duration_s = self.finished_at - self.started_at

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(
            {
                "duration_s": self.duration_s,
                "files_total": self.files_total,
                "files_rewritten": self.files_rewritten,
                "files_unchanged": self.files_unchanged,
                "files_excluded": self.files_excluded,
                "files_failed": self.files_failed,
                "files_removed": self.files_removed,
                "modules": self.modules,
                "pages_written": self.pages_written,
                "time_by_stage": self.time_by_stage,
                "errors": self.errors,
            },
            indent=indent,
        )


class StageTimer:
    def __init__(self, report: BuildReport, stage: str):
        self._report = report
        self._stage = stage
        self._t0: float | None = None

    def __enter__(self):
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._t0 is not None:
            self._report.add_time(self._stage, time.perf_counter() - self._t0)
        return False
