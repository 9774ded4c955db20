from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Optional

from amdbridge.core.errors import BuildError
from amdbridge.core.models import AmdOptions
from amdbridge.core.report import BuildReport, StageTimer
from amdbridge.io.walker import OutputTreeWalker
from amdbridge.io.writer import OutputWriter
from amdbridge.logging.helpers import get_logger
from amdbridge.rendering.html_writer import IndexHtmlWriter
from amdbridge.runtime.session import BuildSession


class BuildRunner:
    """Drive full or partial build passes over one output directory.

    The runner keeps the session (and therefore the per-file module records
    and the entry page states) alive between passes, so a watcher can call
    :meth:`build` again with only the changed and removed paths.
    """

    def __init__(
        self,
        options: AmdOptions,
        *,
        session: Optional[BuildSession] = None,
        walker: Optional[OutputTreeWalker] = None,
        writer: Optional[OutputWriter] = None,
        html_writer: Optional[IndexHtmlWriter] = None,
        max_workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._log = logger or get_logger('runtime.runner')
        self._session = session or BuildSession(options, max_workers=max_workers)
        self._opts = self._session.options
        self._walker = walker or OutputTreeWalker(logger=get_logger('io.walker'))
        self._writer = writer or OutputWriter(logger=get_logger('io.writer'))
        self._html = html_writer or IndexHtmlWriter(
            self._opts,
            rewriter=self._session.rewriter,
            synthesize=self._session.synthesizer.synthesize,
            writer=self._writer,
        )
        self.last_report: Optional[BuildReport] = None

    @property
    def session(self) -> BuildSession:
        return self._session

    def build(
        self,
        root: Path,
        *,
        changed: Optional[Iterable[str]] = None,
        removed: Iterable[str] = (),
    ) -> BuildReport:
        """Run one pass over *root*.

        Args:
            root: Bundler output directory.
            changed: Relative paths to re-read; None re-reads every script and
                drops the records of scripts no longer on disk.
            removed: Relative paths deleted since the previous pass.

        Raises:
            BuildError: one or more scripts failed to transform. Successfully
                rewritten scripts are written; entry pages are left untouched.
        """
        root = Path(root)
        out_root = Path(self._opts.output_directory or root)
        snapshot = self._walker.read_snapshot(root, changed)
        removed = list(removed)
        if changed is None:
            # A full pass sees every script on disk; any other record is stale.
            present = set(snapshot) | set(snapshot.unreadable) | set(removed)
            removed.extend(p for p in self._session.cached_paths() if p not in present)
        result = self._session.run_pass(snapshot, removed=removed, unreadable=snapshot.unreadable)
        report = result.report
        self.last_report = report

        for rel, text in result.outputs.items():
            if text != snapshot.get(rel) or out_root != root:
                self._writer.write_text(out_root / rel, text)

        if not result.ok:
            report.finish()
            raise BuildError(result.errors)

        with StageTimer(report, 'html'):
            report.pages_written = self._html.write_all(root, result.modules, report=report)

        report.finish()
        self._log.info('✔ build finished in %.3fs', report.duration_s or 0.0)
        return report
