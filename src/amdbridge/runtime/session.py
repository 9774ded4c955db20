from __future__ import annotations
"""
session – one build session over a bundler's output tree.

A session owns the rewriter, the per-file external module cache and the
external module union of the current pass. Each pass:

  1. resets the union,
  2. transforms every candidate file (optionally in a thread pool); each task
     writes only the cache record of its own path,
  3. waits for every transform to finish,
  4. drops the records of removed files and recomputes the union.

Only then may the bootstrap script be synthesized.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from amdbridge.core.errors import BuildError, SourceEncodingError, TransformError
from amdbridge.core.interfaces.cache import ModuleCacheProtocol
from amdbridge.core.interfaces.transform import FileTransformProtocol, SourceRewriterProtocol
from amdbridge.core.models import AmdOptions, ModuleSet, ScriptRef
from amdbridge.core.report import BuildReport, StageTimer
from amdbridge.logging.helpers import for_file, get_logger
from amdbridge.processing.module_cache import ExternalModuleCache
from amdbridge.processing.rewriter import IdentifierRewriter
from amdbridge.rendering.bootstrap import BootstrapSynthesizer
from amdbridge.constants import SCRIPT_SUFFIXES
from amdbridge.utils.paths import matches_prefix, normalize_path


@dataclass
class PassResult:
    """Outcome of one build pass."""
    outputs: Dict[str, str] = field(default_factory=dict)
    modules: Tuple[str, ...] = ()
    errors: List[TransformError] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    report: BuildReport = field(default_factory=BuildReport)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise BuildError(self.errors)


class BuildSession(FileTransformProtocol):
    def __init__(
        self,
        options: AmdOptions,
        *,
        rewriter: Optional[SourceRewriterProtocol] = None,
        cache: Optional[ModuleCacheProtocol] = None,
        synthesizer: Optional[BootstrapSynthesizer] = None,
        suffixes: Sequence[str] = SCRIPT_SUFFIXES,
        max_workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._options = options.validate()
        self._log = logger or get_logger('runtime.session')
        self._rewriter = rewriter or IdentifierRewriter(
            renames=options.renames,
            packages=options.packages,
            logger=get_logger('processing.rewriter'),
        )
        self._cache = cache or ExternalModuleCache()
        self._synth = synthesizer or BootstrapSynthesizer(renames=options.renames)
        self._suffixes = tuple(s.lower() for s in suffixes)
        self._workers = max(1, int(max_workers))
        self._modules: ModuleSet = ModuleSet()

    @property
    def options(self) -> AmdOptions:
        return self._options

    @property
    def rewriter(self) -> SourceRewriterProtocol:
        return self._rewriter

    @property
    def modules(self) -> Tuple[str, ...]:
        """External modules of the last completed pass, in deterministic order."""
        return tuple(self._modules)

    def is_candidate(self, path: str) -> bool:
        rel = normalize_path(path)
        if not rel.lower().endswith(self._suffixes):
            return False
        return not matches_prefix(rel, self._options.exclude_paths)

    def transform(self, path: str, content: str) -> Optional[str]:
        """Rewrite one file and refresh its cache record.

        Returns None for paths this session does not handle. On failure the
        file's record is dropped and the error (carrying *path*) propagates.
        """
        rel = normalize_path(path)
        if not self.is_candidate(rel):
            return None
        found: Optional[ModuleSet] = ModuleSet() if self._options.track_modules else None
        try:
            rewritten = self._rewriter.rewrite(content, found, path=rel)
        except TransformError as exc:
            self._cache.record(rel, ())
            raise exc.with_path(rel)
        self._cache.record(rel, found or ())
        if rewritten != content:
            for_file(self._log, rel).debug('rewritten, %d external module(s)', len(found or ()))
        return rewritten

    def forget(self, path: str) -> None:
        if self._cache.forget(normalize_path(path)):
            self._log.debug('forgot removed file %s', path)

    def cached_paths(self) -> Tuple[str, ...]:
        """Paths whose external modules are part of the union."""
        return self._cache.paths()

    def run_pass(
        self,
        files: Mapping[str, str],
        *,
        removed: Iterable[str] = (),
        unreadable: Optional[Mapping[str, str]] = None,
    ) -> PassResult:
        """Transform a snapshot of changed files and recompute the module union.

        *unreadable* maps paths that could not be decoded to the reason; each
        one fails like a file that does not parse.
        """
        unreadable = unreadable or {}
        result = PassResult()
        report = result.report
        self._modules = ModuleSet()

        candidates: List[Tuple[str, str]] = []
        for path in sorted(files):
            report.files_total += 1
            if self.is_candidate(path):
                candidates.append((path, files[path]))
            else:
                result.excluded.append(path)
                report.files_excluded += 1

        for path in sorted(unreadable):
            if not self.is_candidate(path):
                continue
            rel = normalize_path(path)
            self._cache.record(rel, ())
            error = SourceEncodingError(unreadable[path], path=rel)
            report.files_total += 1
            report.files_failed += 1
            report.add_error(str(error))
            result.errors.append(error)
            self._log.error('✘ %s', error, extra={'context': {'path': rel}})

        with StageTimer(report, 'transform'):
            if self._workers > 1 and len(candidates) > 1:
                with ThreadPoolExecutor(max_workers=self._workers) as pool:
                    outcomes = list(pool.map(lambda item: self._transform_one(*item), candidates))
            else:
                outcomes = [self._transform_one(path, content) for path, content in candidates]

        for (path, content), (rewritten, error) in zip(candidates, outcomes):
            if error is not None:
                result.errors.append(error)
                report.files_failed += 1
                report.add_error(str(error))
                self._log.error('✘ %s', error, extra={'context': {'path': error.path}})
                continue
            result.outputs[normalize_path(path)] = rewritten
            if rewritten == content:
                report.files_unchanged += 1
            else:
                report.files_rewritten += 1

        with StageTimer(report, 'union'):
            for path in removed:
                self.forget(path)
                report.files_removed += 1
            self._modules = self._cache.union()

        report.set_modules(self._modules)
        self._log.info(
            '✔ %d script(s) rewritten, %d unchanged, %d failed; %d external module(s)',
            report.files_rewritten, report.files_unchanged, report.files_failed, len(self._modules),
        )
        result.modules = tuple(self._modules)
        return result

    def _transform_one(self, path: str, content: str) -> Tuple[Optional[str], Optional[TransformError]]:
        try:
            return self.transform(path, content), None
        except TransformError as exc:
            return None, exc

    def bootstrap(self, scripts: Sequence[ScriptRef] = ()) -> str:
        """Synthesize the loading script from the last pass's module union."""
        return self._synth.synthesize(self._modules, scripts)

    @property
    def synthesizer(self) -> BootstrapSynthesizer:
        return self._synth
