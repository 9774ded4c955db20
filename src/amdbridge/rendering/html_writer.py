from __future__ import annotations
"""
html_writer – converts the bundler's entry pages to AMD-first loading.

For a fresh page every direct ``<body>`` script is captured (in order) as a
deferred script and removed. The page then starts with, all marked
``data-amd``: the optional AMD config script, the AMD loader and the
bootstrap script (inline or written beside the page assets).

A page that already carries ``data-amd`` scripts was converted by an earlier
pass; it is rewritten only when the module union or the deferred scripts
changed since then.
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import lxml.html
from lxml.html import HtmlElement

from amdbridge.constants import (
    AMD_MARKER_ATTR,
    APP_INDEX,
    CONFIG_SCRIPT_NAME,
    LOADING_SCRIPT_NAMES,
    TEST_INDEX,
)
from amdbridge.core.errors import MissingArtifact
from amdbridge.core.interfaces.transform import SourceRewriterProtocol
from amdbridge.core.models import AmdOptions, ScriptRef
from amdbridge.core.report import BuildReport, StageTimer
from amdbridge.io.writer import OutputWriter
from amdbridge.logging.helpers import get_logger

Synthesize = Callable[[Sequence[str], Sequence[ScriptRef]], str]


@dataclass
class IndexDocumentState:
    """What the last conversion of one entry page produced."""
    relative_path: str
    scripts: Tuple[ScriptRef, ...] = ()
    fingerprint: str = ''
    emitted: Tuple[str, ...] = field(default_factory=tuple)


def fingerprint(modules: Sequence[str], scripts: Sequence[ScriptRef]) -> str:
    payload = json.dumps(
        {'modules': list(modules), 'scripts': [s.to_payload() for s in scripts]},
        sort_keys=True,
        ensure_ascii=False,
    )
    return hashlib.sha1(payload.encode('utf-8')).hexdigest()


class IndexHtmlWriter:
    def __init__(
        self,
        options: AmdOptions,
        *,
        rewriter: SourceRewriterProtocol,
        synthesize: Synthesize,
        writer: Optional[OutputWriter] = None,
        entry_points: Sequence[str] = (APP_INDEX, TEST_INDEX),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._opts = options
        self._rewriter = rewriter
        self._synthesize = synthesize
        self._log = logger or get_logger('rendering.html')
        self._writer = writer or OutputWriter(logger=self._log)
        self._entry_points = tuple(entry_points)
        self._states: Dict[str, IndexDocumentState] = {}

    @property
    def states(self) -> Mapping[str, IndexDocumentState]:
        return dict(self._states)

    def write_all(self, root: Path, modules: Sequence[str], *, report: Optional[BuildReport] = None) -> List[str]:
        """Convert every entry page present under *root*; return the pages written."""
        written: List[str] = []
        for relative_path in self._entry_points:
            try:
                if self.write_index(root, relative_path, modules, report=report):
                    written.append(relative_path)
            except MissingArtifact:
                self._log.info('skipping %s: not part of this build', relative_path)
        return written

    def write_index(
        self,
        root: Path,
        relative_path: str,
        modules: Sequence[str],
        *,
        report: Optional[BuildReport] = None,
    ) -> bool:
        """Convert one entry page.

        Returns True when the page was (re)written.

        Raises:
            MissingArtifact: the page does not exist under *root*.
        """
        source = Path(root, relative_path)
        if not source.is_file():
            raise MissingArtifact(f'{relative_path} not found under {root}')

        doc = lxml.html.document_fromstring(source.read_text(encoding='utf-8'))
        body = self._body(doc)
        converted = doc.xpath(f'//script[@{AMD_MARKER_ATTR}]')
        state = self._states.get(relative_path)

        if converted:
            if state is None:
                self._log.warning(
                    '⚠  %s already carries AMD scripts from another run; leaving it untouched', relative_path
                )
                return False
            scripts = state.scripts
        else:
            scripts = self._capture_scripts(body, relative_path)

        out_root = Path(self._opts.output_directory or root)
        # In place, an unmarked page was regenerated by the bundler and must be converted again.
        regenerated = not converted and out_root == Path(root)
        modules = list(modules)
        fp = fingerprint(modules, scripts)
        if (
            state is not None
            and state.fingerprint == fp
            and not regenerated
            and Path(out_root, relative_path).is_file()
        ):
            self._log.debug('%s unchanged (modules and scripts identical)', relative_path)
            return False

        for node in converted:
            node.drop_tree()

        emitted: List[str] = []
        elements: List[HtmlElement] = []

        config = self._config_element(out_root, emitted)
        if config is not None:
            elements.append(config)
        elements.append(self._script(src=self._opts.loader))

        if report is not None:
            with StageTimer(report, 'synthesize'):
                bootstrap = self._synthesize(modules, scripts)
        else:
            bootstrap = self._synthesize(modules, scripts)
        if self._opts.inline:
            elements.append(self._script(code=bootstrap))
        else:
            loading_rel = self._loading_script_path(relative_path)
            self._writer.write_text(out_root / loading_rel, bootstrap)
            emitted.append(loading_rel)
            elements.append(self._script(src=self._url(loading_rel)))

        for element in reversed(elements):
            body.insert(0, element)

        self._writer.write_text(out_root / relative_path, self._serialize(doc))
        self._states[relative_path] = IndexDocumentState(
            relative_path=relative_path,
            scripts=tuple(scripts),
            fingerprint=fp,
            emitted=tuple(emitted),
        )
        self._log.info('✔ %s converted (%d module(s), %d deferred script(s))', relative_path, len(modules), len(scripts))
        return True

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _body(doc: HtmlElement) -> HtmlElement:
        body = doc.find('body')
        if body is None:
            body = lxml.html.Element('body')
            doc.append(body)
        return body

    def _capture_scripts(self, body: HtmlElement, relative_path: str) -> Tuple[ScriptRef, ...]:
        captured: List[ScriptRef] = []
        for child in list(body):
            if not isinstance(child.tag, str) or child.tag.lower() != 'script':
                continue
            src = child.get('src')
            if src:
                captured.append(ScriptRef(src=src))
            else:
                code = child.text or ''
                captured.append(ScriptRef(code=self._rewriter.rewrite(code, None, path=f'{relative_path} (inline script)')))
            child.drop_tree()
        return tuple(captured)

    def _config_element(self, out_root: Path, emitted: List[str]) -> Optional[HtmlElement]:
        if self._opts.config_script is None:
            return None
        text = Path(self._opts.config_script).read_text(encoding='utf-8')
        if self._opts.inline:
            return self._script(code=text)
        rel = f'{self._opts.loading_path}/{CONFIG_SCRIPT_NAME}'
        self._writer.write_text(out_root / rel, text)
        emitted.append(rel)
        return self._script(src=self._url(rel))

    def _loading_script_path(self, relative_path: str) -> str:
        name = LOADING_SCRIPT_NAMES.get(relative_path)
        if name is None:
            stem = relative_path.rsplit('.', 1)[0].replace('/', '-')
            name = f'amd-loading-{stem}.js'
        return f'{self._opts.loading_path}/{name}'

    def _url(self, relative: str) -> str:
        return f'{self._opts.root_url.rstrip("/")}/{relative}'

    @staticmethod
    def _script(*, src: Optional[str] = None, code: Optional[str] = None) -> HtmlElement:
        element = lxml.html.Element('script')
        if src is not None:
            element.set('src', src)
        element.set(AMD_MARKER_ATTR, 'true')
        if code is not None:
            element.text = code
        element.tail = '\n'
        return element

    @staticmethod
    def _serialize(doc: HtmlElement) -> str:
        doctype = doc.getroottree().docinfo.doctype
        return lxml.html.tostring(
            doc,
            doctype=doctype or None,
            encoding='unicode',
            method='html',
        )
