from __future__ import annotations
"""
rewriter – scope-aware renaming of the globals shared with the AMD loader.

Every occurrence of a reserved name that resolves to the file-level binding
(or to no binding at all) is replaced by its synonym; locally shadowed
occurrences, member properties and class member names are left alone.
String literals spelling a reserved name are rewritten to the synonym with
the same quote character. Comments and formatting are preserved byte for
byte outside the rewritten spans.

While walking, registration calls feed the external-module accumulator and
``eval('...')`` payloads are rewritten recursively.
"""

import logging
import re
from typing import List, MutableSet, Optional, Sequence

from amdbridge.constants import EVAL_NAME
from amdbridge.core.errors import ParseError, RenameCollisionError, TransformError
from amdbridge.core.models import RenameTable
from amdbridge.logging.helpers import get_logger
from amdbridge.parsing.collector import SourceCollector, SourceIndex
from amdbridge.parsing.javascript import JavaScriptParser
from amdbridge.parsing.js_strings import encode_js_string
from amdbridge.parsing.nodes import EXPORT_SHORTHAND, IMPORT_SHORTHAND, SHORTHAND, Identifier
from amdbridge.processing.dependencies import extract_external_modules
from amdbridge.processing.edits import Edit, apply_edits
from amdbridge.processing.nested_eval import NestedEvalNormalizer


_LONE_SURROGATE = re.compile(r'[\ud800-\udfff]')


class IdentifierRewriter:
    """Rewrite one JavaScript source at a time.

    Instances hold no per-file state and may be shared by concurrent
    transforms.
    """

    def __init__(
        self,
        *,
        renames: Optional[RenameTable] = None,
        packages: Sequence[str] = (),
        rewrite_computed_members: bool = False,
        parser: Optional[JavaScriptParser] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._renames = renames or RenameTable.default()
        self._packages = tuple(packages)
        self._computed = bool(rewrite_computed_members)
        self._log = logger or get_logger('processing.rewriter')
        self._parser = parser or JavaScriptParser(logger=self._log)
        self._registration = frozenset(self._renames.registration_names())
        self._watched = (
            frozenset(self._renames.identifiers)
            | frozenset(self._renames.synonyms)
            | self._registration
            | {EVAL_NAME}
        )
        self._eval = NestedEvalNormalizer(self._rewrite_payload, logger=self._log)

    @property
    def renames(self) -> RenameTable:
        return self._renames

    def rewrite(self, code: str, modules: Optional[MutableSet[str]] = None, *, path: Optional[str] = None) -> str:
        """Return *code* with free reserved globals renamed.

        Args:
            code: Complete source text of one file.
            modules: Accumulator receiving external module specifiers; when
                None, dependency tracking is skipped.
            path: Used in error messages only.

        Raises:
            ParseError: *code* is not valid JavaScript.
            RenameCollisionError: a synonym is bound locally where a free
                reference would be renamed to it.
        """
        try:
            source = code.encode('utf-8')
        except UnicodeEncodeError as exc:
            raise ParseError(f'source is not encodable as UTF-8: {exc.reason} at offset {exc.start}', path=path) from exc
        tree = self._parser.parse(source, path=path)
        collector = SourceCollector(
            source,
            watched=self._watched,
            literal_values=self._renames.literals.keys(),
            call_names=self._registration | {EVAL_NAME},
        )
        if not collector.has_candidates():
            return code

        index = collector.collect(tree.root_node)
        try:
            edits = self._edits(index, modules, path)
        except TransformError as exc:
            if path is not None:
                exc.with_path(path)
            raise
        if not edits:
            return code
        return apply_edits(source, edits).decode('utf-8')

    def _rewrite_payload(self, code: str, modules: Optional[MutableSet[str]]) -> str:
        # Decoded payloads may hold lone surrogates; written as escapes they
        # evaluate to the same code units.
        escaped = _LONE_SURROGATE.sub(lambda m: f'\\u{ord(m.group()):04x}', code)
        rewritten = self.rewrite(escaped, modules)
        return code if rewritten == escaped else rewritten

    def _edits(self, index: SourceIndex, modules: Optional[MutableSet[str]], path: Optional[str]) -> List[Edit]:
        edits: List[Edit] = []

        for ident in index.identifiers:
            synonym = self._renames.identifiers.get(ident.name)
            if synonym is None or not ident.is_free:
                continue
            if ident.scope.binds_locally(synonym):
                raise RenameCollisionError(
                    f'{ident.name!r} at byte {ident.start} would be captured by a local {synonym!r}',
                    path=path,
                )
            edits.append(Edit(ident.start, ident.end, self._renamed(ident, synonym)))

        payloads = set()
        for call in index.calls:
            if not call.callee.is_free:
                continue
            if call.callee.name == EVAL_NAME:
                literal = self._eval.payload(call)
                if literal is None:
                    continue
                payloads.add((literal.start, literal.end))
                edit = self._eval.normalize(call, modules)
                if edit is not None:
                    edits.append(edit)
            elif modules is not None:
                extract_external_modules(call, self._packages, modules)

        for literal in index.strings:
            if (literal.start, literal.end) in payloads:
                continue
            if literal.computed_key and not self._computed:
                continue
            replacement = self._renames.literals.get(literal.value)
            if replacement is not None:
                edits.append(Edit(literal.start, literal.end, encode_js_string(replacement, literal.quote)))

        return edits

    @staticmethod
    def _renamed(ident: Identifier, synonym: str) -> str:
        if ident.form == SHORTHAND:
            return f'{ident.name}: {synonym}'
        if ident.form == IMPORT_SHORTHAND:
            return f'{ident.name} as {synonym}'
        if ident.form == EXPORT_SHORTHAND:
            return f'{synonym} as {ident.name}'
        return synonym
