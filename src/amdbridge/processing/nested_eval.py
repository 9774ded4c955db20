from __future__ import annotations
"""Normalization of code shipped as ``eval('...')`` string payloads.

Some loader shims inject a secondary bundle of module definitions as a
runtime-evaluated string. The payload is rewritten like an independent
source file and the literal is replaced by an equivalent literal holding the
rewritten code.
"""

import logging
from typing import Callable, MutableSet, Optional

from amdbridge.core.errors import ParseError
from amdbridge.logging.helpers import get_logger
from amdbridge.parsing.js_strings import encode_js_string
from amdbridge.parsing.nodes import CallExpression, StringLiteral
from amdbridge.processing.edits import Edit

RewriteFn = Callable[[str, Optional[MutableSet[str]]], str]


class NestedEvalNormalizer:
    def __init__(self, rewrite: RewriteFn, *, logger: Optional[logging.Logger] = None) -> None:
        self._rewrite = rewrite
        self._log = logger or get_logger('processing.nested_eval')

    @staticmethod
    def payload(call: CallExpression) -> Optional[StringLiteral]:
        """Return the single string-literal argument of an eval call, if that is its shape."""
        if len(call.arguments) != 1:
            return None
        arg = call.arguments[0]
        return arg if isinstance(arg, StringLiteral) else None

    def normalize(self, call: CallExpression, modules: Optional[MutableSet[str]]) -> Optional[Edit]:
        literal = self.payload(call)
        if literal is None:
            return None
        try:
            rewritten = self._rewrite(literal.value, modules)
        except ParseError as exc:
            raise ParseError(
                f'invalid code in eval payload at byte {literal.start}: {exc.message}',
                line=exc.line,
                column=exc.column,
            ) from exc
        if rewritten == literal.value:
            return None
        self._log.debug('rewrote eval payload at byte %d (%d chars)', literal.start, len(literal.value))
        return Edit(literal.start, literal.end, encode_js_string(rewritten, literal.quote))
