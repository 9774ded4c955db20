from __future__ import annotations
"""tree-sitter front end for JavaScript sources.

Parsers are kept per thread: a tree-sitter ``Parser`` must not be shared by
concurrently running transforms.
"""

import logging
import threading
from typing import Any, Optional

from tree_sitter_language_pack import get_parser

from amdbridge.core.errors import ParseError
from amdbridge.logging.helpers import get_logger

_LANGUAGE = 'javascript'


class JavaScriptParser:
    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('parsing.javascript')
        self._local = threading.local()

    def _parser(self) -> Any:
        parser = getattr(self._local, 'parser', None)
        if parser is None:
            parser = get_parser(_LANGUAGE)
            self._local.parser = parser
        return parser

    def parse(self, source: bytes, *, path: Optional[str] = None) -> Any:
        """Parse *source* and return the tree-sitter tree.

        Raises:
            ParseError: if the tree contains error or missing nodes.
        """
        tree = self._parser().parse(source)
        root = tree.root_node
        if root.has_error:
            raise self._error_for(root, source, path)
        return tree

    @staticmethod
    def _first_error(node: Any) -> Any:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == 'ERROR' or current.is_missing:
                return current
            stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
        return node

    def _error_for(self, root: Any, source: bytes, path: Optional[str]) -> ParseError:
        bad = self._first_error(root)
        row, col = bad.start_point
        if bad.is_missing:
            message = f'missing {bad.type!r}'
        else:
            snippet = source[bad.start_byte:bad.end_byte][:40].decode('utf-8', 'replace')
            message = f'unexpected input {snippet!r}' if snippet else 'unexpected end of input'
        self._log.debug('parse failure in %s at %d:%d (%s)', path or '<source>', row + 1, col + 1, message)
        return ParseError(message, path=path, line=row + 1, column=col + 1)
