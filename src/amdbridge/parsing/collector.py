from __future__ import annotations
"""
collector – one read-only walk over a tree-sitter JavaScript tree.

The walk builds the lexical scope tree and records, for the watched names
only, every identifier occurrence, every string literal whose value is a
watched literal, and every call whose callee is a watched identifier. Name
resolution happens afterwards (``Identifier.is_free``), once every hoisted
declaration has been registered.

Subtrees whose byte span contains no watched name are never entered: they
can neither declare nor reference one.
"""

import re
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any, Collection, Iterable, Iterator, List, Optional

from amdbridge.parsing.js_strings import decode_js_string
from amdbridge.parsing.nodes import (
    BLOCK,
    CLASS,
    EXPORT_SHORTHAND,
    FUNCTION,
    IMPORT_SHORTHAND,
    PLAIN,
    PROGRAM,
    SHORTHAND,
    ArrayLiteral,
    CallExpression,
    Expression,
    Identifier,
    OtherExpression,
    Scope,
    StringLiteral,
)

_FUNCTIONS = frozenset({
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'function',
    'generator_function',
    'arrow_function',
    'method_definition',
})
_HOISTED_FUNCTIONS = frozenset({'function_declaration', 'generator_function_declaration'})
_NAMED_FUNCTION_EXPRESSIONS = frozenset({'function_expression', 'function', 'generator_function'})
_BLOCK_SCOPES = frozenset({'for_statement', 'for_in_statement', 'catch_clause', 'switch_body'})
_CLASS_MEMBERS = frozenset({'method_definition', 'field_definition', 'public_field_definition'})


@dataclass
class SourceIndex:
    program: Scope
    identifiers: List[Identifier] = field(default_factory=list)
    strings: List[StringLiteral] = field(default_factory=list)
    calls: List[CallExpression] = field(default_factory=list)


class SourceCollector:
    """Collect watched identifiers, literals and call sites from one tree."""

    def __init__(
        self,
        source: bytes,
        *,
        watched: Collection[str],
        literal_values: Collection[str] = (),
        call_names: Collection[str] = (),
    ) -> None:
        self._src = source
        self._watched = frozenset(watched)
        self._literals = frozenset(literal_values)
        self._call_names = frozenset(call_names)
        self._hits = self._scan(source, self._watched)

    @staticmethod
    def _scan(source: bytes, names: Iterable[str]) -> List[int]:
        alternatives = sorted({re.escape(n.encode('utf-8')) for n in names if n}, key=len, reverse=True)
        if not alternatives:
            return []
        rx = re.compile(b'(?=(?:' + b'|'.join(alternatives) + b'))')
        return [m.start() for m in rx.finditer(source)]

    def has_candidates(self) -> bool:
        return bool(self._hits)

    def _touches(self, node: Any) -> bool:
        i = bisect_left(self._hits, node.start_byte)
        return i < len(self._hits) and self._hits[i] < node.end_byte

    def _text(self, node: Any) -> str:
        return self._src[node.start_byte:node.end_byte].decode('utf-8')

    # ------------------------------------------------------------------ #
    # Walk
    # ------------------------------------------------------------------ #
    def collect(self, root: Any) -> SourceIndex:
        program = Scope(PROGRAM)
        index = SourceIndex(program=program)
        stack = [(root, program)]
        while stack:
            node, scope = stack.pop()
            if not self._touches(node):
                continue
            kind = node.type

            if kind == 'identifier':
                self._identifier(index, node, scope, PLAIN)
                continue
            if kind in ('shorthand_property_identifier', 'shorthand_property_identifier_pattern'):
                self._identifier(index, node, scope, SHORTHAND)
                continue
            if kind == 'string':
                self._string(index, node)
                continue

            if kind == 'call_expression':
                self._call(index, node, scope)
            elif kind == 'variable_declaration':
                self._declare_declarators(node, scope.hoisting_target())
            elif kind == 'lexical_declaration':
                self._declare_declarators(node, scope)
            elif kind == 'import_statement':
                self._declare_imports(node, program)

            inner = self._enter(node, scope)
            name_node = node.child_by_field_name('name') if kind in _HOISTED_FUNCTIONS or kind == 'class_declaration' else None
            for child in reversed(node.named_children):
                if name_node is not None and _same(child, name_node):
                    stack.append((child, scope))
                else:
                    stack.append((child, inner))
        return index

    def _enter(self, node: Any, scope: Scope) -> Scope:
        """Return the scope that *node*'s children live in, declaring what it binds."""
        kind = node.type
        if kind in _FUNCTIONS:
            inner = Scope(FUNCTION, scope)
            name = node.child_by_field_name('name')
            if name is not None and name.type == 'identifier':
                if kind in _HOISTED_FUNCTIONS:
                    self._declare(scope, name)
                elif kind in _NAMED_FUNCTION_EXPRESSIONS:
                    self._declare(inner, name)
            for field_name in ('parameters', 'parameter'):
                params = node.child_by_field_name(field_name)
                if params is not None:
                    self._declare_pattern(inner, params)
            return inner
        if kind == 'class_static_block':
            return Scope(FUNCTION, scope)
        if kind in ('class_declaration', 'class'):
            inner = Scope(CLASS, scope)
            name = node.child_by_field_name('name')
            if name is not None:
                self._declare(scope if kind == 'class_declaration' else inner, name)
            return inner
        if kind == 'statement_block':
            parent = node.parent
            if parent is not None and (parent.type in _FUNCTIONS or parent.type == 'class_static_block'):
                return scope
            return Scope(BLOCK, scope)
        if kind in _BLOCK_SCOPES:
            inner = Scope(BLOCK, scope)
            if kind == 'catch_clause':
                param = node.child_by_field_name('parameter')
                if param is not None:
                    self._declare_pattern(inner, param)
            elif kind == 'for_in_statement':
                declared = node.child_by_field_name('kind')
                left = node.child_by_field_name('left')
                if declared is not None and left is not None:
                    target = scope.hoisting_target() if declared.type == 'var' else inner
                    self._declare_pattern(target, left)
            return inner
        return scope

    # ------------------------------------------------------------------ #
    # Declarations
    # ------------------------------------------------------------------ #
    def _declare(self, scope: Scope, name_node: Any) -> None:
        name = self._text(name_node)
        if name in self._watched:
            scope.declare(name)

    def _declare_pattern(self, scope: Scope, pattern: Any) -> None:
        for node in _binding_nodes(pattern):
            self._declare(scope, node)

    def _declare_declarators(self, declaration: Any, scope: Scope) -> None:
        for declarator in declaration.named_children:
            if declarator.type != 'variable_declarator':
                continue
            name = declarator.child_by_field_name('name')
            if name is not None:
                self._declare_pattern(scope, name)

    def _declare_imports(self, statement: Any, program: Scope) -> None:
        stack = list(statement.named_children)
        while stack:
            node = stack.pop()
            if node.type == 'import_clause' or node.type == 'named_imports':
                stack.extend(node.named_children)
            elif node.type == 'namespace_import':
                stack.extend(c for c in node.named_children if c.type == 'identifier')
            elif node.type == 'import_specifier':
                local = node.child_by_field_name('alias') or node.child_by_field_name('name')
                if local is not None and local.type == 'identifier':
                    self._declare(program, local)
            elif node.type == 'identifier':
                self._declare(program, node)

    # ------------------------------------------------------------------ #
    # Occurrences
    # ------------------------------------------------------------------ #
    def _identifier(self, index: SourceIndex, node: Any, scope: Scope, form: str) -> None:
        name = self._text(node)
        if name not in self._watched:
            return
        parent = node.parent
        ptype = parent.type if parent is not None else ''

        if ptype.startswith('jsx_'):
            return
        if ptype in _CLASS_MEMBERS:
            for field_name in ('name', 'property'):
                member = parent.child_by_field_name(field_name)
                if member is not None and _same(member, node):
                    return
        if ptype == 'import_specifier':
            if _same(parent.child_by_field_name('name'), node):
                if parent.child_by_field_name('alias') is not None:
                    return
                form = IMPORT_SHORTHAND
        elif ptype == 'export_specifier':
            if _is_reexport(parent):
                return
            alias = parent.child_by_field_name('alias')
            if alias is not None and _same(alias, node):
                return
            if alias is None:
                form = EXPORT_SHORTHAND

        index.identifiers.append(Identifier(name, node.start_byte, node.end_byte, scope, form))

    def _literal(self, node: Any) -> Optional[StringLiteral]:
        raw = self._text(node)
        try:
            value = decode_js_string(raw)
        except ValueError:
            return None
        parent = node.parent
        computed = (
            parent is not None
            and parent.type == 'subscript_expression'
            and _same(parent.child_by_field_name('index'), node)
        )
        return StringLiteral(value, node.start_byte, node.end_byte, raw[0], computed)

    def _string(self, index: SourceIndex, node: Any) -> None:
        parent = node.parent
        if parent is not None and parent.type.startswith('jsx_'):
            return
        literal = self._literal(node)
        if literal is not None and literal.value in self._literals:
            index.strings.append(literal)

    def _expression(self, node: Any, scope: Scope) -> Expression:
        kind = node.type
        if kind == 'string':
            literal = self._literal(node)
            if literal is not None:
                return literal
        elif kind == 'array':
            elements = tuple(self._expression(c, scope) for c in node.named_children if c.type != 'comment')
            return ArrayLiteral(elements, node.start_byte, node.end_byte)
        elif kind == 'identifier':
            return Identifier(self._text(node), node.start_byte, node.end_byte, scope)
        return OtherExpression(kind, node.start_byte, node.end_byte)

    def _call(self, index: SourceIndex, node: Any, scope: Scope) -> None:
        fn = node.child_by_field_name('function')
        if fn is None or fn.type != 'identifier':
            return
        name = self._text(fn)
        if name not in self._call_names:
            return
        args = node.child_by_field_name('arguments')
        if args is None or args.type != 'arguments':
            return
        arguments = tuple(self._expression(c, scope) for c in args.named_children if c.type != 'comment')
        callee = Identifier(name, fn.start_byte, fn.end_byte, scope)
        index.calls.append(CallExpression(callee, arguments, node.start_byte, node.end_byte))


def _same(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def _is_reexport(specifier: Any) -> bool:
    node = specifier.parent
    while node is not None and node.type != 'export_statement':
        node = node.parent
    return node is not None and node.child_by_field_name('source') is not None


def _binding_nodes(pattern: Any) -> Iterator[Any]:
    """Yield the identifier nodes a parameter list or destructuring pattern binds.

    Default values and computed keys are expressions, not bindings, and are
    skipped.
    """
    stack = [pattern]
    while stack:
        node = stack.pop()
        kind = node.type
        if kind in ('identifier', 'shorthand_property_identifier_pattern'):
            yield node
        elif kind in ('assignment_pattern', 'object_assignment_pattern'):
            left = node.child_by_field_name('left')
            if left is not None:
                stack.append(left)
        elif kind == 'pair_pattern':
            value = node.child_by_field_name('value')
            if value is not None:
                stack.append(value)
        elif kind in ('object_pattern', 'array_pattern', 'rest_pattern', 'formal_parameters'):
            stack.extend(node.named_children)
