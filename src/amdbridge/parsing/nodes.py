from __future__ import annotations
"""Syntax nodes and lexical scopes seen by the rewriting engine.

Only the handful of node kinds the engine reasons about are modelled; every
other expression collapses into :class:`OtherExpression`. Offsets are UTF-8
byte offsets into the parsed source.
"""

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple, Union

# Scope kinds
PROGRAM = 'program'
FUNCTION = 'function'
BLOCK = 'block'
CLASS = 'class'

# Identifier forms that need more than a plain name swap when renamed.
PLAIN = 'plain'
SHORTHAND = 'shorthand'            # {define} / var {define} = o
IMPORT_SHORTHAND = 'import'        # import {define} from 'm'
EXPORT_SHORTHAND = 'export'        # export {define}


@dataclass(eq=False)
class Scope:
    kind: str
    parent: Optional['Scope'] = None
    names: Set[str] = field(default_factory=set)

    @property
    def is_file_level(self) -> bool:
        return self.kind == PROGRAM

    def declare(self, name: str) -> None:
        self.names.add(name)

    def hoisting_target(self) -> 'Scope':
        """Nearest scope that receives ``var`` and function-level bindings."""
        scope = self
        while scope.kind not in (FUNCTION, PROGRAM) and scope.parent is not None:
            scope = scope.parent
        return scope

    def lookup(self, name: str) -> Optional['Scope']:
        """Return the scope that binds *name*, or None when it is an implicit global."""
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.names:
                return scope
            scope = scope.parent
        return None

    def binds_locally(self, name: str) -> bool:
        """True when *name* is bound in this scope chain below file level."""
        binding = self.lookup(name)
        return binding is not None and not binding.is_file_level


@dataclass(frozen=True)
class Identifier:
    name: str
    start: int
    end: int
    scope: Scope
    form: str = PLAIN

    @property
    def is_free(self) -> bool:
        return not self.scope.binds_locally(self.name)


@dataclass(frozen=True)
class StringLiteral:
    value: str
    start: int
    end: int
    quote: str
    computed_key: bool = False


@dataclass(frozen=True)
class ArrayLiteral:
    elements: Tuple['Expression', ...]
    start: int
    end: int


@dataclass(frozen=True)
class OtherExpression:
    kind: str
    start: int
    end: int


Expression = Union[Identifier, StringLiteral, ArrayLiteral, OtherExpression]


@dataclass(frozen=True)
class CallExpression:
    callee: Identifier
    arguments: Tuple[Expression, ...]
    start: int
    end: int
