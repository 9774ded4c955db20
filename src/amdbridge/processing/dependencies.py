from __future__ import annotations
"""Dependency extraction from module-registration call sites.

Recognised shapes::

    define('app/map', ['exports', 'esri/Map'], function (exports, Map) { ... })
    define(['esri/Map'], function (Map) { ... })

A dependency is external when it equals a configured package name or starts
with that name followed by '/'.
"""

from typing import MutableSet, Optional, Sequence

from amdbridge.parsing.nodes import ArrayLiteral, CallExpression, StringLiteral


def is_external(specifier: str, packages: Sequence[str]) -> bool:
    """Return True when *specifier* belongs to one of the external *packages*."""
    for package in packages:
        if specifier == package or specifier.startswith(package + '/'):
            return True
    return False


def dependency_list(call: CallExpression) -> Optional[ArrayLiteral]:
    """Return the literal dependency array of a registration call, if any."""
    args = call.arguments
    if len(args) < 2:
        return None
    first, second = args[0], args[1]
    if isinstance(first, ArrayLiteral):
        return first
    if isinstance(second, ArrayLiteral):
        return second
    return None


def extract_external_modules(call: CallExpression, packages: Sequence[str], modules: MutableSet[str]) -> None:
    """Add every external string dependency of *call* to *modules*.

    Calls of any other shape are ignored, as are non-string elements.
    Nothing is ever removed from *modules*.
    """
    deps = dependency_list(call)
    if deps is None:
        return
    for element in deps.elements:
        if isinstance(element, StringLiteral) and is_external(element.value, packages):
            modules.add(element.value)
