"""
Cache interfaces for amdbridge.

Defines the DI-friendly surface of the per-file external module cache
implemented by `amdbridge.processing.module_cache.ExternalModuleCache`.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Tuple

from amdbridge.core.models import ModuleSet


class ModuleCacheProtocol(Protocol):
    """Contract for per-file external module bookkeeping."""

    def record(self, path: str, modules: Iterable[str]) -> None:
        """Replace the record of *path*; an empty *modules* drops it."""

    def forget(self, path: str) -> bool:
        """Drop the record of a deleted file; return whether one existed."""

    def modules_for(self, path: str) -> Tuple[str, ...]:
        ...

    def paths(self) -> Tuple[str, ...]:
        """Paths that currently hold a record."""
        ...

    def union(self) -> ModuleSet:
        """Union of every current record, in deterministic order."""
        ...

    def clear(self) -> None:
        ...
