from __future__ import annotations
"""Incremental build cache of external module specifiers.

Each file path maps to the specifiers that file contributed the last time it
was processed. A record is replaced wholesale on every re-processing and
dropped when the file contributes nothing, so the union handed to the
bootstrap synthesizer never keeps a specifier whose last user went away.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from amdbridge.core.interfaces.cache import ModuleCacheProtocol
from amdbridge.core.models import ModuleSet
from amdbridge.logging.helpers import get_logger


class ExternalModuleCache(ModuleCacheProtocol):
    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('processing.module_cache')
        self._by_path: Dict[str, Tuple[str, ...]] = {}

    def record(self, path: str, modules: Iterable[str]) -> None:
        found = tuple(ModuleSet(modules))
        previous = self._by_path.get(path)
        if not found:
            if previous is not None:
                del self._by_path[path]
                self._log.debug('%s no longer references external modules', path)
            return
        self._by_path[path] = found
        if previous != found:
            self._log.debug('%s → %s', path, ', '.join(found))

    def forget(self, path: str) -> bool:
        return self._by_path.pop(path, None) is not None

    def modules_for(self, path: str) -> Tuple[str, ...]:
        return self._by_path.get(path, ())

    def paths(self) -> Tuple[str, ...]:
        return tuple(sorted(self._by_path))

    def union(self) -> ModuleSet:
        """Recompute the set of external modules from every tracked file."""
        merged = ModuleSet()
        for path in sorted(self._by_path):
            for module in self._by_path[path]:
                merged.add(module)
        return merged

    def clear(self) -> None:
        self._by_path.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __len__(self) -> int:
        return len(self._by_path)
