from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

from amdbridge.constants import SCRIPT_SUFFIXES
from amdbridge.logging.helpers import get_logger, trace_io
from amdbridge.utils.paths import is_hidden_path, to_posix_relpath


class Snapshot(dict):
    """``{relative path: text}`` of the scripts read in one pass."""

    def __init__(self) -> None:
        super().__init__()
        self.unreadable: Dict[str, str] = {}


class OutputTreeWalker:
    """Enumerate and read the script files of a build output directory."""

    def __init__(self, *, suffixes: Sequence[str] = SCRIPT_SUFFIXES, logger: Optional[logging.Logger] = None) -> None:
        self._suffixes = tuple(s.lower() for s in suffixes)
        self._log = logger or get_logger('io.walker')

    def gather_files(self, root: Path) -> Dict[str, Path]:
        """Return ``{posix relative path: absolute path}`` for every script under *root*, sorted."""
        collected: Dict[str, Path] = {}
        if not root.is_dir():
            self._log.error('⚠  %s does not exist or is not a directory', root)
            return collected
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith('.'))
            for fn in filenames:
                fp = Path(dirpath, fn)
                rel = to_posix_relpath(fp, root)
                if is_hidden_path(Path(rel)):
                    continue
                if not fn.lower().endswith(self._suffixes):
                    continue
                collected[rel] = fp
        return dict(sorted(collected.items()))

    def read_snapshot(self, root: Path, paths: Optional[Iterable[str]] = None) -> Snapshot:
        """Read the text of every script (or only *paths*) into an immutable-by-convention snapshot.

        Scripts that are not valid UTF-8 are left out of the mapping and listed
        in ``snapshot.unreadable`` with the decoder's reason.
        """
        files = self.gather_files(root)
        if paths is not None:
            wanted = set(paths)
            files = {rel: fp for rel, fp in files.items() if rel in wanted}
        snapshot = Snapshot()
        for rel, fp in files.items():
            try:
                snapshot[rel] = fp.read_text(encoding='utf-8')
            except UnicodeDecodeError as exc:
                snapshot.unreadable[rel] = f'not valid UTF-8: {exc.reason} at byte {exc.start}'
                self._log.warning('✘ %s: non-UTF-8 script, not rewritten.', rel)
                continue
            trace_io(self._log, 'read script', path=rel, chars=len(snapshot[rel]))
        return snapshot
