from __future__ import annotations
"""Atomic output writes: a file is either fully replaced or left untouched."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from amdbridge.logging.helpers import get_logger, trace_io


class OutputWriter:
    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('io.writer')

    def write_text(self, path: Path, text: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=str(path.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        trace_io(self._log, 'wrote file', path=str(path), chars=len(text))
        return path
