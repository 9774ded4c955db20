from __future__ import annotations

import logging
import os
from typing import Optional, TextIO

from amdbridge.core.interfaces.logging import LoggerFactoryProtocol
from amdbridge.logging.helpers import get_logger, setup_base_logger


def level_from_env(default: int = logging.INFO) -> int:
    """DEBUG=1 turns on debug output for every amdbridge logger."""
    return logging.DEBUG if os.getenv("DEBUG") == "1" else default


class DefaultLoggerFactory(LoggerFactoryProtocol):
    """Configure the 'amdbridge' handler lazily, then hand out namespaced loggers."""

    def __init__(self, *, json_logs: bool = False, level: Optional[int] = None, stream: Optional[TextIO] = None) -> None:
        self._json = bool(json_logs)
        self._level = level_from_env() if level is None else int(level)
        self._stream = stream
        self._base: Optional[logging.Logger] = None

    @property
    def json_logs(self) -> bool:
        return self._json

    def configure(self) -> logging.Logger:
        if self._base is None:
            self._base = setup_base_logger(json_logs=self._json, level=self._level, stream=self._stream)
        return self._base

    def get_logger(self, name: str) -> logging.Logger:
        self.configure()
        return get_logger(name)
