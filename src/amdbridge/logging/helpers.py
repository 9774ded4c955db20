from __future__ import annotations

"""Logger naming, one-time configuration and per-file context for amdbridge.

    - get_logger: loggers live under the 'amdbridge' namespace.
    - setup_base_logger: attaches a single handler (text or JSON) to 'amdbridge'.
    - JsonLogFormatter: one JSON object per record; a record's ``context`` dict
      is emitted as ``ctx``.
    - for_file: adapter stamping every record with the output path it concerns.
    - trace_io: read/write tracing, only when AMDBRIDGE_TRACE_IO=1.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping, Optional, TextIO, Tuple

_BASE = "amdbridge"


class JsonLogFormatter(logging.Formatter):
    """Format records as ``{"ts", "level", "module", "msg", "version"[, "ctx"]}``."""

    def __init__(self) -> None:
        super().__init__()
        self._version = self._resolve_version()

    @staticmethod
    def _resolve_version() -> str:
        # Imported lazily: amdbridge/__init__ imports the modules that log.
        try:
            from amdbridge import __version__ as _v  # type: ignore
            return str(_v)
        except ImportError:
            return os.getenv("AMDBRIDGE_VERSION", "unknown")

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "ts": ts.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
            "version": self._version,
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict) and ctx:
            payload["ctx"] = ctx
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_base_logger(
    *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Configure the 'amdbridge' logger the first time; later calls only adjust the level."""
    base = logging.getLogger(_BASE)
    base.setLevel(level)
    if base.handlers:
        return base

    base.propagate = False
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonLogFormatter() if json_logs else logging.Formatter("%(levelname)s: %(message)s"))
    base.addHandler(handler)
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``amdbridge.<name>`` (names already under the namespace are kept)."""
    if not name or name == _BASE:
        return logging.getLogger(_BASE)
    if name.startswith(_BASE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_BASE}.{name}")


class FileContextAdapter(logging.LoggerAdapter):
    """Prefix messages with the output path and expose it as ``ctx.path``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        path = self.extra.get("path") if self.extra else None
        extra = dict(kwargs.get("extra") or {})
        ctx = dict(extra.get("context") or {})
        ctx.setdefault("path", path)
        extra["context"] = ctx
        kwargs["extra"] = extra
        return f"{path}: {msg}", kwargs


def for_file(logger: logging.Logger, path: str) -> FileContextAdapter:
    return FileContextAdapter(logger, {"path": path})


def is_trace_io_enabled() -> bool:
    return os.getenv("AMDBRIDGE_TRACE_IO") == "1"


def trace_io(logger: logging.Logger | logging.LoggerAdapter, message: str, **ctx: Any) -> None:
    """Debug-level I/O trace; *ctx* is rendered in the text and kept as structured context."""
    if not is_trace_io_enabled():
        return
    if ctx:
        logger.debug("%s | ctx=%r", message, ctx, extra={"context": ctx})
    else:
        logger.debug("%s", message)
